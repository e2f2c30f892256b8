import logging
import socket
import time

from collections import namedtuple
from http.client import HTTPConnection, HTTPException

from riakrest.transports.http.headers import HttpHeaders, parse_headers

#: The response envelope handed from the connection to the codec:
#: status code, parsed :class:`HttpHeaders` and the raw body bytes.
HttpResponse = namedtuple('HttpResponse', ['status', 'headers', 'body'])

DEFAULT_ACCEPT = 'multipart/mixed, application/json, */*;q=0.5'


class HttpConnection(object):
    """
    Connection and low-level request methods for HttpTransport.

    Every request opens its own connection, which is closed once the
    response body has been read.
    """

    def _request(self, method, uri, headers=None, body=None):
        """
        Given a Method, URL, Headers, and Body, perform and HTTP
        request, and return an :class:`HttpResponse`, or ``None``
        when the server could not be reached or the exchange broke
        off midway.

        Responses with any status, including 4xx and 5xx, are
        returned as-is.
        """
        if headers is None:
            headers = HttpHeaders()
        elif not isinstance(headers, HttpHeaders):
            headers = HttpHeaders(headers)
        if 'Accept' not in headers:
            headers['Accept'] = DEFAULT_ACCEPT

        if isinstance(body, str):
            body = body.encode('utf-8')
        if body is None and method in ('POST', 'PUT'):
            body = b''

        logging.debug('%s %s%s', method, self.base_url(), uri)
        start = time.time()
        connection = self._connect()
        response = None
        try:
            connection.putrequest(method, uri, skip_accept_encoding=True)
            for name, value in headers.items():
                connection.putheader(name, value)
            if body is not None:
                connection.putheader('Content-Length', str(len(body)))
            connection.endheaders(body)

            response = connection.getresponse()
            raw_headers = self._raw_headers(response)
            response_body = response.read()
        except (socket.error, HTTPException) as err:
            logging.error('%s %s%s failed: %r', method, self.base_url(),
                          uri, err)
            return None
        finally:
            if response is not None:
                response.close()
            connection.close()

        if self._config.enable_profiling:
            logging.debug('%s %s took %.4f seconds', method, uri,
                          time.time() - start)

        return HttpResponse(response.status, parse_headers(raw_headers),
                            response_body)

    def _raw_headers(self, response):
        """
        Rebuilds the CRLF-separated header block, status line first,
        from a response object.
        """
        version = '1.0' if getattr(response, 'version', 11) == 10 else '1.1'
        lines = ['HTTP/%s %d %s' % (version, response.status,
                                    response.reason or '')]
        for name, value in response.getheaders():
            lines.append('%s: %s' % (name, value))
        return '\r\n'.join(lines) + '\r\n'

    def _connect(self):
        """
        Use the appropriate connection class for a single request.
        """
        return self._connection_class(host=self._config.host,
                                      port=self._config.port,
                                      timeout=self._config.timeout)

    # These are set by the HttpTransport initializer
    _connection_class = HTTPConnection
    _config = None
