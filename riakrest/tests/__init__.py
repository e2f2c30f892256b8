import logging
import os
import socket
import sys
import threading

from collections import namedtuple

from riakrest.client import RiakClient
from riakrest.transports.http.headers import HttpHeaders

distutils_debug = os.environ.get('DISTUTILS_DEBUG', '0')
if distutils_debug == '1':
    logger = logging.getLogger()
    logger.level = logging.DEBUG
    logger.addHandler(logging.StreamHandler(sys.stdout))

#: A request as seen by :class:`FakeServer`
FakeRequest = namedtuple('FakeRequest', ['method', 'path', 'headers', 'body'])

REASONS = {200: 'OK', 201: 'Created', 204: 'No Content',
           300: 'Multiple Choices', 304: 'Not Modified',
           400: 'Bad Request', 404: 'Not Found', 412: 'Precondition Failed',
           500: 'Internal Server Error', 503: 'Service Unavailable'}


class FakeResponse(object):
    """
    Quacks like :class:`http.client.HTTPResponse` for the parts the
    transport reads.
    """

    def __init__(self, status, headers=None, body=b'', version=11):
        self.status = status
        self.reason = REASONS.get(status, 'Unknown')
        self.version = version
        if headers is None:
            headers = []
        elif hasattr(headers, 'items'):
            headers = list(headers.items())
        self._headers = headers
        if isinstance(body, str):
            body = body.encode('utf-8')
        self._body = body

    def getheaders(self):
        return list(self._headers)

    def read(self):
        return self._body

    def close(self):
        pass


class FakeServer(object):
    """
    Scripted stand-in for a Riak node. Responses are registered by
    method and path; a path with a query string only matches that exact
    query, a bare path matches any query. Every request is recorded.
    Unknown resources answer ``404``.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []
        self._lock = threading.Lock()

    def respond(self, method, path, status=200, headers=None, body=b''):
        self.routes[(method, path)] = FakeResponse(status, headers, body)
        return self

    def respond_json(self, method, path, body, status=200, headers=None):
        headers = list((headers or {}).items())
        headers.append(('Content-Type', 'application/json'))
        return self.respond(method, path, status, headers, body)

    def refuse(self, method, path):
        """
        Makes requests to the resource fail as if the connection was
        refused.
        """
        self.routes[(method, path)] = socket.error(111,
                                                   'Connection refused')
        return self

    def handle(self, request):
        with self._lock:
            self.requests.append(request)
            route = self.routes.get((request.method, request.path))
            if route is None:
                bare = request.path.split('?', 1)[0]
                route = self.routes.get((request.method, bare))
        if route is None:
            return FakeResponse(404, [('Content-Type', 'text/plain')],
                                b'not found\n')
        if isinstance(route, Exception):
            raise route
        return route

    @property
    def last_request(self):
        return self.requests[-1]

    def requests_for(self, method, path=None):
        return [r for r in self.requests
                if r.method == method and
                (path is None or r.path.split('?', 1)[0] == path)]

    def connection_class(self):
        server = self

        class BoundFakeConnection(FakeHTTPConnection):
            pass

        BoundFakeConnection.server = server
        return BoundFakeConnection


class FakeHTTPConnection(object):
    """
    Implements the subset of :class:`http.client.HTTPConnection` used
    by the transport, handing each request to a :class:`FakeServer`.
    """

    server = None

    def __init__(self, host, port=None, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._method = None
        self._path = None
        self._headers = HttpHeaders()
        self._body = None
        self.closed = False

    def putrequest(self, method, url, skip_host=False,
                   skip_accept_encoding=False):
        self._method = method
        self._path = url

    def putheader(self, name, value):
        self._headers.add(name, value)

    def endheaders(self, message_body=None):
        self._body = message_body

    def getresponse(self):
        return self.server.handle(FakeRequest(self._method, self._path,
                                              self._headers, self._body))

    def close(self):
        self.closed = True


def make_client(server, **options):
    """
    Builds a client whose every request goes to ``server``.
    """
    return RiakClient(connection_class=server.connection_class(), **options)
