import socket

from http.client import HTTPConnection, HTTPSConnection

from riakrest.transports.http.transport import HttpTransport


class NoNagleHTTPConnection(HTTPConnection):
    """
    Setup a connection class which does not use Nagle - deal with
    latency on PUT requests lower than MTU
    """
    def connect(self):
        """
        Set TCP_NODELAY on socket
        """
        HTTPConnection.connect(self)
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)


class NoNagleHTTPSConnection(HTTPSConnection):
    """
    The HTTPS counterpart of :class:`NoNagleHTTPConnection`, verifying
    the server certificate against the default trust store.
    """
    def connect(self):
        HTTPSConnection.connect(self)
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)


def connection_class_for(config):
    """
    Picks the connection class matching the configured scheme.
    """
    if config.ssl:
        return NoNagleHTTPSConnection
    return NoNagleHTTPConnection


__all__ = ['HttpTransport', 'NoNagleHTTPConnection',
           'NoNagleHTTPSConnection', 'connection_class_for']
