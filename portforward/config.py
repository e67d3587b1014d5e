import collections

from eventlet.green import socket

__all__ = ['Address', 'Config', 'parse_address', 'resolve']

DEFAULT_KEEPALIVE = 30
DEFAULT_BACKLOG = 50


class Address(collections.namedtuple('Address', ('host', 'port', 'family'))):
    """A resolved socket address."""
    __slots__ = ()

    @property
    def sockaddr(self):
        return (self.host, self.port)

    def __str__(self):
        if self.family == socket.AF_INET6:
            return '[%s]:%s' % (self.host, self.port)
        return '%s:%s' % (self.host, self.port)


def parse_address(text):
    """Split ``host:port`` (or ``[host]:port`` for IPv6) into a
    ``(host, port)`` tuple.  Raises :class:`ValueError` on malformed input.
    """
    host, sep, port = text.strip().rpartition(':')
    if not sep or not host:
        raise ValueError('expected host:port, got {0!r}'.format(text))
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    elif ':' in host:
        raise ValueError('IPv6 address must be bracketed, got {0!r}'.format(text))
    try:
        port = int(port)
    except ValueError:
        raise ValueError('invalid port in {0!r}'.format(text))
    if not 0 <= port <= 65535:
        raise ValueError('port out of range in {0!r}'.format(text))
    return host, port


def resolve(text):
    """Parse *text* and resolve it to an :class:`Address`.  Host names go
    through the green resolver, so this may suspend the calling greenthread.
    """
    host, port = parse_address(text)
    try:
        infos = socket.getaddrinfo(host, port, 0, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError('cannot resolve {0!r}: {1}'.format(text, e))
    family, _, _, _, sockaddr = infos[0]
    return Address(sockaddr[0], sockaddr[1], family)


_Config = collections.namedtuple(
    'Config',
    ('source', 'destination', 'nodelay', 'keepalive', 'max_connections', 'backlog'))


class Config(_Config):
    """Immutable forwarder settings, shared read-only by every session.

    *source* and *destination* may be :class:`Address` instances or
    ``host:port`` strings, which are resolved on construction.

    :param nodelay: set ``TCP_NODELAY`` on both sockets of a session.
    :param keepalive: keepalive interval in seconds; 0 disables keepalive.
    :param max_connections: ceiling on simultaneous sessions; 0 means
        unbounded.
    :param backlog: listen backlog for the source socket.
    """
    __slots__ = ()

    def __new__(cls, source, destination, nodelay=False, keepalive=DEFAULT_KEEPALIVE,
                max_connections=0, backlog=DEFAULT_BACKLOG):
        for name, value in (('keepalive', keepalive),
                            ('max_connections', max_connections),
                            ('backlog', backlog)):
            try:
                value = int(value)
            except (TypeError, ValueError) as e:
                raise TypeError('Config() expect {0} :: int, actual: {1} {2}'.format(
                    name, type(value), e))
            if value < 0:
                raise ValueError('Config() expect {0} >= 0, actual: {1!r}'.format(name, value))
        if not isinstance(source, Address):
            source = resolve(source)
        if not isinstance(destination, Address):
            destination = resolve(destination)
        return super(Config, cls).__new__(
            cls, source, destination, bool(nodelay), int(keepalive),
            int(max_connections), int(backlog))
