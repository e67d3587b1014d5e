import errno
import sys

from eventlet import convenience
from eventlet import greenpool
from eventlet.green import socket
from eventlet.support import get_errno

from portforward import config as _config
from portforward import logutil
from portforward import session

__all__ = ['listen', 'peer_name', 'Forwarder']

# errors on a single accept that leave the listening socket usable
ACCEPT_ERRNO = set((errno.EPIPE, errno.ECONNRESET, errno.ECONNABORTED))

UNKNOWN_PEER = '<unknown>'


def listen(config):
    """Bind and listen on ``config.source``.  Raises :class:`socket.error`
    if the address can't be bound; callers treat that as fatal."""
    return convenience.listen(config.source.sockaddr,
                              family=config.source.family,
                              backlog=config.backlog,
                              reuse_port=False)


def format_sockaddr(addr, family):
    return str(_config.Address(addr[0], addr[1], family))


def peer_name(sock):
    try:
        return format_sockaddr(sock.getpeername(), sock.family)
    except socket.error:
        return UNKNOWN_PEER


class Forwarder(object):
    """Accepts connections on the source address and runs a
    :func:`~portforward.session.forward` session for each one in its own
    greenthread.

    Sessions run in a :class:`~eventlet.GreenPool` sized by
    ``config.max_connections``.  With the default of 0 the pool is
    effectively unbounded; otherwise the accept loop stalls while the pool
    is full and resumes as sessions finish.
    """

    def __init__(self, config, log=None, debug=False):
        self.config = config
        self.log = logutil.get_logger(log, debug)
        self.pool = greenpool.GreenPool(config.max_connections or sys.maxsize)

    def running(self):
        """Number of sessions currently in progress."""
        return self.pool.running()

    def handle(self, conn, peer):
        # a failed session ends here; it never reaches the accept loop
        try:
            session.forward(conn, self.config, self.log)
        except Exception as e:
            self.log.error('Disconnected with error: %s (%s)', e, peer)
        else:
            self.log.info('Disconnected (%s)', peer)

    def serve(self, sock):
        """Accept forever on *sock*.  Only returns by raising: a fatal
        accept error, or :class:`KeyboardInterrupt` / :class:`SystemExit`."""
        self.log.info('Listening on %s -> %s',
                      format_sockaddr(sock.getsockname(), sock.family),
                      self.config.destination)
        while True:
            try:
                conn, _ = sock.accept()
            except socket.error as e:
                if get_errno(e) not in ACCEPT_ERRNO:
                    raise
                self.log.debug('accept failed: %s', e)
                continue
            peer = peer_name(conn)
            self.log.info('Connected (%s)', peer)
            self.pool.spawn_n(self.handle, conn, peer)

    def run(self):
        sock = listen(self.config)
        try:
            self.serve(sock)
        finally:
            sock.close()
