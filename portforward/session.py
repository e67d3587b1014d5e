"""One forwarding session: an accepted connection, its outbound twin, and
the two greenthreads copying bytes between them.

The session ends as soon as either direction finishes.  The other
direction is killed rather than drained, so bytes still in flight on that
side may be dropped.
"""
import sys

from eventlet import convenience
from eventlet import event
from eventlet import greenio
from eventlet import greenthread
from eventlet import hubs
from eventlet.green import socket
from eventlet.support import get_errno

from portforward import logutil
from portforward import sockopt

__all__ = ['ReadHalf', 'WriteHalf', 'split', 'copy', 'forward', 'UPSTREAM', 'DOWNSTREAM']

DEFAULT_BUFFER_SIZE = 65536

UPSTREAM = 'upstream'
DOWNSTREAM = 'downstream'


class ReadHalf(object):
    """The receiving side of a connection.

    Reads go to the underlying non-blocking socket rather than through
    the green ``recv``, which reports a connection reset as end-of-stream.
    Here a reset raises, like any other I/O error.
    """

    def __init__(self, sock):
        self._sock = sock
        self.bytes_read = 0

    def read(self, size):
        fd = self._sock.fd
        while True:
            try:
                data = fd.recv(size)
            except socket.error as e:
                if get_errno(e) not in greenio.SOCKET_BLOCKING:
                    raise
            else:
                self.bytes_read += len(data)
                return data
            hubs.trampoline(fd, read=True)


class WriteHalf(object):
    """The sending side of a connection."""

    def __init__(self, sock):
        self._sock = sock
        self.bytes_written = 0

    def write(self, data):
        self._sock.sendall(data)
        self.bytes_written += len(data)


def split(sock):
    """Split a connected socket into a :class:`ReadHalf` and a
    :class:`WriteHalf` so the two can be driven by different greenthreads.
    The halves do not own the socket; closing it is the caller's job.
    """
    return ReadHalf(sock), WriteHalf(sock)


def copy(reader, writer, bufsize=DEFAULT_BUFFER_SIZE):
    """Copy from *reader* to *writer* until *reader* hits end-of-stream.
    Returns the number of bytes copied; I/O errors propagate."""
    copied = 0
    while True:
        data = reader.read(bufsize)
        if not data:
            return copied
        writer.write(data)
        copied += len(data)


def _direction(name, reader, writer, done):
    try:
        copied = copy(reader, writer)
    except Exception:
        if not done.ready():
            done.send_exception(*sys.exc_info())
    else:
        if not done.ready():
            done.send((name, copied))


def forward(conn, config, log=None):
    """Forward the accepted socket *conn* to ``config.destination``.

    Blocks the calling greenthread until the first direction finishes.
    Returns ``(direction, bytes_copied)`` for the direction that reached
    end-of-stream first, or raises the error that ended it.  A failed
    connect to the destination is raised too.  Both sockets are closed
    before this returns, whatever the outcome.
    """
    log = logutil.get_logger(log)
    sockets = [conn]
    directions = []
    try:
        sockopt.apply(conn, config, log)
        remote = convenience.connect(config.destination.sockaddr,
                                     family=config.destination.family)
        sockets.append(remote)
        sockopt.apply(remote, config, log)

        inbound_r, inbound_w = split(conn)
        outbound_r, outbound_w = split(remote)
        done = event.Event()
        directions.append(
            greenthread.spawn(_direction, UPSTREAM, inbound_r, outbound_w, done))
        directions.append(
            greenthread.spawn(_direction, DOWNSTREAM, outbound_r, inbound_w, done))

        name, copied = done.wait()
        log.debug('%s finished first (%d bytes up, %d bytes down)',
                  name, outbound_w.bytes_written, inbound_w.bytes_written)
        return name, copied
    finally:
        for gt in directions:
            gt.kill()
        for sock in sockets:
            sock.close()
