# package is named tests, not test, so it won't be confused with test in stdlib
import contextlib
import gc
import io
import os
import sys
import unittest

os.environ.setdefault('EVENTLET_TESTS', '1')

import eventlet
from eventlet.green import socket


# convenience for importers
main = unittest.main


class TestIsTakingTooLong(Exception):
    """ Custom exception class to be raised when a test's runtime exceeds a limit. """
    pass


class LimitedTestCase(unittest.TestCase):
    """ Unittest subclass that adds a timeout to all tests.  Subclasses must
    be sure to call the LimitedTestCase setUp and tearDown methods.  The default
    timeout is 3 seconds, change it by setting TEST_TIMEOUT to the desired
    quantity."""

    TEST_TIMEOUT = 3

    def setUp(self):
        self.timer = eventlet.Timeout(self.TEST_TIMEOUT,
                                      TestIsTakingTooLong(self.TEST_TIMEOUT))

    def reset_timeout(self, new_timeout):
        """Changes the timeout duration; only has effect during one test.
        `new_timeout` can be int or float.
        """
        self.timer.cancel()
        self.timer = eventlet.Timeout(new_timeout,
                                      TestIsTakingTooLong(new_timeout))

    def tearDown(self):
        self.timer.cancel()
        gc.collect()
        eventlet.sleep(0)


class RecordingLogger(object):
    """Collects ``(level, message)`` pairs instead of emitting them."""

    def __init__(self):
        self.records = []

    def _record(self, level, msg, args):
        self.records.append((level, msg % args if args else msg))

    def error(self, msg, *args, **kwargs):
        self._record('error', msg, args)

    def info(self, msg, *args, **kwargs):
        self._record('info', msg, args)

    def debug(self, msg, *args, **kwargs):
        self._record('debug', msg, args)

    def messages(self, level=None):
        return [m for lvl, m in self.records if level is None or lvl == level]

    def matching(self, prefix, level=None):
        return [m for m in self.messages(level) if m.startswith(prefix)]


def wait_for(predicate, interval=0.01):
    """Poll *predicate* until it returns true.  Bounded by the test timeout."""
    while not predicate():
        eventlet.sleep(interval)


def closed_port():
    """A localhost port with nothing listening on it."""
    sock = eventlet.listen(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


class EchoServer(object):
    """Echoes every connection back to itself.  Records peers and whether
    each accepted connection has seen end-of-stream."""

    def __init__(self):
        self.sock = eventlet.listen(('127.0.0.1', 0))
        self.port = self.sock.getsockname()[1]
        self.accepted = 0
        self.closed = 0
        self.pool = eventlet.GreenPool()
        self.gt = eventlet.spawn(self._accept)

    @property
    def address(self):
        return '127.0.0.1:%d' % self.port

    def _accept(self):
        while True:
            conn, _ = self.sock.accept()
            self.accepted += 1
            self.pool.spawn_n(self._echo, conn)

    def _echo(self, conn):
        try:
            while True:
                data = conn.recv(4096)
                if not data:
                    break
                conn.sendall(data)
        except socket.error:
            pass
        finally:
            self.closed += 1
            conn.close()

    def stop(self):
        self.gt.kill()
        self.sock.close()


@contextlib.contextmanager
def capture_stderr():
    stream = io.StringIO()
    original = sys.stderr
    try:
        sys.stderr = stream
        yield stream
    finally:
        sys.stderr = original
        stream.seek(0)
