import logging
import os
import sys

LOGGER_NAME = 'portforward'
LOG_LEVEL_ENV = 'PORTFORWARD_LOG'
DEFAULT_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def get_logger(log=None, debug=False):
    """Return something with ``info``, ``debug`` and ``error`` methods.

    *log* may be a :class:`logging.Logger` (or anything shaped like one),
    a file-like object, or None for the ``portforward`` logger.
    """
    if log is None:
        return logging.getLogger(LOGGER_NAME)
    if callable(getattr(log, 'info', None)) \
       and callable(getattr(log, 'debug', None)):
        return log
    return LoggerFileWrapper(log, debug)


class LoggerFileWrapper(object):
    """Logger interface over a file-like object."""

    def __init__(self, log, debug):
        self.log = log
        self._debug = debug

    def error(self, msg, *args, **kwargs):
        self.write(msg, *args)

    def info(self, msg, *args, **kwargs):
        self.write(msg, *args)

    def debug(self, msg, *args, **kwargs):
        if self._debug:
            self.write(msg, *args)

    def write(self, msg, *args):
        if args:
            msg = msg % args
        self.log.write(msg + '\n')


def level_from_env(default='INFO'):
    name = os.environ.get(LOG_LEVEL_ENV, default).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError('{0}: unknown log level {1!r}'.format(LOG_LEVEL_ENV, name))
    return level


def stream_logger(stream=None, level=logging.INFO):
    """Attach a stream handler to the ``portforward`` logger.
    Returns the logger and the handler so callers can detach it.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    log = logging.getLogger(LOGGER_NAME)
    log.addHandler(handler)
    log.setLevel(level)
    return log, handler
