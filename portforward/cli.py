import argparse
import logging

from eventlet.green import socket

import portforward
from portforward import config as _config
from portforward import logutil
from portforward import server


def _address(text):
    try:
        return _config.resolve(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _non_negative(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError('expected an integer, got {0!r}'.format(text))
    if value < 0:
        raise argparse.ArgumentTypeError('expected a value >= 0, got {0}'.format(value))
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog='portforward',
        description='Forward TCP connections from SOURCE to DEST.')
    parser.add_argument('source', type=_address,
                        help='source address of the forwarder (host:port)')
    parser.add_argument('dest', type=_address,
                        help='destination address of the forwarder (host:port)')
    parser.add_argument('-n', '--nodelay', action='store_true',
                        help='set the TCP_NODELAY option')
    parser.add_argument('-k', '--keepalive', type=_non_negative,
                        default=_config.DEFAULT_KEEPALIVE, metavar='SECS',
                        help='keepalive interval, 0 disables (default: %(default)s)')
    parser.add_argument('-c', '--max-connections', type=_non_negative, default=0,
                        metavar='N',
                        help='limit simultaneous connections, 0 is unlimited (default: %(default)s)')
    parser.add_argument('-b', '--backlog', type=_non_negative,
                        default=_config.DEFAULT_BACKLOG, metavar='N',
                        help='listen backlog (default: %(default)s)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log at debug level')
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + portforward.__version__)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        level = logging.DEBUG
    else:
        try:
            level = logutil.level_from_env()
        except ValueError as e:
            parser.error(str(e))

    cfg = _config.Config(args.source, args.dest,
                         nodelay=args.nodelay,
                         keepalive=args.keepalive,
                         max_connections=args.max_connections,
                         backlog=args.backlog)
    log, handler = logutil.stream_logger(level=level)
    try:
        log.info('Starting: %r', cfg)
        try:
            server.Forwarder(cfg, log).run()
        except KeyboardInterrupt:
            pass
        except socket.error as e:
            log.error('Shutdown with error: %s', e)
            return 1
        log.info('Shutdown')
        return 0
    finally:
        log.removeHandler(handler)
