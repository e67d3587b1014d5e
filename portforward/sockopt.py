from eventlet.green import socket


def set_keepalive(sock, seconds):
    """Enable TCP keepalive with a *seconds* idle time and probe interval,
    or disable it when *seconds* is 0."""
    if not seconds:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 0)
        return
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    if hasattr(socket, 'TCP_KEEPIDLE'):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, seconds)
    elif hasattr(socket, 'TCP_KEEPALIVE'):
        # darwin
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPALIVE, seconds)
    elif hasattr(socket, 'SIO_KEEPALIVE_VALS'):
        ms = seconds * 1000
        sock.ioctl(socket.SIO_KEEPALIVE_VALS, (1, ms, ms))
        return
    if hasattr(socket, 'TCP_KEEPINTVL'):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, seconds)


def set_nodelay(sock, nodelay):
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1 if nodelay else 0)


# setsockopt rejects values that don't fit the option with these
OPTION_ERRORS = (socket.error, OverflowError, TypeError, ValueError)


def apply(sock, config, log):
    """Apply the keepalive and nodelay settings from *config* to *sock*.

    Both are tuning hints: a failure, including a value the platform can't
    take, is reported to *log* and otherwise ignored.
    """
    try:
        set_keepalive(sock, config.keepalive)
    except OPTION_ERRORS as e:
        log.error('Failed to set keepalive: %s', e)
    try:
        set_nodelay(sock, config.nodelay)
    except OPTION_ERRORS as e:
        log.error('Failed to set TCP_NODELAY: %s', e)
