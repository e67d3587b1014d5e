import os


version_info = (0, 1, 0)
__version__ = '.'.join(map(str, version_info))

# setup.py imports this module for the version; keep that working before
# the dependencies are installed.
if os.environ.get('PORTFORWARD_IMPORT_VERSION_ONLY') != '1':
    from portforward import config
    from portforward import server
    from portforward import session
    from portforward import sockopt

    Address = config.Address
    Config = config.Config
    parse_address = config.parse_address

    Forwarder = server.Forwarder
    listen = server.listen

    forward = session.forward
    split = session.split
    copy = session.copy
