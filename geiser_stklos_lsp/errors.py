class GeiserError(Exception):
    """ Base class for editor-side protocol errors"""
    pass

class ProtocolError(GeiserError):
    """ Raised when a reply cannot be parsed into the expected shape"""

class UnsupportedRuntime(GeiserError):
    """ Raised when the runtime reports a version below the configured minimum"""

class TransportClosed(GeiserError):
    """ Raised when the runtime side of the connection has gone away"""
