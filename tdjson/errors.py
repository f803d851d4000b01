"""
TDLib JSON Client Errors

All exceptions raised by the binding derive from TdJsonError.
"""


class TdJsonError(Exception):
    """Base class for tdjson binding errors."""


class UnsupportedPlatform(TdJsonError):
    """No default library filename is known for this operating system."""


class LibraryLoadError(TdJsonError):
    """The native library could not be located, loaded or linked."""


class EncodingError(TdJsonError, ValueError):
    """A request could not be serialized to JSON."""


class DecodingError(TdJsonError, ValueError):
    """The native library returned text that is not valid JSON."""


class ClientClosedError(TdJsonError, RuntimeError):
    """An operation was attempted on a client whose handle was destroyed."""
