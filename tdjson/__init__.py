"""
TDLib JSON Client Binding

A thin ctypes binding to the TDLib JSON client library (tdjson).

This library provides:
- Platform-aware loading of libtdjson with the td_json_client_* C API declared
- TdJsonClient: one native client handle with send/receive/execute and guaranteed teardown
- AsyncTdJsonClient: AnyIO facade running native calls in worker threads
- JSON encoding/decoding of requests and responses
"""

from .aio import AsyncTdJsonClient
from .client import ClientStats, TdJsonClient
from .errors import (
    ClientClosedError,
    DecodingError,
    EncodingError,
    LibraryLoadError,
    TdJsonError,
    UnsupportedPlatform,
)
from .library import (
    Platform,
    TdJsonLibrary,
    default_library_filename,
    find_tdjson_libraries,
    load_library,
)

__version__ = "1.0.0"
__all__ = [
    "TdJsonClient",
    "AsyncTdJsonClient",
    "ClientStats",
    "TdJsonLibrary",
    "Platform",
    "load_library",
    "default_library_filename",
    "find_tdjson_libraries",
    "TdJsonError",
    "UnsupportedPlatform",
    "LibraryLoadError",
    "EncodingError",
    "DecodingError",
    "ClientClosedError",
]
