"""
TDLib Library Utilities

Utilities for finding and loading the native tdjson library.

This module provides:
- Platform detection with a filename lookup table
- Library path resolution (explicit path, environment, platform default)
- Candidate discovery for diagnostics
- The ctypes function table for the td_json_client_* C API
"""

import ctypes
import ctypes.util
import json
import logging
import os
import platform
from enum import Enum
from typing import List, Optional

from .errors import LibraryLoadError, UnsupportedPlatform

logger = logging.getLogger(__name__)

TDJSON_LIBRARY_ENV = "TDJSON_LIBRARY_PATH"


class Platform(Enum):
    DARWIN = "Darwin"
    WINDOWS = "Windows"
    LINUX = "Linux"
    UNSUPPORTED = "Unsupported"


# Default shared library filename per platform
LIBRARY_FILENAMES = {
    Platform.DARWIN: "libtdjson.dylib",
    Platform.WINDOWS: "tdjson.dll",
    Platform.LINUX: "libtdjson.so",
}


def current_platform(system: Optional[str] = None) -> Platform:
    """
    Normalize an operating system name to a Platform.

    Args:
        system: Value as reported by platform.system() (detected if None)

    Returns:
        Matching Platform, or Platform.UNSUPPORTED
    """
    system = platform.system() if system is None else system
    for candidate in Platform:
        if candidate is not Platform.UNSUPPORTED and candidate.value == system:
            return candidate
    return Platform.UNSUPPORTED


def default_library_filename(system: Optional[str] = None) -> str:
    """
    Get the default tdjson filename for the current (or given) platform.

    Raises:
        UnsupportedPlatform: if no filename is known for the platform
    """
    system = platform.system() if system is None else system
    filename = LIBRARY_FILENAMES.get(current_platform(system))
    if filename is None:
        raise UnsupportedPlatform(
            f"No default tdjson library for platform {system!r}, "
            "please specify the library file"
        )
    return filename


def resolve_library_path(library_path: Optional[str] = None) -> str:
    """
    Pick the library path to load.

    Resolution order: explicit argument, TDJSON_LIBRARY_PATH, platform default.
    """
    if library_path:
        return str(library_path)

    env_path = os.environ.get(TDJSON_LIBRARY_ENV)
    if env_path:
        logger.debug(f"Using {TDJSON_LIBRARY_ENV}={env_path}")
        return env_path

    return default_library_filename()


def find_tdjson_libraries() -> List[str]:
    """
    Find candidate tdjson libraries using multiple detection methods.

    Returns:
        List of paths/names worth trying, most specific first
    """
    logger.info("Searching for tdjson library...")
    candidates: List[str] = []

    # Method 1: environment override
    env_path = os.environ.get(TDJSON_LIBRARY_ENV)
    if env_path:
        candidates.append(env_path)
        logger.info(f"Environment match: {env_path}")

    # Method 2: system linker search path
    found = ctypes.util.find_library("tdjson")
    if found:
        candidates.append(found)
        logger.info(f"Linker search match: {found}")

    # Method 3: platform default filename
    try:
        candidates.append(default_library_filename())
    except UnsupportedPlatform as e:
        logger.debug(f"No platform default: {e}")

    unique = list(dict.fromkeys(candidates))
    logger.info(f"Final candidates: {unique}")
    return unique


class TdJsonLibrary:
    """
    Function table for a loaded tdjson shared library.

    Text returned by the native library is only valid until the next call on
    the same thread, so it is copied into bytes before returning.
    """

    def __init__(self, cdll: ctypes.CDLL, path: str):
        self.path = path
        self._lib = cdll
        self._declare()

    def _declare(self):
        lib = self._lib
        try:
            lib.td_json_client_create.argtypes = []
            lib.td_json_client_create.restype = ctypes.c_void_p

            lib.td_json_client_send.argtypes = [ctypes.c_void_p, ctypes.c_char_p]
            lib.td_json_client_send.restype = None

            lib.td_json_client_receive.argtypes = [ctypes.c_void_p, ctypes.c_double]
            lib.td_json_client_receive.restype = ctypes.c_char_p

            lib.td_json_client_execute.argtypes = [ctypes.c_void_p, ctypes.c_char_p]
            lib.td_json_client_execute.restype = ctypes.c_char_p

            lib.td_json_client_destroy.argtypes = [ctypes.c_void_p]
            lib.td_json_client_destroy.restype = None
        except AttributeError as e:
            raise LibraryLoadError(f"Failed linking tdjson library {self.path!r}: {e}") from e

        # Removed from recent TDLib releases in favour of setLogVerbosityLevel
        self._set_verbosity = getattr(lib, "td_set_log_verbosity_level", None)
        if self._set_verbosity is not None:
            self._set_verbosity.argtypes = [ctypes.c_int]
            self._set_verbosity.restype = None

    def create_client(self) -> Optional[int]:
        return self._lib.td_json_client_create()

    def send(self, handle: int, data: bytes) -> None:
        self._lib.td_json_client_send(handle, data)

    def receive(self, handle: int, timeout: float) -> Optional[bytes]:
        return self._lib.td_json_client_receive(handle, float(timeout))

    def execute(self, handle: Optional[int], data: bytes) -> Optional[bytes]:
        return self._lib.td_json_client_execute(handle, data)

    def destroy(self, handle: int) -> None:
        self._lib.td_json_client_destroy(handle)

    def set_log_verbosity_level(self, level: int) -> None:
        """Set the process-wide native log verbosity."""
        if self._set_verbosity is not None:
            self._set_verbosity(int(level))
            return

        request = {"@type": "setLogVerbosityLevel", "new_verbosity_level": int(level)}
        self.execute(None, json.dumps(request).encode("utf-8"))


def load_library(library_path: Optional[str] = None) -> TdJsonLibrary:
    """
    Load the tdjson shared library and declare its C API.

    Args:
        library_path: Path or filename of the library, or None to resolve

    Returns:
        TdJsonLibrary wrapping the loaded library

    Raises:
        UnsupportedPlatform: if no path was given and none can be inferred
        LibraryLoadError: if the library cannot be loaded or linked
    """
    path = resolve_library_path(library_path)

    try:
        cdll = ctypes.CDLL(path)
    except OSError as e:
        logger.error(f"Failed loading tdjson library {path!r}: {e}")
        raise LibraryLoadError(f"Failed loading tdjson library {path!r}") from e

    library = TdJsonLibrary(cdll, path)
    logger.info(f"Loaded tdjson library from {path}")
    return library
