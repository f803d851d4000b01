"""
TDLib JSON Client

Owns one native td_json_client handle and forwards JSON requests to it.

This module provides:
- Handle creation and guaranteed single destruction (close, context manager, GC)
- send() for asynchronous requests
- receive() for polling updates and responses with a timeout
- execute() for the synchronous subset of requests
- Per-client call statistics
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .codec import decode_response, encode_request
from .errors import ClientClosedError, DecodingError, EncodingError, LibraryLoadError
from .library import TdJsonLibrary, load_library

logger = logging.getLogger(__name__)


@dataclass
class ClientStats:
    """Client statistics."""
    requests_sent: int = 0
    responses_received: int = 0
    empty_receives: int = 0
    executes: int = 0
    encoding_errors: int = 0
    decoding_errors: int = 0


class TdJsonClient:
    """
    Wrapper around a single TDLib JSON client handle.

    The handle is created in the constructor and destroyed exactly once by
    close(). Access is not locked: callers sharing a client across threads
    must serialize calls themselves.
    """

    def __init__(self, library_path: Optional[str] = None, log_level: int = 0,
                 library: Optional[TdJsonLibrary] = None):
        """
        Load the library and create a client.

        Args:
            library_path: Path to the tdjson library (resolved per platform if None)
            log_level: Native log verbosity level (default: 0, fatal errors only)
            library: Already loaded library to use instead of library_path

        Raises:
            UnsupportedPlatform: if no path was given and none can be inferred
            LibraryLoadError: if the library cannot be loaded or the client not created
        """
        self._handle: Optional[int] = None
        self.stats = ClientStats()

        self.library = library if library is not None else load_library(library_path)
        self.library.set_log_verbosity_level(log_level)

        handle = self.library.create_client()
        if not handle:
            raise LibraryLoadError("td_json_client_create returned a NULL client")
        self._handle = handle

        logger.info(f"TdJsonClient created (log level {log_level})")

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _require_handle(self) -> int:
        if self._handle is None:
            raise ClientClosedError("TdJsonClient is closed")
        return self._handle

    def _encode(self, request: Any) -> bytes:
        try:
            return encode_request(request)
        except EncodingError:
            self.stats.encoding_errors += 1
            raise

    def _decode(self, data: Optional[bytes]) -> Optional[Any]:
        try:
            return decode_response(data)
        except DecodingError:
            self.stats.decoding_errors += 1
            raise

    def send(self, request: Any) -> None:
        """
        Send a request to the client.

        The response arrives later through receive(), matched by the
        request's "@extra" field if the caller set one.

        Raises:
            EncodingError: if the request cannot be serialized
            ClientClosedError: if the client was closed
        """
        handle = self._require_handle()
        data = self._encode(request)
        self.library.send(handle, data)
        self.stats.requests_sent += 1
        logger.debug(f"Sent request ({len(data)} bytes)")

    def receive(self, timeout: float) -> Optional[Any]:
        """
        Receive the next update or response.

        Args:
            timeout: Maximum number of seconds to wait for new data

        Returns:
            Decoded response, or None if nothing arrived in time
        """
        handle = self._require_handle()
        data = self.library.receive(handle, timeout)
        if data is None:
            self.stats.empty_receives += 1
            return None

        response = self._decode(data)
        self.stats.responses_received += 1
        logger.debug(f"Received response ({len(data)} bytes)")
        return response

    def execute(self, request: Any) -> Optional[Any]:
        """
        Synchronously execute a request.

        Only a few requests can be executed synchronously; the native
        library returns nothing for the others.

        Returns:
            Decoded response, or None
        """
        handle = self._require_handle()
        data = self._encode(request)
        result = self.library.execute(handle, data)
        self.stats.executes += 1
        return self._decode(result)

    def close(self) -> None:
        """Destroy the native client. Further calls to close() do nothing."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        self.library.destroy(handle)
        logger.info("TdJsonClient destroyed")

    def get_stats(self) -> Dict[str, int]:
        """Get client statistics."""
        return {
            'requests_sent': self.stats.requests_sent,
            'responses_received': self.stats.responses_received,
            'empty_receives': self.stats.empty_receives,
            'executes': self.stats.executes,
            'encoding_errors': self.stats.encoding_errors,
            'decoding_errors': self.stats.decoding_errors,
        }

    def clear_stats(self):
        """Clear client statistics."""
        self.stats = ClientStats()

    def __enter__(self) -> "TdJsonClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        if getattr(self, "_handle", None) is not None:
            self.close()
