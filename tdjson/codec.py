"""
JSON encoding of requests and decoding of native responses.
"""

import dataclasses
import json
import logging
from typing import Any, Optional

from .errors import DecodingError, EncodingError

logger = logging.getLogger(__name__)


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant {name}")


def encode_request(request: Any) -> bytes:
    """
    Encode a request as compact UTF-8 JSON.

    Raises:
        EncodingError: if the value (or a member) cannot be serialized
    """
    try:
        text = json.dumps(request, separators=(",", ":"), ensure_ascii=False,
                          allow_nan=False, default=_default)
        return text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Failed encoding request: {e}") from e


def decode_response(data: Optional[bytes]) -> Optional[Any]:
    """
    Decode JSON text returned by the native library.

    Returns:
        The decoded value, or None when the native call returned NULL

    Raises:
        DecodingError: if the text is not valid UTF-8 JSON
    """
    if data is None:
        return None

    try:
        return json.loads(data.decode("utf-8"), parse_constant=_reject_constant)
    except ValueError as e:
        logger.warning(f"Native library returned undecodable response ({len(data)} bytes): {e}")
        raise DecodingError(f"Failed decoding response: {e}") from e
