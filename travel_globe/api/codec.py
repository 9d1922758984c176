# travel_globe/api/codec.py
"""Share-token codec.

A token is the trip collection serialized as JSON and compressed with
lz-string's URI-safe alphabet, so it can sit directly in ``?trips=`` and be
read back by the JavaScript ``lz-string`` package on the globe page.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Sequence, Tuple

from lzstring import LZString

from travel_globe.api.errors import DecodeFailure
from travel_globe.api.models import Trip

logger = logging.getLogger(__name__)

QUERY_PARAM = "trips"

_lz = LZString()


def _to_jsonable(trips: Sequence[Any]) -> List[Any]:
    return [t.to_dict() if isinstance(t, Trip) else t for t in trips]


def encode(trips: Sequence[Any]) -> str:
    """Compress a trip collection into a URL-safe token.

    The JSON text is ASCII-escaped so every code point survives the
    lz-string round trip unchanged.
    """
    payload = json.dumps(_to_jsonable(trips), separators=(",", ":"), ensure_ascii=True)
    return _lz.compressToEncodedURIComponent(payload)


def decode(token: str) -> List[Any]:
    """Inverse of ``encode``.

    Raises:
        DecodeFailure: token does not decompress, is not JSON, or the JSON
            is not an array.
    """
    if not isinstance(token, str) or not token:
        raise DecodeFailure("Token is empty")

    try:
        text = _lz.decompressFromEncodedURIComponent(token)
    except Exception as exc:
        # lzstring fails on malformed input with assorted errors (KeyError,
        # IndexError, UnboundLocalError)
        raise DecodeFailure(f"Token could not be decompressed: {exc!r}") from exc

    if not text:
        raise DecodeFailure("Token did not decompress to any text")

    try:
        parsed = json.loads(text)
    except ValueError as exc:
        raise DecodeFailure(f"Decompressed token is not valid JSON: {exc}") from exc

    if not isinstance(parsed, list):
        raise DecodeFailure("Decompressed token is not a JSON array")
    return parsed


def try_decode(token: str, fallback: Sequence[Any]) -> Tuple[List[Any], bool]:
    """Decode ``token`` or hand back ``fallback``; never raises.

    Returns:
        (trips, decoded) where ``decoded`` is False when the fallback was used.
    """
    try:
        return decode(token), True
    except DecodeFailure as exc:
        logger.warning(f"Ignoring trips token: {exc}")
        return list(fallback), False


def share_query(token: str) -> str:
    """Query-string fragment for a share link."""
    return f"?{QUERY_PARAM}={token}"


__all__ = ["QUERY_PARAM", "encode", "decode", "try_decode", "share_query"]
