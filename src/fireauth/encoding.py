"""URL-safe base64 and compact JSON helpers for token segments."""

from __future__ import annotations

import base64
import json
from typing import Any


def b64url_encode(data: bytes) -> str:
    """Encode `data` with the base64url alphabet, stripping "=" padding."""

    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    # Re-pad to a multiple of 4 before decoding.
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def dump_json(obj: Any) -> bytes:
    """Serialise `obj` as compact UTF-8 JSON (no whitespace between tokens)."""

    # NaN and Infinity are not JSON; reject them instead of writing bare tokens.
    return json.dumps(
        obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def encode_json(obj: Any) -> str:
    return b64url_encode(dump_json(obj))
