"""Unverified inspection of minted tokens.

Nothing here checks a signature or a timestamp: the service does that. This
is a diagnostic aid for looking at what a token asserts.
"""

from __future__ import annotations

import binascii
import json
from dataclasses import dataclass
from typing import Any

from fireauth.encoding import b64url_decode
from fireauth.errors import DecodeError


@dataclass(frozen=True)
class DecodedToken:
    header: dict[str, Any]
    claims: dict[str, Any]
    signature: bytes
    signing_input: str

    @property
    def data(self) -> dict[str, Any] | None:
        return self.claims.get("d")


def _decode_json_segment(segment: str, *, name: str) -> dict[str, Any]:
    try:
        raw = b64url_decode(segment)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Token {name} is not valid base64url.") from e
    try:
        value = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Token {name} is not valid JSON.") from e
    if not isinstance(value, dict):
        raise DecodeError(f"Token {name} must be a JSON object.")
    return value


def decode_unverified(token: str) -> DecodedToken:
    """Split `token` into header, claims and raw signature bytes."""

    parts = (token or "").strip().split(".")
    if len(parts) != 3 or any(not p for p in parts):
        raise DecodeError("Token must have exactly three non-empty segments separated by '.'.")

    header_seg, claims_seg, signature_seg = parts
    header = _decode_json_segment(header_seg, name="header")
    claims = _decode_json_segment(claims_seg, name="claims")
    try:
        signature = b64url_decode(signature_seg)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Token signature is not valid base64url.") from e

    return DecodedToken(
        header=header,
        claims=claims,
        signature=signature,
        signing_input=f"{header_seg}.{claims_seg}",
    )
