"""HMAC-SHA256 signing of the token signing input."""

from __future__ import annotations

import hashlib
import hmac
from enum import Enum

from fireauth.encoding import b64url_encode


class SignatureMode(str, Enum):
    """How the third token segment is built from the HMAC tag.

    LEGACY encodes the signing input followed by its HMAC tag, so the signing
    input appears twice in the token. TAG encodes only the tag, as
    conventional HS256 tokens do.
    """

    LEGACY = "legacy"
    TAG = "tag"


def hmac_sha256(secret: str, message: str) -> bytes:
    """Return the raw 32-byte HMAC-SHA256 tag of `message` keyed by `secret`."""

    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()


def sign(secret: str, signing_input: str, mode: SignatureMode = SignatureMode.LEGACY) -> str:
    tag = hmac_sha256(secret, signing_input)
    if mode is SignatureMode.TAG:
        return b64url_encode(tag)
    return b64url_encode(signing_input.encode("utf-8") + tag)
