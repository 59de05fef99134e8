from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from fireauth.claims import Options
from fireauth.decoding import DecodedToken, decode_unverified
from fireauth.errors import (
    ConfigError,
    DecodeError,
    EmptyDataNoOptionsError,
    FireauthError,
    InvalidOptionsError,
    MissingUidError,
    SerializationError,
    TokenError,
    TokenTooLongError,
    UidNotStringError,
    UidTooLongError,
)
from fireauth.generator import TokenGenerator, create_token
from fireauth.signing import SignatureMode


def _package_version() -> str:
    try:
        return version("fireauth")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "ConfigError",
    "DecodeError",
    "DecodedToken",
    "EmptyDataNoOptionsError",
    "FireauthError",
    "InvalidOptionsError",
    "MissingUidError",
    "Options",
    "SerializationError",
    "SignatureMode",
    "TokenError",
    "TokenGenerator",
    "TokenTooLongError",
    "UidNotStringError",
    "UidTooLongError",
    "__version__",
    "create_token",
    "decode_unverified",
]
