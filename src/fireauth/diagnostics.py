"""Error formatting and actionable hints for fireauth CLI output."""

from __future__ import annotations

from fireauth.errors import (
    ConfigError,
    DecodeError,
    EmptyDataNoOptionsError,
    MissingUidError,
    TokenTooLongError,
    UidNotStringError,
    UidTooLongError,
)


def format_hint(exc: BaseException) -> str | None:
    """Return an actionable hint for a known error, or None."""

    if isinstance(exc, EmptyDataNoOptionsError):
        return "pass --uid/--data, or mint an --admin or --debug token"
    if isinstance(exc, MissingUidError):
        return 'add a "uid" key (or --uid), or pass --admin'
    if isinstance(exc, UidNotStringError):
        return 'quote the "uid" value so it is a JSON string'
    if isinstance(exc, UidTooLongError):
        return f"shorten the uid to at most {exc.limit} characters"
    if isinstance(exc, TokenTooLongError):
        return "move bulky values out of the payload; the service only stores identity claims"
    if isinstance(exc, DecodeError):
        return "pass the full token, header.claims.signature"
    if isinstance(exc, ConfigError):
        if "Missing secret" in str(exc):
            return "export the variable in your shell or add it to the .env file"
        return "check fireauth.toml against the documented [secret] and [token] tables"
    return None


def format_error_with_hint(exc: BaseException) -> str:
    """Format error message + optional hint for stderr output."""

    msg = (str(exc) or repr(exc)).strip()
    result = f"error: {msg}"
    hint = format_hint(exc)
    if hint:
        result += f"\nhint: {hint}"
    return result
