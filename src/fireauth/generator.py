"""Minting of signed authentication tokens for the realtime-database service.

A token is three URL-safe base64 segments joined by ".":

    base64url(header) . base64url(claims) . signature

The header is fixed (`{"alg":"HS256","typ":"JWT"}`). The claims carry the
caller's options, a version of 0, the payload under `d`, and the issued-at
time. See `fireauth.signing` for how the signature segment is built.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from fireauth.claims import HEADER, Claims, Options, coerce_options
from fireauth.encoding import encode_json
from fireauth.errors import (
    EmptyDataNoOptionsError,
    MissingUidError,
    SerializationError,
    TokenTooLongError,
    UidNotStringError,
    UidTooLongError,
)
from fireauth.signing import SignatureMode, sign

logger = logging.getLogger("fireauth.generator")

TOKEN_SEP = "."
MAX_UID_LENGTH = 256
MAX_TOKEN_LENGTH = 1024

Clock = Callable[[], float]


def validate_data(data: Mapping[str, Any] | None, options: Options | None) -> None:
    """Check a payload/options pair, raising the first rule that fails.

    Order matters: the empty-token guard runs before any uid check, and the
    uid checks run presence, then type, then length.
    """

    if data is None:
        if options is None or not options.privileged:
            logger.debug("Rejected token: empty data and no admin/debug option")
            raise EmptyDataNoOptionsError()
        # Admin-only and debug-only tokens carry no payload to check.
        return

    is_admin = options is not None and options.admin
    if "uid" not in data:
        if is_admin:
            return
        logger.debug("Rejected token: payload has no uid")
        raise MissingUidError()

    uid = data["uid"]
    if not isinstance(uid, str):
        logger.debug("Rejected token: uid is not a string")
        raise UidNotStringError(uid)
    if len(uid) > MAX_UID_LENGTH:
        logger.debug("Rejected token: uid is too long")
        raise UidTooLongError(len(uid), MAX_UID_LENGTH)


def encoded_header() -> str:
    return encode_json(HEADER)


@dataclass(frozen=True)
class TokenGenerator:
    """Creates tokens signed with a shared secret.

    The secret, clock and signature mode are fixed at construction; an
    instance can be shared freely between threads.
    """

    secret: str = field(repr=False)
    clock: Clock = field(default=time.time, repr=False)
    signature_mode: SignatureMode = SignatureMode.LEGACY

    def __post_init__(self) -> None:
        if not isinstance(self.secret, str):
            raise TypeError("secret must be a string")
        # Accept the plain string form ("legacy" / "tag") from config and CLI.
        object.__setattr__(self, "signature_mode", SignatureMode(self.signature_mode))

    def create_token(
        self,
        data: Mapping[str, Any] | None = None,
        options: Options | Mapping[str, Any] | None = None,
    ) -> str:
        """Mint a token for `data` with the given `options`.

        `data` may be None only for admin or debug tokens. Raises a
        `fireauth.errors.TokenError` subclass when the input is rejected or
        the resulting token is longer than the service accepts.
        """

        opts = coerce_options(options)
        validate_data(data, opts)

        issued_at = int(self.clock())
        try:
            claims = Claims.compose(data, opts, issued_at).to_wire()
            encoded_claims = encode_json(claims)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Token claims are not JSON serialisable: {e}") from e

        signing_input = f"{encoded_header()}{TOKEN_SEP}{encoded_claims}"
        signature = sign(self.secret, signing_input, self.signature_mode)
        token = f"{signing_input}{TOKEN_SEP}{signature}"

        length = len(token.encode("utf-8"))
        if length > MAX_TOKEN_LENGTH:
            raise TokenTooLongError(length, MAX_TOKEN_LENGTH)

        if opts is not None and opts.admin:
            logger.warning("Minted an admin token; it bypasses all security rules")
        logger.debug(
            "Minted token (%d bytes, admin=%s, debug=%s, signature=%s)",
            length,
            bool(opts and opts.admin),
            bool(opts and opts.debug),
            self.signature_mode.value,
        )
        return token


def create_token(
    secret: str,
    data: Mapping[str, Any] | None = None,
    options: Options | Mapping[str, Any] | None = None,
) -> str:
    """Convenience wrapper: mint a single token with a throwaway generator."""

    return TokenGenerator(secret).create_token(data, options)
