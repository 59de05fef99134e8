"""fireauth exception hierarchy.

Keep this module small and dependency-free: it is imported by every other
module and by tests.
"""

from __future__ import annotations


class FireauthError(Exception):
    """Base exception for all fireauth errors."""


class ConfigError(FireauthError):
    """Raised for invalid configuration or a secret that cannot be resolved."""


class DecodeError(FireauthError, ValueError):
    """Raised when a string is not a well-formed three-segment token."""


class TokenError(FireauthError, ValueError):
    """Base class for errors raised while minting a token."""


class EmptyDataNoOptionsError(TokenError):
    def __init__(self) -> None:
        super().__init__(
            "Data is empty and no options are set. This token will have no effect."
        )


class MissingUidError(TokenError):
    def __init__(self) -> None:
        super().__init__('Data payload must contain a "uid" key')


class UidNotStringError(TokenError):
    def __init__(self, uid: object) -> None:
        super().__init__(
            f'Data payload key "uid" must be a string, got {type(uid).__name__}'
        )
        self.uid = uid


class UidTooLongError(TokenError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            f'Data payload key "uid" must not be longer than {limit} characters '
            f"(got {length})"
        )
        self.length = length
        self.limit = limit


class TokenTooLongError(TokenError):
    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            f"Generated token is too long ({length} bytes). "
            f"The token cannot be longer than {limit} bytes."
        )
        self.length = length
        self.limit = limit


class SerializationError(TokenError):
    """Raised when the claims cannot be encoded as JSON."""


class InvalidOptionsError(TokenError):
    """Raised when an options mapping does not describe valid `Options`."""
