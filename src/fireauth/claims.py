"""Token header, options and claims records.

Options follow the service's zero-means-absent convention: a field left at
0/False is omitted from the serialised claims entirely (never sent as null).
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from fireauth.errors import InvalidOptionsError

VERSION = 0

HEADER: dict[str, str] = {"alg": "HS256", "typ": "JWT"}

_OPTION_CLAIMS = ("nbf", "exp", "admin", "debug")


def to_epoch_seconds(value: int | datetime) -> int:
    """Normalise a timestamp to integer epoch seconds (naive datetimes are UTC)."""

    if isinstance(value, datetime):
        return calendar.timegm(value.utctimetuple())
    return int(value)


class Options(BaseModel):
    """Optional claims that change how the service treats a token."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    not_before: int = Field(default=0, alias="nbf")
    expiration: int = Field(default=0, alias="exp")
    admin: StrictBool = False
    debug: StrictBool = False

    @field_validator("not_before", "expiration", mode="before")
    @classmethod
    def _datetime_to_epoch(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return to_epoch_seconds(value)
        return value

    @property
    def privileged(self) -> bool:
        # Tokens with no payload are only meaningful when one of these is set.
        return self.admin or self.debug


def coerce_options(options: Options | Mapping[str, Any] | None) -> Options | None:
    if options is None or isinstance(options, Options):
        return options
    try:
        return Options.model_validate(dict(options))
    except ValidationError as e:
        raise InvalidOptionsError(f"Invalid token options: {e}") from e


class Claims(BaseModel):
    model_config = ConfigDict(frozen=True)

    nbf: int | None = None
    exp: int | None = None
    admin: bool | None = None
    debug: bool | None = None
    v: Literal[0] = VERSION
    d: dict[str, Any] | None = None
    iat: int

    @classmethod
    def compose(
        cls,
        data: Mapping[str, Any] | None,
        options: Options | None,
        issued_at: int,
    ) -> Claims:
        opts = options or Options()
        return cls(
            nbf=opts.not_before or None,
            exp=opts.expiration or None,
            admin=opts.admin or None,
            debug=opts.debug or None,
            d=None if data is None else dict(data),
            iat=issued_at,
        )

    def to_wire(self) -> dict[str, Any]:
        """Return the claims as a dict in wire key order, absent fields dropped."""

        wire: dict[str, Any] = {}
        for name in _OPTION_CLAIMS:
            value = getattr(self, name)
            if value is not None:
                wire[name] = value
        wire["v"] = self.v
        # The payload is emitted as given, None values inside `d` included.
        if self.d is not None:
            wire["d"] = self.d
        wire["iat"] = self.iat
        return wire
