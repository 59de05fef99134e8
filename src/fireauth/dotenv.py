"""Secret lookup from the process environment or a `.env` file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from fireauth.errors import ConfigError


def parse_dotenv(text: str) -> dict[str, str]:
    """Parse KEY=VALUE lines (optional `export`, simple quotes, no interpolation)."""

    out: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        out[key] = value
    return out


def read_dotenv(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        return parse_dotenv(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed reading {path}: {e}") from e


def resolve_secret(
    name: str,
    *,
    dotenv_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the secret stored under `name`.

    The process environment wins over the `.env` file. An empty value counts
    as missing.
    """

    env = os.environ if environ is None else environ
    value = env.get(name, "")
    if not value and dotenv_path is not None:
        value = read_dotenv(dotenv_path).get(name, "")
    if not value:
        raise ConfigError(f"Missing secret: environment variable {name} is not set.")
    return value
