"""Configuration loading for the fireauth command line.

Only `fireauth.toml` is read here; the secret itself never lives in the config
file, which instead names the environment variable (and optional `.env` file)
that holds it.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fireauth.errors import ConfigError
from fireauth.signing import SignatureMode

CONFIG_FILENAME = "fireauth.toml"


@dataclass(frozen=True)
class SecretConfig:
    env: str = "FIREAUTH_SECRET"
    dotenv: Path | None = None


@dataclass(frozen=True)
class TokenConfig:
    signature: SignatureMode = SignatureMode.LEGACY
    expires_in: int = 0
    admin: bool = False
    debug: bool = False


@dataclass(frozen=True)
class FireauthConfig:
    version: int = 1
    secret: SecretConfig = SecretConfig()
    token: TokenConfig = TokenConfig()


def find_config(start: Path) -> Path | None:
    """Walk upward from `start` (file or directory) looking for `fireauth.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        candidate = cur / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            return None
        cur = cur.parent


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"Expected {name} to be a boolean.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigError(f"Expected {name} to be an integer.")
    return value


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"Expected {name} to be a string.")
    return value


def load_config(config_path: Path | None = None, *, start: Path | None = None) -> FireauthConfig:
    """Load and validate `fireauth.toml`.

    With no explicit `config_path` the file is searched for upward from
    `start` (default: the working directory); if none is found the defaults
    apply. An explicit path that does not exist is an error.
    """

    if config_path is None:
        config_path = find_config(start if start is not None else Path.cwd())
        if config_path is None:
            return FireauthConfig()

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise ConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    version = data.get("version", None)
    if version is None:
        raise ConfigError(f"Missing required `version = 1` in {CONFIG_FILENAME}.")
    version_i = _as_int(version, name="version")
    if version_i != 1:
        raise ConfigError(f"Unsupported config version: {version_i} (expected 1).")

    secret_tbl = _as_table(data.get("secret"), name="secret")
    token_tbl = _as_table(data.get("token"), name="token")
    defaults = TokenConfig()

    secret_env = _as_str(secret_tbl.get("env", SecretConfig.env), name="secret.env")
    if not secret_env:
        raise ConfigError("Invalid config: secret.env must not be empty.")

    dotenv_path: Path | None = None
    if "dotenv" in secret_tbl:
        dotenv_path = config_path.parent / _as_str(secret_tbl["dotenv"], name="secret.dotenv")

    signature = _as_str(token_tbl.get("signature", defaults.signature.value), name="token.signature")
    try:
        signature_mode = SignatureMode(signature)
    except ValueError as e:
        allowed = ", ".join(m.value for m in SignatureMode)
        raise ConfigError(
            f"Invalid config: token.signature must be one of {allowed} (got {signature!r})."
        ) from e

    expires_in = _as_int(token_tbl.get("expires_in", defaults.expires_in), name="token.expires_in")
    if expires_in < 0:
        raise ConfigError("Invalid config: token.expires_in must be >= 0.")

    return FireauthConfig(
        version=version_i,
        secret=SecretConfig(env=secret_env, dotenv=dotenv_path),
        token=TokenConfig(
            signature=signature_mode,
            expires_in=expires_in,
            admin=_as_bool(token_tbl.get("admin", defaults.admin), name="token.admin"),
            debug=_as_bool(token_tbl.get("debug", defaults.debug), name="token.debug"),
        ),
    )
