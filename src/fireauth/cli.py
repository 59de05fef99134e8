from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from fireauth import __version__
from fireauth.claims import Options
from fireauth.config import FireauthConfig, load_config
from fireauth.diagnostics import format_error_with_hint
from fireauth.dotenv import resolve_secret
from fireauth.errors import ConfigError, DecodeError, TokenError
from fireauth.signing import SignatureMode

logger = logging.getLogger("fireauth.cli")

EXIT_OK = 0
EXIT_CONFIG_OR_USAGE = 2
EXIT_TOKEN_ERROR = 3
EXIT_DECODE_ERROR = 4


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--json", dest="json_output", action="store_true", help="Emit JSON output.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fireauth")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    mint_p = subparsers.add_parser("mint", help="Mint a signed authentication token.")
    _add_common_flags(mint_p)
    mint_p.add_argument("--uid", type=str, default=None, help="Subject uid (merged into --data).")
    mint_p.add_argument(
        "--data",
        type=str,
        default=None,
        help="Token payload as a JSON object.",
    )
    mint_p.add_argument("--admin", action="store_true", help="Mint an admin token.")
    mint_p.add_argument("--debug", action="store_true", help="Enable service debug mode.")
    mint_p.add_argument(
        "--not-before",
        type=int,
        default=None,
        help="Epoch seconds before which the token is not valid.",
    )
    expiry = mint_p.add_mutually_exclusive_group()
    expiry.add_argument("--expires", type=int, default=None, help="Expiry as epoch seconds.")
    expiry.add_argument(
        "--expires-in",
        type=int,
        default=None,
        help="Expiry as seconds after the issued-at time.",
    )
    mint_p.add_argument(
        "--signature",
        choices=[m.value for m in SignatureMode],
        default=None,
        help="Signature construction (defaults to token.signature in fireauth.toml).",
    )
    mint_p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to fireauth.toml (defaults to searching upward from cwd).",
    )
    mint_p.add_argument(
        "--secret-env",
        type=str,
        default=None,
        help="Environment variable holding the secret (defaults to secret.env).",
    )

    decode_p = subparsers.add_parser(
        "decode", help="Show a token's header and claims (signature NOT verified)."
    )
    _add_common_flags(decode_p)
    decode_p.add_argument("token", type=str)

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if bool(getattr(args, "verbose", False)) else logging.WARNING
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _load_config(args: argparse.Namespace) -> FireauthConfig:
    config_path = Path(args.config).resolve() if args.config else None
    return load_config(config_path)


def _parse_data(args: argparse.Namespace) -> dict[str, Any] | None:
    data: dict[str, Any] | None = None
    if args.data is not None:
        try:
            parsed = json.loads(args.data)
        except json.JSONDecodeError as e:
            raise ConfigError(f"--data is not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise ConfigError("--data must be a JSON object.")
        data = parsed
    if args.uid is not None:
        data = {**(data or {}), "uid": args.uid}
    return data


def _build_options(args: argparse.Namespace, cfg: FireauthConfig, now: int) -> Options | None:
    expires = args.expires
    expires_in = args.expires_in if args.expires_in is not None else cfg.token.expires_in
    if expires is None and expires_in:
        expires = now + expires_in

    opts = Options(
        not_before=args.not_before or 0,
        expiration=expires or 0,
        admin=bool(args.admin or cfg.token.admin),
        debug=bool(args.debug or cfg.token.debug),
    )
    if opts == Options():
        return None
    return opts


def cmd_mint(args: argparse.Namespace) -> int:
    from fireauth.generator import TokenGenerator

    try:
        cfg = _load_config(args)
        secret_env = args.secret_env or cfg.secret.env
        dotenv_path = cfg.secret.dotenv if cfg.secret.dotenv is not None else Path.cwd() / ".env"
        secret = resolve_secret(secret_env, dotenv_path=dotenv_path)

        data = _parse_data(args)
        # Pin the clock so --expires-in and iat agree.
        now = int(time.time())
        options = _build_options(args, cfg, now)
        generator = TokenGenerator(
            secret,
            clock=lambda: now,
            signature_mode=args.signature or cfg.token.signature,
        )
        token = generator.create_token(data, options)
    except ConfigError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_CONFIG_OR_USAGE
    except TokenError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_TOKEN_ERROR

    if bool(args.json_output):
        print(json.dumps({"token": token}))
    else:
        print(token)
    return EXIT_OK


def cmd_decode(args: argparse.Namespace) -> int:
    from fireauth.decoding import decode_unverified

    try:
        decoded = decode_unverified(args.token)
    except DecodeError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_DECODE_ERROR

    if bool(args.json_output):
        print(json.dumps({"header": decoded.header, "claims": decoded.claims}))
    else:
        print(f"header: {json.dumps(decoded.header, sort_keys=True)}")
        print(f"claims: {json.dumps(decoded.claims, indent=2)}")
    logger.debug("Decoded token; signature segment is %d bytes", len(decoded.signature))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_CONFIG_OR_USAGE

    _configure_logging(args)

    if args.command == "mint":
        return cmd_mint(args)
    if args.command == "decode":
        return cmd_decode(args)

    return EXIT_CONFIG_OR_USAGE


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
