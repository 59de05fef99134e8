from __future__ import annotations

import json
import time
from pathlib import Path

import pytest

import fireauth.cli
from fireauth.decoding import decode_unverified
from fireauth.encoding import b64url_decode
from fireauth.signing import hmac_sha256


@pytest.fixture
def workdir(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FIREAUTH_SECRET", "cli-secret")
    return tmp_path


def _mint(capsys, *argv: str) -> tuple[int, str, str]:
    rc = fireauth.cli.main(["mint", *argv])
    out = capsys.readouterr()
    return rc, out.out.strip(), out.err


def test_parse_mint_flags() -> None:
    ns = fireauth.cli.parse_args(["mint", "--uid", "u", "--admin", "--expires-in", "60"])
    assert ns.uid == "u"
    assert ns.admin is True
    assert ns.debug is False
    assert ns.expires_in == 60
    assert ns.json_output is False


def test_expires_and_expires_in_are_exclusive() -> None:
    assert fireauth.cli.main(["mint", "--expires", "1", "--expires-in", "1"]) == 2


def test_version_flag(capsys) -> None:
    assert fireauth.cli.main(["--version"]) == 0
    assert "fireauth" in capsys.readouterr().out


def test_mint_with_uid(workdir: Path, capsys) -> None:
    rc, token, _ = _mint(capsys, "--uid", "user-1")
    assert rc == fireauth.cli.EXIT_OK

    decoded = decode_unverified(token)
    assert decoded.data == {"uid": "user-1"}
    assert decoded.signature == (
        decoded.signing_input.encode() + hmac_sha256("cli-secret", decoded.signing_input)
    )


def test_mint_merges_uid_into_data(workdir: Path, capsys) -> None:
    rc, token, _ = _mint(capsys, "--data", '{"role": "editor", "uid": "old"}', "--uid", "new")
    assert rc == 0
    assert decode_unverified(token).data == {"role": "editor", "uid": "new"}


def test_mint_admin_json_output(workdir: Path, capsys) -> None:
    rc, out, _ = _mint(capsys, "--admin", "--json")
    assert rc == 0
    token = json.loads(out)["token"]
    claims = decode_unverified(token).claims
    assert claims["admin"] is True
    assert "d" not in claims


def test_mint_expires_in_is_relative_to_iat(workdir: Path, capsys) -> None:
    before = int(time.time())
    rc, token, _ = _mint(capsys, "--uid", "u", "--expires-in", "3600", "--not-before", "5")
    assert rc == 0
    claims = decode_unverified(token).claims
    assert claims["exp"] == claims["iat"] + 3600
    assert claims["nbf"] == 5
    assert claims["iat"] >= before


def test_mint_tag_signature(workdir: Path, capsys) -> None:
    rc, token, _ = _mint(capsys, "--uid", "u", "--signature", "tag")
    assert rc == 0
    header, claims, sig = token.split(".")
    assert b64url_decode(sig) == hmac_sha256("cli-secret", f"{header}.{claims}")


def test_mint_uses_config_file(workdir: Path, capsys, monkeypatch) -> None:
    (workdir / "fireauth.toml").write_text(
        "\n".join(
            [
                "version = 1",
                "[secret]",
                'env = "OTHER_SECRET"',
                'dotenv = ".env.local"',
                "[token]",
                'signature = "tag"',
                "debug = true",
                "expires_in = 60",
                "",
            ]
        ),
        encoding="utf-8",
    )
    (workdir / ".env.local").write_text("OTHER_SECRET=file-secret\n", encoding="utf-8")
    monkeypatch.delenv("OTHER_SECRET", raising=False)

    rc, token, _ = _mint(capsys, "--uid", "u")
    assert rc == 0
    header, claims_seg, sig = token.split(".")
    assert b64url_decode(sig) == hmac_sha256("file-secret", f"{header}.{claims_seg}")
    claims = decode_unverified(token).claims
    assert claims["debug"] is True
    assert claims["exp"] == claims["iat"] + 60


def test_mint_reads_dotenv_in_cwd(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FIREAUTH_SECRET", raising=False)
    (tmp_path / ".env").write_text("FIREAUTH_SECRET=dotenv-secret\n", encoding="utf-8")

    rc, token, _ = _mint(capsys, "--uid", "u")
    assert rc == 0
    decoded = decode_unverified(token)
    assert decoded.signature.endswith(hmac_sha256("dotenv-secret", decoded.signing_input))


def test_mint_missing_secret(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FIREAUTH_SECRET", raising=False)
    rc, out, err = _mint(capsys, "--uid", "u")
    assert rc == fireauth.cli.EXIT_CONFIG_OR_USAGE
    assert out == ""
    assert "FIREAUTH_SECRET" in err
    assert "hint:" in err


def test_mint_secret_env_flag(workdir: Path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("ALT_SECRET", "alt")
    rc, token, _ = _mint(capsys, "--uid", "u", "--secret-env", "ALT_SECRET")
    assert rc == 0
    decoded = decode_unverified(token)
    assert decoded.signature.endswith(hmac_sha256("alt", decoded.signing_input))


def test_mint_rejects_non_object_data(workdir: Path, capsys) -> None:
    rc, _, err = _mint(capsys, "--data", "[1, 2]")
    assert rc == fireauth.cli.EXIT_CONFIG_OR_USAGE
    assert "JSON object" in err


def test_mint_rejects_invalid_json(workdir: Path, capsys) -> None:
    rc, _, err = _mint(capsys, "--data", "{nope")
    assert rc == fireauth.cli.EXIT_CONFIG_OR_USAGE
    assert "not valid JSON" in err


def test_mint_empty_token_is_refused(workdir: Path, capsys) -> None:
    rc, out, err = _mint(capsys)
    assert rc == fireauth.cli.EXIT_TOKEN_ERROR
    assert out == ""
    assert "error:" in err
    assert "--admin" in err


def test_mint_missing_uid(workdir: Path, capsys) -> None:
    rc, _, err = _mint(capsys, "--data", '{"name": "x"}', "--debug")
    assert rc == fireauth.cli.EXIT_TOKEN_ERROR
    assert "uid" in err


def test_mint_token_too_long(workdir: Path, capsys) -> None:
    rc, _, err = _mint(capsys, "--uid", "u", "--data", json.dumps({"bulk": "x" * 2000}))
    assert rc == fireauth.cli.EXIT_TOKEN_ERROR
    assert "too long" in err


def test_decode_prints_header_and_claims(workdir: Path, capsys) -> None:
    _, token, _ = _mint(capsys, "--uid", "u")
    rc = fireauth.cli.main(["decode", token, "--json"])
    out = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert out["header"] == {"alg": "HS256", "typ": "JWT"}
    assert out["claims"]["d"] == {"uid": "u"}
    assert out["claims"]["v"] == 0


def test_decode_text_output(workdir: Path, capsys) -> None:
    _, token, _ = _mint(capsys, "--admin")
    rc = fireauth.cli.main(["decode", token])
    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith('header: {"alg": "HS256", "typ": "JWT"}')
    assert '"admin": true' in out


def test_decode_malformed_token(capsys) -> None:
    rc = fireauth.cli.main(["decode", "not-a-token"])
    err = capsys.readouterr().err
    assert rc == fireauth.cli.EXIT_DECODE_ERROR
    assert err.startswith("error:")
