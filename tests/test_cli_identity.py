from __future__ import annotations

import json

import pytest
from solders.keypair import Keypair

from helloworld_client.cli.config import ConfigError
from helloworld_client.cli.identity import (
    IdentityError,
    IdentitySource,
    generate_keypair,
    load_keypair_file,
    resolve_identity,
    resolve_program_id,
)


def _write_keypair(path, keypair: Keypair) -> None:
    path.write_text(json.dumps(list(bytes(keypair))), encoding="utf-8")


def test_load_keypair_file_round_trip(tmp_path) -> None:
    keypair = Keypair.from_seed(bytes([4]) * 32)
    path = tmp_path / "id.json"
    _write_keypair(path, keypair)

    assert load_keypair_file(path).pubkey() == keypair.pubkey()


def test_resolve_identity_configured(tmp_path) -> None:
    keypair = Keypair.from_seed(bytes([4]) * 32)
    path = tmp_path / "id.json"
    _write_keypair(path, keypair)

    identity = resolve_identity(str(path))

    assert identity.source is IdentitySource.CONFIGURED
    assert identity.path == path
    assert identity.pubkey == keypair.pubkey()


@pytest.mark.parametrize("value", [None, "", "   "])
def test_resolve_identity_ephemeral_without_path(value) -> None:
    identity = resolve_identity(value)
    assert identity.source is IdentitySource.EPHEMERAL
    assert identity.path is None


def test_generated_keypairs_differ() -> None:
    assert generate_keypair().pubkey() != generate_keypair().pubkey()


def test_configured_but_missing_keypair_is_error(tmp_path) -> None:
    with pytest.raises(IdentityError):
        resolve_identity(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "payload",
    [
        "{}",
        "[1, 2, 3]",
        json.dumps([256] * 64),
        "not json",
    ],
)
def test_malformed_keypair_file(tmp_path, payload: str) -> None:
    path = tmp_path / "id.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(IdentityError):
        load_keypair_file(path)


def test_mismatched_keypair_halves(tmp_path) -> None:
    first = bytes(Keypair.from_seed(bytes([4]) * 32))
    second = bytes(Keypair.from_seed(bytes([5]) * 32))
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(first[:32] + second[32:])), encoding="utf-8")

    with pytest.raises(IdentityError, match="do not match"):
        load_keypair_file(path)


def test_identity_error_is_config_error() -> None:
    assert issubclass(IdentityError, ConfigError)


def test_resolve_program_id_prefers_explicit_value(tmp_path) -> None:
    program = Keypair.from_seed(bytes([9]) * 32)
    path = tmp_path / "helloworld-keypair.json"
    _write_keypair(path, program)

    assert resolve_program_id(program_keypair_path=path) == program.pubkey()
    explicit = resolve_program_id(
        program_id="BPFLoaderUpgradeab1e11111111111111111111111",
        program_keypair_path=path,
    )
    assert str(explicit) == "BPFLoaderUpgradeab1e11111111111111111111111"


def test_resolve_program_id_invalid(tmp_path) -> None:
    with pytest.raises(IdentityError):
        resolve_program_id(program_id="not-base58-!!")
    with pytest.raises(IdentityError):
        resolve_program_id(program_keypair_path=tmp_path / "missing.json")
