"""Signing identity resolution for the helloworld-client CLI."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from helloworld_client.cli.config import ConfigError

KEYPAIR_LENGTH = 64


class IdentityError(ConfigError):
    """Raised when keypair material is invalid or cannot be loaded."""


class IdentitySource(enum.Enum):
    CONFIGURED = "configured"
    EPHEMERAL = "ephemeral"


@dataclass(frozen=True)
class ResolvedIdentity:
    keypair: Keypair
    source: IdentitySource
    path: Path | None = None

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()


def load_keypair_file(path: str | Path) -> Keypair:
    """Load a Solana JSON keypair file (a 64-element byte array)."""
    keypair_path = Path(path).expanduser()
    try:
        payload = json.loads(keypair_path.read_text(encoding="utf-8"))
    except Exception as exc:
        raise IdentityError(f"invalid keypair file: {keypair_path}") from exc

    if not isinstance(payload, list) or len(payload) != KEYPAIR_LENGTH:
        raise IdentityError(f"keypair file must contain {KEYPAIR_LENGTH} bytes: {keypair_path}")
    if not all(isinstance(item, int) and 0 <= item <= 255 for item in payload):
        raise IdentityError(f"keypair file must contain byte values: {keypair_path}")

    raw = bytes(payload)
    secret, public = raw[:32], raw[32:]

    # Validate keypair consistency.
    expected_public = (
        Ed25519PrivateKey.from_private_bytes(secret)
        .public_key()
        .public_bytes(Encoding.Raw, PublicFormat.Raw)
    )
    if expected_public != public:
        raise IdentityError(f"keypair file secret/public halves do not match: {keypair_path}")
    return Keypair.from_bytes(raw)


def generate_keypair() -> Keypair:
    private = Ed25519PrivateKey.generate()
    secret = private.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    public = private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return Keypair.from_bytes(secret + public)


def resolve_identity(keypair_path: str | Path | None) -> ResolvedIdentity:
    if keypair_path is None or not str(keypair_path).strip():
        return ResolvedIdentity(keypair=generate_keypair(), source=IdentitySource.EPHEMERAL)
    path = Path(keypair_path).expanduser()
    return ResolvedIdentity(keypair=load_keypair_file(path), source=IdentitySource.CONFIGURED, path=path)


def resolve_program_id(
    *,
    program_id: str | None = None,
    program_keypair_path: str | Path | None = None,
) -> Pubkey:
    if program_id:
        try:
            return Pubkey.from_string(program_id)
        except Exception as exc:
            raise IdentityError(f"invalid program_id: {program_id}") from exc
    if program_keypair_path is None:
        raise IdentityError("program_id or program_keypair_path must be configured")
    return load_keypair_file(program_keypair_path).pubkey()
