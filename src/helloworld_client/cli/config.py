"""Configuration helpers for the helloworld-client CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path.home() / ".helloworld_client" / "config.toml"
DEFAULT_SOLANA_CONFIG_PATH = Path.home() / ".config" / "solana" / "cli" / "config.yml"
DEFAULT_RPC_URL = "http://127.0.0.1:8899"
DEFAULT_PROGRAM_KEYPAIR_PATH = "dist/program/helloworld-keypair.json"
DEFAULT_PROGRAM_SO_PATH = "dist/program/helloworld.so"
DEFAULT_GREETING_SEED = "hello"
RPC_URL_ENV_VAR = "HELLOWORLD_RPC_URL"
PROGRAM_ID_ENV_VAR = "HELLOWORLD_PROGRAM_ID"
SOLANA_CONFIG_ENV_VAR = "SOLANA_CONFIG_FILE"

CLUSTER_MONIKERS = {
    "localhost": "http://127.0.0.1:8899",
    "localnet": "http://127.0.0.1:8899",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}
_COMMITMENTS = {"processed", "confirmed", "finalized"}


@dataclass(frozen=True)
class SolanaCLIConfig:
    json_rpc_url: str = DEFAULT_RPC_URL
    keypair_path: str | None = None
    commitment: str | None = None


@dataclass(frozen=True)
class CLIConfig:
    rpc_url: str | None = None
    program_id: str | None = None
    program_keypair_path: str = DEFAULT_PROGRAM_KEYPAIR_PATH
    program_so_path: str = DEFAULT_PROGRAM_SO_PATH
    greeting_seed: str = DEFAULT_GREETING_SEED
    commitment: str | None = None
    fee_signature_multiplier: int = 100
    confirm_timeout_seconds: float = 30.0
    confirm_poll_seconds: float = 0.5
    rpc_timeout_seconds: float = 10.0
    rpc_retries: int = 0


class ConfigError(ValueError):
    """Raised when CLI config is invalid."""


def _load_toml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def _load_yaml_module() -> Any:
    try:
        import yaml
    except Exception as exc:  # pragma: no cover
        raise ConfigError("YAML parser not available. Install PyYAML to read Solana CLI config.") from exc
    return yaml


def _optional_str(source: dict[str, Any], key: str) -> str | None:
    raw = source.get(key)
    if raw is None:
        return None
    return str(raw).strip() or None


def _to_positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a number") from exc
    if number <= 0:
        raise ConfigError(f"{field_name} must be > 0")
    return number


def _to_int(value: Any, field_name: str, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{field_name} must be an integer")
    if value < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return value


def _validate_commitment(value: str | None, field_name: str) -> str | None:
    if value is None:
        return None
    lowered = value.lower()
    if lowered not in _COMMITMENTS:
        raise ConfigError(f"{field_name} must be one of: processed, confirmed, finalized")
    return lowered


def resolve_cluster_url(value: str) -> str:
    return CLUSTER_MONIKERS.get(value.strip(), value.strip())


def load_cli_config(path: str | Path | None = None) -> CLIConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        source: dict[str, Any] = {}
    else:
        parsed = _load_toml(config_path)
        section = parsed.get("client")
        if isinstance(section, dict):
            source = section
        elif section is None:
            source = parsed
        else:
            raise ConfigError("[client] must be a table")

    env_rpc_url = os.getenv(RPC_URL_ENV_VAR)
    rpc_url = env_rpc_url.strip() if env_rpc_url else _optional_str(source, "rpc_url")
    env_program_id = os.getenv(PROGRAM_ID_ENV_VAR)
    program_id = env_program_id.strip() if env_program_id else _optional_str(source, "program_id")

    program_keypair_path = str(
        source.get("program_keypair_path", DEFAULT_PROGRAM_KEYPAIR_PATH)
    ).strip()
    if not program_keypair_path and not program_id:
        raise ConfigError("program_keypair_path must not be empty when program_id is unset")

    program_so_path = str(source.get("program_so_path", DEFAULT_PROGRAM_SO_PATH)).strip()

    greeting_seed = str(source.get("greeting_seed", DEFAULT_GREETING_SEED))
    if not greeting_seed:
        raise ConfigError("greeting_seed must not be empty")
    if len(greeting_seed.encode("utf-8")) > 32:
        raise ConfigError("greeting_seed must be at most 32 bytes")

    return CLIConfig(
        rpc_url=resolve_cluster_url(rpc_url) if rpc_url else None,
        program_id=program_id,
        program_keypair_path=program_keypair_path,
        program_so_path=program_so_path,
        greeting_seed=greeting_seed,
        commitment=_validate_commitment(_optional_str(source, "commitment"), "commitment"),
        fee_signature_multiplier=_to_int(
            source.get("fee_signature_multiplier", 100), "fee_signature_multiplier", minimum=1
        ),
        confirm_timeout_seconds=_to_positive_number(
            source.get("confirm_timeout_seconds", 30.0), "confirm_timeout_seconds"
        ),
        confirm_poll_seconds=_to_positive_number(
            source.get("confirm_poll_seconds", 0.5), "confirm_poll_seconds"
        ),
        rpc_timeout_seconds=_to_positive_number(
            source.get("rpc_timeout_seconds", 10.0), "rpc_timeout_seconds"
        ),
        rpc_retries=_to_int(source.get("rpc_retries", 0), "rpc_retries", minimum=0),
    )


def load_solana_cli_config(path: str | Path | None = None) -> SolanaCLIConfig:
    env_path = os.getenv(SOLANA_CONFIG_ENV_VAR)
    if path:
        config_path = Path(path)
    elif env_path:
        config_path = Path(env_path)
    else:
        config_path = DEFAULT_SOLANA_CONFIG_PATH
    if not config_path.exists():
        return SolanaCLIConfig()

    yaml = _load_yaml_module()
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except Exception as exc:
        raise ConfigError(f"invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Solana CLI config must be a mapping: {config_path}")

    json_rpc_url = _optional_str(payload, "json_rpc_url") or DEFAULT_RPC_URL
    return SolanaCLIConfig(
        json_rpc_url=resolve_cluster_url(json_rpc_url),
        keypair_path=_optional_str(payload, "keypair_path"),
        commitment=_validate_commitment(_optional_str(payload, "commitment"), "commitment"),
    )
