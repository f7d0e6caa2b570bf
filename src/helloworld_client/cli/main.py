"""Command-line interface for helloworld-client."""

from __future__ import annotations

import argparse
import json
import re
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Sequence

from helloworld_client.cli.config import (
    CLIConfig,
    ConfigError,
    SolanaCLIConfig,
    load_cli_config,
    load_solana_cli_config,
    resolve_cluster_url,
)
from helloworld_client.cli.identity import (
    IdentityError,
    IdentitySource,
    resolve_identity,
    resolve_program_id,
)
from helloworld_client.client import ClusterClient
from helloworld_client.errors import (
    AccountNotFoundError,
    ClusterUnavailableError,
    ConfirmationTimeoutError,
    DecodeError,
    InsufficientFundsError,
    SubmissionRejectedError,
)
from helloworld_client.workflow import HelloWorldWorkflow, WorkflowSettings

EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_NETWORK_ERROR = 2
EXIT_TIMEOUT = 3
EXIT_REJECTED = 4
EXIT_INSUFFICIENT_FUNDS = 5
EXIT_STATE_ERROR = 6

_SENSITIVE_PARAMS = ("api-key", "api_key", "apikey", "token", "secret", "access_token")


def _client_version() -> str:
    try:
        return pkg_version("helloworld-client")
    except PackageNotFoundError:
        return "0.0.0+local"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helloworld-client",
        description="Say hello to a Solana account owned by the hello-world program.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"helloworld-client {_client_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to client config TOML (default: ~/.helloworld_client/config.toml)",
    )
    parser.add_argument(
        "--solana-config",
        default=None,
        help="Path to Solana CLI config YAML (default: ~/.config/solana/cli/config.yml)",
    )
    parser.add_argument(
        "--url",
        "-u",
        default=None,
        help="RPC URL or moniker (localnet, devnet, testnet, mainnet-beta)",
    )
    parser.add_argument(
        "--keypair",
        "-k",
        default=None,
        help="Payer keypair file (default from Solana CLI config, else ephemeral)",
    )
    parser.add_argument("--json", action="store_true", help="Print the run summary as JSON")
    return parser


def _sanitize_error_text(value: str) -> str:
    redacted = value
    for param in _SENSITIVE_PARAMS:
        redacted = re.sub(
            rf"(?i)([?&]{re.escape(param)}=)([^&\s\"']+)",
            r"\1[REDACTED]",
            redacted,
        )
    return redacted


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {_sanitize_error_text(message)}", file=stderr)
    return code


def _resolve_rpc_url(args, config: CLIConfig, solana_config: SolanaCLIConfig) -> str:
    if args.url:
        return resolve_cluster_url(args.url)
    if config.rpc_url:
        return config.rpc_url
    return solana_config.json_rpc_url


def _build_cluster_client(
    *, rpc_url: str, config: CLIConfig, solana_config: SolanaCLIConfig
) -> ClusterClient:
    return ClusterClient(
        rpc_url=rpc_url,
        commitment=config.commitment or solana_config.commitment or "confirmed",
        timeout=config.rpc_timeout_seconds,
        retries=config.rpc_retries,
        confirm_timeout=config.confirm_timeout_seconds,
        confirm_interval=config.confirm_poll_seconds,
    )


def _run_hello(
    *,
    args,
    config: CLIConfig,
    solana_config: SolanaCLIConfig,
    stdout,
    stderr,
) -> int:
    print("Let's say hello to a Solana account...", file=stdout)

    try:
        identity = resolve_identity(args.keypair or solana_config.keypair_path)
        program_id = resolve_program_id(
            program_id=config.program_id,
            program_keypair_path=config.program_keypair_path or None,
        )
    except IdentityError as exc:
        return _print_error(stderr, "identity error", str(exc), code=EXIT_CONFIG_ERROR)
    if identity.source is IdentitySource.EPHEMERAL:
        print(
            "No keypair configured in CLI config, falling back to new random keypair",
            file=stdout,
        )

    rpc_url = _resolve_rpc_url(args, config, solana_config)
    print(f"Connecting to {_sanitize_error_text(rpc_url)}", file=stdout)
    try:
        client = _build_cluster_client(rpc_url=rpc_url, config=config, solana_config=solana_config)
    except ValueError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_CONFIG_ERROR)

    settings = WorkflowSettings(
        program_id=program_id,
        greeting_seed=config.greeting_seed,
        program_so_path=config.program_so_path or None,
        fee_signature_multiplier=config.fee_signature_multiplier,
        confirm_timeout_seconds=config.confirm_timeout_seconds,
    )
    workflow = HelloWorldWorkflow(
        client,
        identity.keypair,
        settings,
        progress=lambda line: print(line, file=stdout),
    )

    try:
        summary = workflow.run()
    except ConfirmationTimeoutError as exc:
        return _print_error(stderr, "timeout error", str(exc), code=EXIT_TIMEOUT)
    except InsufficientFundsError as exc:
        return _print_error(stderr, "funding error", str(exc), code=EXIT_INSUFFICIENT_FUNDS)
    except SubmissionRejectedError as exc:
        return _print_error(stderr, "transaction rejected", str(exc), code=EXIT_REJECTED)
    except ClusterUnavailableError as exc:
        return _print_error(stderr, "cluster error", str(exc), code=EXIT_NETWORK_ERROR)
    except (AccountNotFoundError, DecodeError) as exc:
        return _print_error(stderr, "state error", str(exc), code=EXIT_STATE_ERROR)
    except ValueError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_CONFIG_ERROR)
    finally:
        client.close()

    if args.json:
        payload = summary.to_dict()
        payload["identity_source"] = identity.source.value
        payload["rpc_url"] = _sanitize_error_text(rpc_url)
        print(json.dumps(payload, sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    print("Success", file=stdout)
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_cli_config(args.config)
        solana_config = load_solana_cli_config(args.solana_config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_CONFIG_ERROR)

    return _run_hello(
        args=args,
        config=config,
        solana_config=solana_config,
        stdout=stdout,
        stderr=stderr,
    )


if __name__ == "__main__":
    raise SystemExit(main())
