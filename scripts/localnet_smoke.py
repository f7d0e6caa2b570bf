#!/usr/bin/env python3
"""Run helloworld-client twice against a live cluster and check the counter advances."""

from __future__ import annotations

import argparse
import json
import subprocess

import requests


def _check_health(rpc_url: str) -> None:
    response = requests.post(
        rpc_url,
        json={"jsonrpc": "2.0", "id": 1, "method": "getHealth"},
        timeout=10,
    )
    response.raise_for_status()
    payload = response.json()
    if payload.get("result") != "ok":
        raise SystemExit(f"cluster unhealthy: {payload}")


def _run_client(*, rpc_url: str, keypair: str | None, config: str | None) -> dict:
    command = ["helloworld-client", "--url", rpc_url, "--json"]
    if keypair:
        command += ["--keypair", keypair]
    if config:
        command += ["--config", config]
    result = subprocess.run(command, capture_output=True, text=True, check=False)
    if result.returncode != 0:
        raise SystemExit(f"helloworld-client failed ({result.returncode}):\n{result.stderr}")
    return json.loads(result.stdout.strip().splitlines()[-1])


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke-test helloworld-client on a live cluster.")
    parser.add_argument("--url", default="http://127.0.0.1:8899", help="Cluster RPC URL")
    parser.add_argument(
        "--keypair",
        required=True,
        help="Payer keypair reused across both runs so the greeting account is shared",
    )
    parser.add_argument("--config", default=None, help="Client config TOML")
    args = parser.parse_args()

    _check_health(args.url)

    first = _run_client(rpc_url=args.url, keypair=args.keypair, config=args.config)
    second = _run_client(rpc_url=args.url, keypair=args.keypair, config=args.config)

    if first["greeting_address"] != second["greeting_address"]:
        raise SystemExit("greeting address changed between runs")
    if second["account_created"]:
        raise SystemExit("second run re-created the greeting account")
    if second["counter"] != first["counter"] + 1:
        raise SystemExit(f"counter did not advance: {first['counter']} -> {second['counter']}")

    print(f"greeting_address={second['greeting_address']}")
    print(f"counter={second['counter']}")
    print("idempotent_provisioning_ok=true")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
