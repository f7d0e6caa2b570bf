"""Greeting account derivation and idempotent provisioning."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import CreateAccountWithSeedParams, create_account_with_seed
from solders.transaction import Transaction

from helloworld_client.client import ClusterClient
from helloworld_client.errors import AccountNotFoundError

MAX_SEED_LEN = 32


@dataclass(frozen=True)
class ProgramStatus:
    program_id: Pubkey
    deployed: bool
    executable: bool
    diagnostic: str | None = None


@dataclass(frozen=True)
class ProvisionResult:
    address: Pubkey
    created: bool
    lamports: int = 0
    signature: Signature | None = None


def derive_greeting_address(payer: Pubkey, seed: str, program_id: Pubkey) -> Pubkey:
    if len(seed.encode("utf-8")) > MAX_SEED_LEN:
        raise ValueError(f"seed must be at most {MAX_SEED_LEN} bytes")
    return Pubkey.create_with_seed(payer, seed, program_id)


def check_program(
    client: ClusterClient,
    *,
    program_id: Pubkey,
    program_so_path: str | Path | None = None,
) -> ProgramStatus:
    """Report whether the program is deployed; never fatal.

    The greeting account may legally exist before the program does, so a
    missing or non-executable program only yields a diagnostic here.
    """
    try:
        info = client.get_account_info(program_id)
    except AccountNotFoundError:
        if program_so_path is not None and Path(program_so_path).expanduser().exists():
            diagnostic = f"Program needs to be deployed with `solana program deploy {program_so_path}`"
        else:
            diagnostic = "Program needs to be built and deployed"
        return ProgramStatus(
            program_id=program_id,
            deployed=False,
            executable=False,
            diagnostic=diagnostic,
        )
    if not info.executable:
        return ProgramStatus(
            program_id=program_id,
            deployed=True,
            executable=False,
            diagnostic="Program is not executable",
        )
    return ProgramStatus(program_id=program_id, deployed=True, executable=True)


def ensure_greeting_account(
    client: ClusterClient,
    *,
    payer: Keypair,
    program_id: Pubkey,
    seed: str,
    space: int,
) -> ProvisionResult:
    address = derive_greeting_address(payer.pubkey(), seed, program_id)
    try:
        client.get_account_info(address)
    except AccountNotFoundError:
        pass
    else:
        # Existing accounts are left untouched whatever their contents.
        return ProvisionResult(address=address, created=False)

    lamports = client.get_minimum_balance_for_rent_exemption(space)
    instruction = create_account_with_seed(
        CreateAccountWithSeedParams(
            from_pubkey=payer.pubkey(),
            to_pubkey=address,
            base=payer.pubkey(),
            seed=seed,
            lamports=lamports,
            space=space,
            owner=program_id,
        )
    )
    latest = client.get_latest_blockhash()
    transaction = Transaction.new_signed_with_payer(
        [instruction],
        payer.pubkey(),
        [payer],
        latest.blockhash,
    )
    signature = client.send_and_confirm_transaction(
        transaction,
        last_valid_block_height=latest.last_valid_block_height,
    )
    return ProvisionResult(address=address, created=True, lamports=lamports, signature=signature)
