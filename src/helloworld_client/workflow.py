"""Provision-and-invoke workflow for the hello-world program.

Stages run strictly in order and each one assumes the previous one
succeeded:

1. connect and report the cluster version
2. estimate fees and fund the payer (airdrop only when short)
3. check the program and create the greeting account if it is absent
4. send one say-hello instruction
5. read the counter back

Every failure propagates to the caller and aborts the remaining stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from helloworld_client.client import LAMPORTS_PER_SOL, ClusterClient
from helloworld_client.fees import DEFAULT_SIGNATURE_MULTIPLIER, FeeEstimate, estimate_fees
from helloworld_client.funding import FundingResult, ensure_payer_funded
from helloworld_client.invoke import SAY_HELLO_OPCODE, say_hello
from helloworld_client.provision import (
    ProgramStatus,
    ProvisionResult,
    check_program,
    ensure_greeting_account,
)
from helloworld_client.report import fetch_greeting
from helloworld_client.state import GreetingAccount, greeting_account_size

ProgressCallback = Callable[[str], None]


def _discard(_: str) -> None:
    return None


@dataclass(frozen=True)
class WorkflowSettings:
    program_id: Pubkey
    greeting_seed: str
    program_so_path: str | Path | None = None
    opcode: bytes = SAY_HELLO_OPCODE
    fee_signature_multiplier: int = DEFAULT_SIGNATURE_MULTIPLIER
    confirm_timeout_seconds: float | None = None


@dataclass
class RunSummary:
    payer: Pubkey
    program_id: Pubkey
    greeting_address: Pubkey | None = None
    version: dict = field(default_factory=dict)
    fees: FeeEstimate | None = None
    funding: FundingResult | None = None
    program: ProgramStatus | None = None
    provision: ProvisionResult | None = None
    hello_signature: Signature | None = None
    greeting: GreetingAccount | None = None

    def to_dict(self) -> dict:
        return {
            "payer": str(self.payer),
            "program_id": str(self.program_id),
            "greeting_address": str(self.greeting_address) if self.greeting_address else None,
            "cluster_version": self.version.get("solana-core"),
            "fee_estimate_lamports": self.fees.total if self.fees else None,
            "airdrop_lamports": self.funding.airdrop_lamports if self.funding else 0,
            "airdrop_signature": (
                str(self.funding.airdrop_signature)
                if self.funding and self.funding.airdrop_signature
                else None
            ),
            "program_executable": self.program.executable if self.program else None,
            "account_created": self.provision.created if self.provision else None,
            "create_signature": (
                str(self.provision.signature)
                if self.provision and self.provision.signature
                else None
            ),
            "hello_signature": str(self.hello_signature) if self.hello_signature else None,
            "counter": self.greeting.counter if self.greeting else None,
        }


class HelloWorldWorkflow:
    def __init__(
        self,
        client: ClusterClient,
        payer: Keypair,
        settings: WorkflowSettings,
        *,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.client = client
        self.payer = payer
        self.settings = settings
        self._progress = progress or _discard

    def connect(self) -> dict:
        version = self.client.get_version()
        self._progress(
            f"Connection to cluster established, version {version.get('solana-core', 'unknown')}"
        )
        return version

    def establish_payer(self) -> tuple[FeeEstimate, FundingResult]:
        size = greeting_account_size()
        self._progress(f"Greeting account size = {size}")
        fees = estimate_fees(
            self.client,
            record_size=size,
            payer=self.payer.pubkey(),
            signature_multiplier=self.settings.fee_signature_multiplier,
        )
        funding = ensure_payer_funded(
            self.client,
            payer=self.payer.pubkey(),
            required_lamports=fees.total,
            confirm_timeout=self.settings.confirm_timeout_seconds,
        )
        if funding.funded:
            self._progress(
                f"Airdropped {funding.airdrop_lamports} lamports to {funding.payer} "
                f"({funding.airdrop_signature})"
            )
        self._progress(
            f"Using account {funding.payer} containing "
            f"{funding.balance_after / LAMPORTS_PER_SOL} SOL to pay for fees"
        )
        return fees, funding

    def check_program(self) -> tuple[ProgramStatus, ProvisionResult]:
        status = check_program(
            self.client,
            program_id=self.settings.program_id,
            program_so_path=self.settings.program_so_path,
        )
        if status.diagnostic:
            self._progress(status.diagnostic)
        self._progress(f"Using program {self.settings.program_id}")

        provision = ensure_greeting_account(
            self.client,
            payer=self.payer,
            program_id=self.settings.program_id,
            seed=self.settings.greeting_seed,
            space=greeting_account_size(),
        )
        if provision.created:
            self._progress(
                f"Created greeting account {provision.address} ({provision.signature})"
            )
        else:
            self._progress(f"Greeting account {provision.address} already exists")
        return status, provision

    def say_hello(self, greeting_address: Pubkey) -> Signature:
        self._progress(f"Saying hello to {greeting_address}, owner is {self.settings.program_id}")
        signature = say_hello(
            self.client,
            payer=self.payer,
            program_id=self.settings.program_id,
            greeting_address=greeting_address,
            opcode=self.settings.opcode,
        )
        self._progress(f"Say hello: {signature}")
        return signature

    def report(self, greeting_address: Pubkey) -> GreetingAccount:
        greeting = fetch_greeting(
            self.client,
            greeting_address,
            program_id=self.settings.program_id,
        )
        self._progress(f"{greeting_address} has been greeted {greeting.counter} time(s)")
        return greeting

    def run(self) -> RunSummary:
        summary = RunSummary(payer=self.payer.pubkey(), program_id=self.settings.program_id)
        summary.version = self.connect()
        summary.fees, summary.funding = self.establish_payer()
        summary.program, summary.provision = self.check_program()
        summary.greeting_address = summary.provision.address
        summary.hello_signature = self.say_hello(summary.greeting_address)
        summary.greeting = self.report(summary.greeting_address)
        return summary
