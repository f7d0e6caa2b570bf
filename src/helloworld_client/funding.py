"""Payer funding via cluster airdrop."""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey
from solders.signature import Signature

from helloworld_client.client import ClusterClient
from helloworld_client.errors import (
    ClusterRequestError,
    InsufficientFundsError,
    SubmissionRejectedError,
)


@dataclass(frozen=True)
class FundingResult:
    payer: Pubkey
    required_lamports: int
    balance_before: int
    balance_after: int
    airdrop_lamports: int = 0
    airdrop_signature: Signature | None = None

    @property
    def funded(self) -> bool:
        return self.airdrop_signature is not None


def ensure_payer_funded(
    client: ClusterClient,
    *,
    payer: Pubkey,
    required_lamports: int,
    confirm_timeout: float | None = None,
) -> FundingResult:
    balance = client.get_balance(payer)
    if balance >= required_lamports:
        return FundingResult(
            payer=payer,
            required_lamports=required_lamports,
            balance_before=balance,
            balance_after=balance,
        )

    deficit = required_lamports - balance
    try:
        signature = client.request_airdrop(payer, deficit)
    except ClusterRequestError as exc:
        raise InsufficientFundsError(
            f"airdrop of {deficit} lamports to {payer} rejected: {exc}"
        ) from exc

    # Unconfirmed airdrops are not spendable; later stages must not race them.
    try:
        client.wait_for_confirmation(signature, timeout=confirm_timeout)
    except SubmissionRejectedError as exc:
        raise InsufficientFundsError(f"airdrop {signature} failed: {exc}") from exc

    funded_balance = client.get_balance(payer)
    if funded_balance < required_lamports:
        raise InsufficientFundsError(
            f"payer {payer} holds {funded_balance} lamports after airdrop, "
            f"{required_lamports} required"
        )
    return FundingResult(
        payer=payer,
        required_lamports=required_lamports,
        balance_before=balance,
        balance_after=funded_balance,
        airdrop_lamports=deficit,
        airdrop_signature=signature,
    )
