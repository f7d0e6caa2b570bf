"""Fee estimation for a hello-world run."""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

from helloworld_client.client import ClusterClient

DEFAULT_SIGNATURE_MULTIPLIER = 100


@dataclass(frozen=True)
class FeeEstimate:
    rent_exempt_lamports: int
    lamports_per_signature: int
    signature_multiplier: int = DEFAULT_SIGNATURE_MULTIPLIER

    @property
    def signature_lamports(self) -> int:
        return self.lamports_per_signature * self.signature_multiplier

    @property
    def total(self) -> int:
        return self.rent_exempt_lamports + self.signature_lamports


def estimate_fees(
    client: ClusterClient,
    *,
    record_size: int,
    payer: Pubkey,
    signature_multiplier: int = DEFAULT_SIGNATURE_MULTIPLIER,
) -> FeeEstimate:
    """Lamports needed to rent-exempt the record and pay for a batch of signatures.

    The multiplier is deliberately generous so that fee drift between this
    estimate and the later submissions does not leave the payer short.
    """
    if record_size < 0:
        raise ValueError("record_size must be >= 0")
    if signature_multiplier < 1:
        raise ValueError("signature_multiplier must be >= 1")
    rent_exempt = client.get_minimum_balance_for_rent_exemption(record_size)
    per_signature = client.get_lamports_per_signature(payer)
    return FeeEstimate(
        rent_exempt_lamports=rent_exempt,
        lamports_per_signature=per_signature,
        signature_multiplier=signature_multiplier,
    )
