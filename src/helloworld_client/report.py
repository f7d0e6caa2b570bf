"""Greeting account state reporting."""

from __future__ import annotations

from solders.pubkey import Pubkey

from helloworld_client.client import ClusterClient
from helloworld_client.errors import DecodeError
from helloworld_client.state import GreetingAccount


def fetch_greeting(
    client: ClusterClient,
    greeting_address: Pubkey,
    *,
    program_id: Pubkey | None = None,
) -> GreetingAccount:
    info = client.get_account_info(greeting_address)
    if program_id is not None and info.owner != program_id:
        raise DecodeError(
            f"account {greeting_address} is owned by {info.owner}, expected {program_id}"
        )
    return GreetingAccount.decode(info.data)
