from __future__ import annotations

import struct

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from helloworld_client.client import AccountInfo, BlockhashInfo
from helloworld_client.errors import AccountNotFoundError, SubmissionRejectedError
from helloworld_client.state import GreetingAccount

LAMPORTS_PER_SIGNATURE = 5000
BPF_LOADER_ID = Pubkey.from_string("BPFLoaderUpgradeab1e11111111111111111111111")
_CREATE_ACCOUNT_WITH_SEED = 3


def rent_exempt_minimum(size: int) -> int:
    return (128 + size) * 6960


def _parse_create_account_with_seed(data: bytes) -> tuple[int, int, Pubkey]:
    (kind,) = struct.unpack_from("<I", data, 0)
    assert kind == _CREATE_ACCOUNT_WITH_SEED
    offset = 4 + 32
    (seed_len,) = struct.unpack_from("<Q", data, offset)
    offset += 8 + seed_len
    lamports, space = struct.unpack_from("<QQ", data, offset)
    offset += 16
    owner = Pubkey(data[offset : offset + 32])
    return lamports, space, owner


class FakeCluster:
    """In-memory stand-in for ClusterClient covering the workflow's calls."""

    rpc_url = "http://fake.cluster:8899"
    commitment = "confirmed"

    def __init__(
        self,
        *,
        balances: dict | None = None,
        accounts: dict | None = None,
        airdrop_error: Exception | None = None,
        airdrop_shortfall: int = 0,
        send_errors: list | None = None,
    ) -> None:
        self.balances: dict[Pubkey, int] = dict(balances or {})
        self.accounts: dict[Pubkey, AccountInfo] = dict(accounts or {})
        self.airdrop_error = airdrop_error
        self.airdrop_shortfall = airdrop_shortfall
        self.send_errors = list(send_errors or [])
        self.calls: list[str] = []
        self.account_lookups: list[Pubkey] = []
        self.airdrops: list[tuple[Pubkey, int]] = []
        self.created: list[Pubkey] = []
        self.invoked: list[Pubkey] = []
        self._signer = Keypair()
        self._sequence = 0

    def _signature(self, label: str):
        self._sequence += 1
        return self._signer.sign_message(f"{label}-{self._sequence}".encode())

    def deploy_program(self, program_id: Pubkey) -> None:
        self.accounts[program_id] = AccountInfo(
            lamports=1_000_000,
            owner=BPF_LOADER_ID,
            executable=True,
            data=b"",
        )

    def greeting_account(self, address: Pubkey, *, owner: Pubkey, counter: int) -> None:
        self.accounts[address] = AccountInfo(
            lamports=rent_exempt_minimum(4),
            owner=owner,
            executable=False,
            data=GreetingAccount(counter).encode(),
        )

    def get_version(self) -> dict:
        self.calls.append("get_version")
        return {"solana-core": "1.18.26", "feature-set": 3469865029}

    def get_balance(self, pubkey: Pubkey) -> int:
        self.calls.append("get_balance")
        return self.balances.get(pubkey, 0)

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self.calls.append("get_minimum_balance_for_rent_exemption")
        return rent_exempt_minimum(size)

    def get_lamports_per_signature(self, payer: Pubkey) -> int:  # noqa: ARG002
        self.calls.append("get_lamports_per_signature")
        return LAMPORTS_PER_SIGNATURE

    def get_latest_blockhash(self) -> BlockhashInfo:
        self.calls.append("get_latest_blockhash")
        return BlockhashInfo(blockhash=Hash.new_unique(), last_valid_block_height=300)

    def request_airdrop(self, pubkey: Pubkey, lamports: int):
        self.calls.append("request_airdrop")
        if self.airdrop_error is not None:
            raise self.airdrop_error
        self.airdrops.append((pubkey, lamports))
        self.balances[pubkey] = self.balances.get(pubkey, 0) + lamports - self.airdrop_shortfall
        return self._signature("airdrop")

    def wait_for_confirmation(self, signature, *, timeout=None, interval=None, last_valid_block_height=None):  # noqa: ARG002
        self.calls.append("wait_for_confirmation")
        return {"confirmationStatus": "confirmed", "err": None}

    def get_account_info(self, pubkey: Pubkey) -> AccountInfo:
        self.calls.append("get_account_info")
        self.account_lookups.append(pubkey)
        info = self.accounts.get(pubkey)
        if info is None:
            raise AccountNotFoundError(pubkey)
        return info

    def send_and_confirm_transaction(self, transaction, *, last_valid_block_height=None):  # noqa: ARG002
        self.calls.append("send_and_confirm_transaction")
        if self.send_errors:
            raise self.send_errors.pop(0)
        transaction.verify()
        message = transaction.message
        keys = message.account_keys
        payer = keys[0]
        for compiled in message.instructions:
            program = keys[compiled.program_id_index]
            if program == SYSTEM_PROGRAM_ID:
                new_address = keys[compiled.accounts[1]]
                lamports, space, owner = _parse_create_account_with_seed(bytes(compiled.data))
                self.accounts[new_address] = AccountInfo(
                    lamports=lamports,
                    owner=owner,
                    executable=False,
                    data=bytes(space),
                )
                self.balances[payer] = self.balances.get(payer, 0) - lamports
                self.created.append(new_address)
                continue
            target = keys[compiled.accounts[0]]
            info = self.accounts.get(target)
            if info is None or info.owner != program:
                raise SubmissionRejectedError(
                    "sendTransaction failed: Transaction simulation failed: "
                    "Error processing Instruction 0: incorrect program id for instruction",
                    method="sendTransaction",
                    code=-32002,
                )
            counter = GreetingAccount.decode(info.data).counter + 1
            self.accounts[target] = AccountInfo(
                lamports=info.lamports,
                owner=info.owner,
                executable=False,
                data=GreetingAccount(counter).encode(),
            )
            self.invoked.append(target)
        self.balances[payer] = self.balances.get(payer, 0) - LAMPORTS_PER_SIGNATURE
        return transaction.signatures[0]

    def close(self) -> None:
        self.calls.append("close")

    def count(self, name: str) -> int:
        return self.calls.count(name)


@pytest.fixture
def fake_cluster_cls():
    return FakeCluster


@pytest.fixture
def payer() -> Keypair:
    return Keypair.from_seed(bytes([1]) * 32)


@pytest.fixture
def program_id() -> Pubkey:
    return Pubkey(bytes([7]) * 32)
