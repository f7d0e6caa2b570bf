"""Typed JSON-RPC client for the ledger cluster."""

from __future__ import annotations

import base64
import itertools
import json
import time
from dataclasses import dataclass

from solders.hash import Hash
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from helloworld_client.errors import (
    AccountNotFoundError,
    ClusterRequestError,
    ClusterUnavailableError,
    ConfirmationTimeoutError,
    StaleBlockhashError,
    SubmissionRejectedError,
)

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")
LAMPORTS_PER_SOL = 1_000_000_000

_BLOCKHASH_NOT_FOUND = "BlockhashNotFound"


@dataclass(frozen=True)
class BlockhashInfo:
    blockhash: Hash
    last_valid_block_height: int


@dataclass(frozen=True)
class AccountInfo:
    lamports: int
    owner: Pubkey
    executable: bool
    data: bytes
    rent_epoch: int | None = None


def _commitment_rank(level: str | None) -> int:
    if level not in COMMITMENT_LEVELS:
        return -1
    return COMMITMENT_LEVELS.index(level)


def _meets_commitment(status: dict, commitment: str) -> bool:
    reached = status.get("confirmationStatus")
    if reached is None:
        # Nodes that omit confirmationStatus report rooted slots as confirmations=None.
        reached = "finalized" if status.get("confirmations") is None else "processed"
    return _commitment_rank(reached) >= _commitment_rank(commitment)


def _is_blockhash_error(message: str, data: object) -> bool:
    if "blockhash not found" in message.lower():
        return True
    return isinstance(data, dict) and data.get("err") == _BLOCKHASH_NOT_FOUND


def _parse_account_info(value: dict) -> AccountInfo:
    raw_data = value.get("data")
    if isinstance(raw_data, list) and raw_data:
        data = base64.b64decode(raw_data[0])
    elif isinstance(raw_data, str):
        data = base64.b64decode(raw_data)
    else:
        data = b""
    return AccountInfo(
        lamports=int(value.get("lamports", 0)),
        owner=Pubkey.from_string(str(value["owner"])),
        executable=bool(value.get("executable", False)),
        data=data,
        rent_epoch=value.get("rentEpoch"),
    )


@dataclass
class ClusterClient:
    rpc_url: str
    commitment: str = "confirmed"
    timeout: float = 10.0
    retries: int = 0
    confirm_timeout: float = 30.0
    confirm_interval: float = 0.5
    confirm_backoff: float = 1.5
    confirm_max_interval: float = 5.0

    def __post_init__(self) -> None:
        if self.commitment not in COMMITMENT_LEVELS:
            raise ValueError(f"commitment must be one of: {', '.join(COMMITMENT_LEVELS)}")
        try:
            import requests
            from requests.adapters import HTTPAdapter
            from urllib3.util.retry import Retry
        except Exception as exc:  # pragma: no cover
            raise ClusterUnavailableError(f"requests stack unavailable: {exc}") from exc

        self._requests = requests
        self._session = requests.Session()
        retry = Retry(
            total=max(0, int(self.retries)),
            connect=max(0, int(self.retries)),
            read=max(0, int(self.retries)),
            status=max(0, int(self.retries)),
            status_forcelist=(429, 500, 502, 503, 504),
            backoff_factor=0.2,
            allowed_methods=("POST",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self._ids = itertools.count(1)

    def __enter__(self) -> "ClusterClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, params: list | None = None) -> object:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            response = self._session.request(
                "POST",
                self.rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except Exception as exc:
            raise ClusterUnavailableError(f"{method}: {exc}") from exc

        if response.status_code >= 400:
            raise ClusterRequestError(
                f"{method} failed: {response.status_code} {response.text}",
                method=method,
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except Exception as exc:
            raise ClusterUnavailableError(f"{method}: invalid JSON-RPC response") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            message = str(error.get("message", "unknown error"))
            code = error.get("code")
            data = error.get("data")
            error_cls = ClusterRequestError
            if method == "sendTransaction":
                if _is_blockhash_error(message, data):
                    error_cls = StaleBlockhashError
                else:
                    error_cls = SubmissionRejectedError
            raise error_cls(
                f"{method} failed: {message}",
                method=method,
                status_code=response.status_code,
                code=code if isinstance(code, int) else None,
                data=data,
            )
        if not isinstance(body, dict) or "result" not in body:
            raise ClusterUnavailableError(f"{method}: response missing result")
        return body["result"]

    def _commitment_config(self) -> dict:
        return {"commitment": self.commitment}

    def get_version(self) -> dict:
        return self._request("getVersion")

    def get_balance(self, pubkey: Pubkey) -> int:
        result = self._request("getBalance", [str(pubkey), self._commitment_config()])
        return int(result["value"])

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        result = self._request(
            "getMinimumBalanceForRentExemption",
            [int(size), self._commitment_config()],
        )
        return int(result)

    def get_latest_blockhash(self) -> BlockhashInfo:
        result = self._request("getLatestBlockhash", [self._commitment_config()])
        value = result["value"]
        return BlockhashInfo(
            blockhash=Hash.from_string(value["blockhash"]),
            last_valid_block_height=int(value["lastValidBlockHeight"]),
        )

    def get_block_height(self) -> int:
        return int(self._request("getBlockHeight", [self._commitment_config()]))

    def get_fee_for_message(self, message: Message) -> int | None:
        encoded = base64.b64encode(bytes(message)).decode("ascii")
        result = self._request("getFeeForMessage", [encoded, self._commitment_config()])
        value = result.get("value")
        return None if value is None else int(value)

    def get_lamports_per_signature(self, payer: Pubkey) -> int:
        """Price a single-signature, zero-instruction message at the current blockhash."""
        latest = self.get_latest_blockhash()
        message = Message.new_with_blockhash([], payer, latest.blockhash)
        fee = self.get_fee_for_message(message)
        if fee is None:
            raise StaleBlockhashError(
                f"getFeeForMessage: blockhash {latest.blockhash} expired before pricing",
                method="getFeeForMessage",
            )
        return fee

    def request_airdrop(self, pubkey: Pubkey, lamports: int) -> Signature:
        result = self._request(
            "requestAirdrop",
            [str(pubkey), int(lamports), self._commitment_config()],
        )
        return Signature.from_string(str(result))

    def get_signature_status(self, signature: Signature) -> dict | None:
        result = self._request(
            "getSignatureStatuses",
            [[str(signature)], {"searchTransactionHistory": False}],
        )
        statuses = result.get("value") or [None]
        return statuses[0]

    def confirm_transaction(self, signature: Signature) -> bool:
        status = self.get_signature_status(signature)
        if status is None or status.get("err") is not None:
            return False
        return _meets_commitment(status, self.commitment)

    def wait_for_confirmation(
        self,
        signature: Signature,
        *,
        timeout: float | None = None,
        interval: float | None = None,
        last_valid_block_height: int | None = None,
    ) -> dict:
        timeout = self.confirm_timeout if timeout is None else timeout
        delay = self.confirm_interval if interval is None else interval
        deadline = time.time() + timeout
        while time.time() < deadline:
            status = self.get_signature_status(signature)
            if status is not None:
                err = status.get("err")
                if err is not None:
                    raise SubmissionRejectedError(
                        f"transaction {signature} failed: {json.dumps(err)}",
                        method="getSignatureStatuses",
                        data=err,
                    )
                if _meets_commitment(status, self.commitment):
                    return status
            elif (
                last_valid_block_height is not None
                and self.get_block_height() > last_valid_block_height
            ):
                raise StaleBlockhashError(
                    f"transaction {signature} expired: block height exceeded "
                    f"{last_valid_block_height}",
                    method="getSignatureStatuses",
                )
            time.sleep(max(0.05, delay))
            delay = min(delay * max(1.0, self.confirm_backoff), self.confirm_max_interval)
        raise ConfirmationTimeoutError(
            f"timed out waiting for {self.commitment} confirmation: signature={signature}"
        )

    def get_account_info(self, pubkey: Pubkey) -> AccountInfo:
        result = self._request(
            "getAccountInfo",
            [str(pubkey), {"encoding": "base64", "commitment": self.commitment}],
        )
        value = result.get("value")
        if value is None:
            raise AccountNotFoundError(pubkey)
        return _parse_account_info(value)

    def send_transaction(self, transaction: Transaction) -> Signature:
        encoded = base64.b64encode(bytes(transaction)).decode("ascii")
        result = self._request(
            "sendTransaction",
            [
                encoded,
                {
                    "encoding": "base64",
                    "skipPreflight": False,
                    "preflightCommitment": self.commitment,
                },
            ],
        )
        return Signature.from_string(str(result))

    def send_and_confirm_transaction(
        self,
        transaction: Transaction,
        *,
        last_valid_block_height: int | None = None,
    ) -> Signature:
        signature = self.send_transaction(transaction)
        self.wait_for_confirmation(signature, last_valid_block_height=last_valid_block_height)
        return signature


__all__ = ["AccountInfo", "BlockhashInfo", "ClusterClient", "LAMPORTS_PER_SOL"]
