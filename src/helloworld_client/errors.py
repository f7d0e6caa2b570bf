"""Client error types."""

from __future__ import annotations


class HelloWorldClientError(RuntimeError):
    """Base client error."""


class ClusterUnavailableError(HelloWorldClientError):
    """Cluster could not be reached."""


class ClusterRequestError(ClusterUnavailableError):
    """Cluster returned a structured JSON-RPC or HTTP error response."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        status_code: int | None = None,
        code: int | None = None,
        data: object | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.status_code = status_code
        self.code = code
        self.data = data


class SubmissionRejectedError(ClusterRequestError):
    """Transaction was rejected by the cluster or failed on-chain."""


class StaleBlockhashError(SubmissionRejectedError):
    """Transaction blockhash expired before it could land."""


class ConfirmationTimeoutError(HelloWorldClientError):
    """Timed out waiting for a transaction to reach the requested commitment."""


class InsufficientFundsError(HelloWorldClientError):
    """Payer could not be funded to the required balance."""


class AccountNotFoundError(HelloWorldClientError):
    """No account exists at the requested address."""

    def __init__(self, address: object) -> None:
        super().__init__(f"account not found: {address}")
        self.address = address


class DecodeError(HelloWorldClientError):
    """Account data does not match the expected record layout."""
