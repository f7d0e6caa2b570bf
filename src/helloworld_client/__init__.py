"""helloworld-client public surface."""

from helloworld_client.client import LAMPORTS_PER_SOL, AccountInfo, BlockhashInfo, ClusterClient
from helloworld_client.errors import (
    AccountNotFoundError,
    ClusterRequestError,
    ClusterUnavailableError,
    ConfirmationTimeoutError,
    DecodeError,
    HelloWorldClientError,
    InsufficientFundsError,
    StaleBlockhashError,
    SubmissionRejectedError,
)
from helloworld_client.fees import FeeEstimate, estimate_fees
from helloworld_client.funding import FundingResult, ensure_payer_funded
from helloworld_client.invoke import SAY_HELLO_OPCODE, build_say_hello_instruction, say_hello
from helloworld_client.provision import (
    ProgramStatus,
    ProvisionResult,
    check_program,
    derive_greeting_address,
    ensure_greeting_account,
)
from helloworld_client.report import fetch_greeting
from helloworld_client.state import GREETING_ACCOUNT_SIZE, GreetingAccount
from helloworld_client.workflow import HelloWorldWorkflow, RunSummary, WorkflowSettings

__all__ = [
    "HelloWorldClientError",
    "ClusterClient",
    "AccountInfo",
    "BlockhashInfo",
    "LAMPORTS_PER_SOL",
    "ClusterUnavailableError",
    "ClusterRequestError",
    "SubmissionRejectedError",
    "StaleBlockhashError",
    "ConfirmationTimeoutError",
    "InsufficientFundsError",
    "AccountNotFoundError",
    "DecodeError",
    "FeeEstimate",
    "estimate_fees",
    "FundingResult",
    "ensure_payer_funded",
    "ProgramStatus",
    "ProvisionResult",
    "check_program",
    "derive_greeting_address",
    "ensure_greeting_account",
    "SAY_HELLO_OPCODE",
    "build_say_hello_instruction",
    "say_hello",
    "fetch_greeting",
    "GREETING_ACCOUNT_SIZE",
    "GreetingAccount",
    "HelloWorldWorkflow",
    "RunSummary",
    "WorkflowSettings",
]
