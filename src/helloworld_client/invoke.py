"""Hello-world program invocation."""

from __future__ import annotations

from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from helloworld_client.client import ClusterClient

SAY_HELLO_OPCODE = b"\x00"


def build_say_hello_instruction(
    *,
    program_id: Pubkey,
    greeting_address: Pubkey,
    opcode: bytes = SAY_HELLO_OPCODE,
) -> Instruction:
    return Instruction(
        program_id,
        bytes(opcode),
        [AccountMeta(pubkey=greeting_address, is_signer=False, is_writable=True)],
    )


def say_hello(
    client: ClusterClient,
    *,
    payer: Keypair,
    program_id: Pubkey,
    greeting_address: Pubkey,
    opcode: bytes = SAY_HELLO_OPCODE,
) -> Signature:
    """Submit one say-hello instruction and wait for it to confirm.

    Each successful call increments the on-chain counter once. Cluster
    rejections propagate unchanged; a resubmission after an ambiguous failure
    may double count.
    """
    instruction = build_say_hello_instruction(
        program_id=program_id,
        greeting_address=greeting_address,
        opcode=opcode,
    )
    latest = client.get_latest_blockhash()
    transaction = Transaction.new_signed_with_payer(
        [instruction],
        payer.pubkey(),
        [payer],
        latest.blockhash,
    )
    return client.send_and_confirm_transaction(
        transaction,
        last_valid_block_height=latest.last_valid_block_height,
    )
