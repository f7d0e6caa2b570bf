"""On-chain greeting record layout.

The program stores a single borsh-encoded ``u32`` counter: four little-endian
bytes, no version tag, no padding. Changing this layout breaks every account
that has already been provisioned.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from helloworld_client.errors import DecodeError

_GREETING_STRUCT = struct.Struct("<I")

GREETING_ACCOUNT_SIZE = _GREETING_STRUCT.size
MAX_COUNTER = 2**32 - 1


@dataclass(frozen=True)
class GreetingAccount:
    counter: int = 0

    def encode(self) -> bytes:
        if self.counter < 0 or self.counter > MAX_COUNTER:
            raise ValueError("counter must be within u32 range")
        return _GREETING_STRUCT.pack(self.counter)

    @classmethod
    def decode(cls, data: bytes) -> "GreetingAccount":
        if len(data) != GREETING_ACCOUNT_SIZE:
            raise DecodeError(
                f"greeting account data must be {GREETING_ACCOUNT_SIZE} bytes, got {len(data)}"
            )
        (counter,) = _GREETING_STRUCT.unpack(bytes(data))
        return cls(counter=counter)


def greeting_account_size() -> int:
    return len(GreetingAccount().encode())
