"""
Withdrawal request queue and its fixed-width record codec.

Record layout (28 bytes, big-endian):
    [0:20]   owner address
    [20:28]  amount (uint64)

The queue stores encoded records in insertion order. It is append-only
and addressed by index; consumers scan it, it is never indexed by owner.
"""

import struct
from collections import deque
from typing import Deque, Iterator

from ..config.constants import WITHDRAW_RECORD_SIZE
from ..rebasing import to_uint64
from ..types import WithdrawRequest
from ..utils.helpers import address_from_bytes, address_to_bytes

_RECORD = struct.Struct(">20sQ")


def encode_withdraw_request(request: WithdrawRequest) -> bytes:
    """
    Encode a withdrawal request into its 28-byte record.

    Raises:
        ValueError: If the owner is not a valid address
        AmountOverflowError: If the amount is not a uint64
    """
    return _RECORD.pack(address_to_bytes(request.owner), to_uint64(request.amount))


def decode_withdraw_request(record: bytes) -> WithdrawRequest:
    """
    Decode a 28-byte record. Exact inverse of encode_withdraw_request.

    Raises:
        ValueError: If the record has the wrong length
    """
    if len(record) != WITHDRAW_RECORD_SIZE:
        raise ValueError(
            f"Withdraw record must be {WITHDRAW_RECORD_SIZE} bytes, got {len(record)}"
        )
    owner, amount = _RECORD.unpack(record)
    return WithdrawRequest(owner=address_from_bytes(owner), amount=amount)


class WithdrawalQueue:
    """FIFO of encoded withdrawal records."""

    def __init__(self):
        self._records: Deque[bytes] = deque()

    def push(self, record: bytes) -> None:
        if len(record) != WITHDRAW_RECORD_SIZE:
            raise ValueError(
                f"Withdraw record must be {WITHDRAW_RECORD_SIZE} bytes, got {len(record)}"
            )
        self._records.append(bytes(record))

    def at(self, index: int) -> bytes:
        """Record at position index (0 = oldest)."""
        if index < 0 or index >= len(self._records):
            raise IndexError(f"Withdrawal queue index {index} out of range (len={len(self._records)})")
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[bytes]:
        return iter(tuple(self._records))
