"""
Simulated ledger store.

The mutable state a LedgerView reads. Everything here is a collaborator of
the view, not part of it: the view only ever calls the read accessors.
"""

from .state import Account, LedgerStore
from .withdrawals import (
    WithdrawalQueue,
    encode_withdraw_request,
    decode_withdraw_request,
)

__all__ = [
    "Account",
    "LedgerStore",
    "WithdrawalQueue",
    "encode_withdraw_request",
    "decode_withdraw_request",
]
