"""
simledger - read-side view over a simulated ledger.

Each fact is served from a local override when one has been recorded and
from the external oracle otherwise; stored vault equity and delegations are
rebased against their global multipliers on read.
"""

from .errors import (
    SimLedgerError,
    AmountOverflowError,
    OracleError,
    OracleUnavailableError,
    UnmappedIdError,
)
from .rebasing import rebase, multiplier_or_base, lookup_multiplier
from .store import LedgerStore
from .oracle import Oracle, OfflineOracle, BybitOracle
from .view import LedgerView, Fact, FallbackResolver
from .scenario import load_scenario, build_store

__version__ = "0.1.0"

__all__ = [
    "LedgerView",
    "LedgerStore",
    "Fact",
    "FallbackResolver",
    "Oracle",
    "OfflineOracle",
    "BybitOracle",
    "rebase",
    "multiplier_or_base",
    "lookup_multiplier",
    "load_scenario",
    "build_store",
    "SimLedgerError",
    "AmountOverflowError",
    "OracleError",
    "OracleUnavailableError",
    "UnmappedIdError",
]
