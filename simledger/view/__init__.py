"""
Ledger view.

Read-only queries over the simulated ledger with per-fact oracle fallback
and multiplier rebasing of stored equity and delegations.
"""

from .ledger_view import LedgerView
from .sources import (
    Fact,
    ValueSource,
    LocalSource,
    OracleSource,
    FallbackResolver,
)
from .margin import MarginAggregator, PositionMarginAggregator, DEFAULT_PERP_VERSION

__all__ = [
    # View
    "LedgerView",
    # Fallback
    "Fact",
    "ValueSource",
    "LocalSource",
    "OracleSource",
    "FallbackResolver",
    # Margin
    "MarginAggregator",
    "PositionMarginAggregator",
    "DEFAULT_PERP_VERSION",
]
