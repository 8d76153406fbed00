"""
Account margin aggregation.

The view does not value positions itself; it hands the whole computation
to a MarginAggregator. PositionMarginAggregator is the in-process default:
a cross-margin summary over the account's stored positions.

Per open position (szi != 0), with px = mark price of the perp:
- ntl = |szi| * px
- margin_used += ntl // max(leverage, 1)
- signed_entry = +entry_ntl (long) or -entry_ntl (short)
- unrealized = szi * px - signed_entry

Totals:
- account_value = perp_balance + sum(unrealized)
- raw_usd = account_value - sum(szi * px)
"""

from typing import Callable, Protocol, runtime_checkable

from ..rebasing import to_int64, to_uint64
from ..store.state import LedgerStore
from ..types import AccountMarginSummary, Address

# The simulated ledger has a single perp venue
DEFAULT_PERP_VERSION = 0


@runtime_checkable
class MarginAggregator(Protocol):
    def account_margin_summary(self, version: int, user: Address) -> AccountMarginSummary:
        ...


class PositionMarginAggregator:
    """
    Cross-margin summary from stored positions.

    Args:
        store: Ledger store holding positions and perp balances
        mark_px: Price lookup per perp id (the view passes its own
            read_mark_px so overrides apply)
    """

    def __init__(self, store: LedgerStore, mark_px: Callable[[int], int]):
        self._store = store
        self._mark_px = mark_px

    def account_margin_summary(self, version: int, user: Address) -> AccountMarginSummary:
        if version != DEFAULT_PERP_VERSION:
            return AccountMarginSummary()

        account = self._store.account(user)

        ntl_pos = 0
        margin_used = 0
        unrealized = 0
        exposure = 0

        for perp, position in account.positions.items():
            if position.szi == 0:
                continue
            px = self._mark_px(perp)
            ntl = abs(position.szi) * px
            signed_entry = position.entry_ntl if position.szi > 0 else -position.entry_ntl

            ntl_pos += ntl
            margin_used += ntl // max(position.leverage, 1)
            unrealized += position.szi * px - signed_entry
            exposure += position.szi * px

        account_value = account.perp_balance + unrealized

        return AccountMarginSummary(
            account_value=to_int64(account_value),
            margin_used=to_uint64(margin_used),
            ntl_pos=to_uint64(ntl_pos),
            raw_usd=to_int64(account_value - exposure),
        )
