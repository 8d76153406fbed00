"""
External oracle protocol.

The oracle supplies ground-truth values for facts that have no local
override. Implementations may perform I/O, may lazily materialize external
state, and are NOT guaranteed to return the same value twice.

Failures are raised as OracleError subclasses (or whatever the
implementation raises); the view propagates them unchanged.
"""

from typing import Protocol, runtime_checkable

from ..errors import OracleUnavailableError
from ..types import Address, CoreUserExists, SpotBalance, Withdrawable


@runtime_checkable
class Oracle(Protocol):
    """
    Ground-truth accessors, one per overridable fact.

    Prices are fixed-point integers; balances are integers in the token's
    smallest unit.
    """

    @property
    def source_name(self) -> str:
        """Unique name identifying this oracle (e.g., 'bybit_demo')."""
        ...

    def mark_px(self, perp: int) -> int:
        ...

    def spot_px(self, spot: int) -> int:
        ...

    def spot_balance(self, user: Address, token: int) -> SpotBalance:
        ...

    def withdrawable(self, user: Address) -> Withdrawable:
        ...

    def account_exists(self, user: Address) -> CoreUserExists:
        ...


class OfflineOracle:
    """
    Oracle for overrides-only runs.

    Every accessor raises OracleUnavailableError, so a query that is not
    covered by a local override fails loudly instead of inventing a value.
    """

    source_name = "offline"

    def mark_px(self, perp: int) -> int:
        raise OracleUnavailableError("mark_px")

    def spot_px(self, spot: int) -> int:
        raise OracleUnavailableError("spot_px")

    def spot_balance(self, user: Address, token: int) -> SpotBalance:
        raise OracleUnavailableError("spot_balance")

    def withdrawable(self, user: Address) -> Withdrawable:
        raise OracleUnavailableError("withdrawable")

    def account_exists(self, user: Address) -> CoreUserExists:
        raise OracleUnavailableError("core_user_exists")
