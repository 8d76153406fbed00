"""
Core types for the simulated ledger view.

Provides the stored entity records and the result records returned by
queries:
- Token, DelegationRecord, VaultEquitySnapshot, WithdrawRequest: stored state
- Position: stored AND returned as-is (pass-through)
- SpotBalance, Withdrawable, CoreUserExists, UserVaultEquity, Delegation,
  DelegatorSummary, AccountMarginSummary: query results

Type design principles:
- Immutable (frozen dataclasses)
- Zero-valued defaults: a missing entity reads as the default record
- Integer amounts only; widths are enforced where values are computed
- Serializable (to_dict methods)
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .config.constants import ZERO_ADDRESS

# Lowercase "0x" + 40 hex digits, see utils.helpers.normalize_address
Address = str


class _Record:
    """Mixin giving every record a plain-dict view."""

    __slots__ = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ─────────────────────────────────────────────────────────────────────────────
# Stored state
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Token(_Record):
    """Registered token. Exists iff name is non-empty."""
    name: str = ""
    sz_decimals: int = 0
    wei_decimals: int = 0

    @property
    def exists(self) -> bool:
        return self.name != ""


@dataclass(frozen=True, slots=True)
class Position(_Record):
    """
    Open perp position.

    Opaque to the view beyond pass-through; the margin aggregator reads it.

    Attributes:
        szi: Signed size (positive = long)
        entry_ntl: Entry notional (unsigned)
        isolated_raw_usd: Isolated margin raw USD
        leverage: Leverage multiple (0 reads as 1x when computing margin)
        is_isolated: Isolated vs cross margin
    """
    szi: int = 0
    entry_ntl: int = 0
    isolated_raw_usd: int = 0
    leverage: int = 0
    is_isolated: bool = False


@dataclass(frozen=True, slots=True)
class DelegationRecord(_Record):
    """Raw delegation as stored (amount NOT rebased)."""
    validator: Address = ZERO_ADDRESS
    amount: int = 0
    locked_until_timestamp: int = 0


@dataclass(frozen=True, slots=True)
class VaultEquitySnapshot(_Record):
    """Vault equity as last recorded (equity NOT rebased)."""
    equity: int = 0
    locked_until_timestamp: int = 0


@dataclass(frozen=True, slots=True)
class WithdrawRequest(_Record):
    """Pending withdrawal; lives encoded in the withdrawal queue."""
    owner: Address
    amount: int


# ─────────────────────────────────────────────────────────────────────────────
# Query results
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class SpotBalance(_Record):
    """Spot balance. hold/entry_ntl are only known to the oracle."""
    total: int = 0
    hold: int = 0
    entry_ntl: int = 0


@dataclass(frozen=True, slots=True)
class Withdrawable(_Record):
    withdrawable: int = 0


@dataclass(frozen=True, slots=True)
class CoreUserExists(_Record):
    exists: bool = False


@dataclass(frozen=True, slots=True)
class UserVaultEquity(_Record):
    """Vault equity with the equity field rebased."""
    equity: int = 0
    locked_until_timestamp: int = 0


@dataclass(frozen=True, slots=True)
class Delegation(_Record):
    """Delegation with the amount rebased by the staking yield index."""
    validator: Address = ZERO_ADDRESS
    amount: int = 0
    locked_until_timestamp: int = 0


@dataclass(frozen=True, slots=True)
class DelegatorSummary(_Record):
    """
    Staking overview for one account.

    Attributes:
        delegated: Sum of rebased delegation amounts
        undelegated: Raw staking balance (never rebased)
        total_pending_withdrawal: Sum of the account's queued withdrawal amounts
        n_pending_withdrawals: Count of the account's queued withdrawals
    """
    delegated: int = 0
    undelegated: int = 0
    total_pending_withdrawal: int = 0
    n_pending_withdrawals: int = 0


@dataclass(frozen=True, slots=True)
class AccountMarginSummary(_Record):
    account_value: int = 0
    margin_used: int = 0
    ntl_pos: int = 0
    raw_usd: int = 0
