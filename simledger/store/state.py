"""
Mutable ledger store.

Holds the simulated state a LedgerView reads:
- tokens and price overrides
- per-account balances, positions, delegations, vault equity
- global multiplier tables and per-pair last-observed multipliers
- the withdrawal request queue

The store is the single owner of every override-presence flag
(account activation, initialized spot balances, non-zero stored prices).
Read accessors never insert: unknown keys read as empty records.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..rebasing import lookup_multiplier, multiplier_or_base, rebase, to_uint64
from ..types import (
    Address,
    DelegationRecord,
    Position,
    Token,
    VaultEquitySnapshot,
    WithdrawRequest,
)
from ..utils.helpers import normalize_address
from .withdrawals import WithdrawalQueue, encode_withdraw_request


def _check_multiplier(name: str, value: int) -> int:
    """Multipliers and yield indices are exact non-negative ints (0 = unset)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__} {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


@dataclass
class Account:
    """
    Per-account simulated state.

    delegated_validators is an insertion-ordered set (dict keys).
    """
    activated: bool = False
    spot: Dict[int, int] = field(default_factory=dict)
    perp_balance: int = 0
    positions: Dict[int, Position] = field(default_factory=dict)
    delegations: Dict[Address, DelegationRecord] = field(default_factory=dict)
    delegated_validators: Dict[Address, None] = field(default_factory=dict)
    vault_equity: Dict[Address, VaultEquitySnapshot] = field(default_factory=dict)
    staking: int = 0


class LedgerStore:
    """
    Simulated ledger state.

    Usage:
        store = LedgerStore()
        store.set_mark_px(0, 65_000_000000)
        store.delegate(user, validator, 100)
        view = LedgerView(store, oracle)
    """

    def __init__(self):
        self._tokens: Dict[int, Token] = {}
        self._accounts: Dict[Address, Account] = {}
        self._initialized_spot: set = set()

        self._mark_px: Dict[int, int] = {}
        self._spot_px: Dict[int, int] = {}

        self._vault_multiplier: Dict[Address, int] = {}
        self._last_vault_multiplier: Dict[Tuple[Address, Address], int] = {}
        self._staking_yield_index: int = 0
        self._last_yield_index: Dict[Tuple[Address, Address], int] = {}

        self.withdrawals = WithdrawalQueue()

    # ==================== Reads ====================

    def token(self, token: int) -> Token:
        return self._tokens.get(token, Token())

    def account(self, user: Address) -> Account:
        """Stored account, or a fresh empty one (not inserted)."""
        return self._accounts.get(normalize_address(user)) or Account()

    def is_activated(self, user: Address) -> bool:
        return self.account(user).activated

    def is_spot_initialized(self, user: Address, token: int) -> bool:
        return (normalize_address(user), token) in self._initialized_spot

    def stored_mark_px(self, perp: int) -> int:
        """Overridden mark price, 0 if none recorded."""
        return self._mark_px.get(perp, 0)

    def stored_spot_px(self, spot: int) -> int:
        """Overridden spot price, 0 if none recorded."""
        return self._spot_px.get(spot, 0)

    def vault_multiplier(self, vault: Address) -> int:
        """Raw global multiplier for a vault; 0 means never set."""
        return self._vault_multiplier.get(normalize_address(vault), 0)

    def last_vault_multiplier(self, user: Address, vault: Address) -> int:
        """Raw multiplier the user's snapshot was taken at; 0 means never set."""
        return self._last_vault_multiplier.get((normalize_address(user), normalize_address(vault)), 0)

    @property
    def staking_yield_index(self) -> int:
        """Raw index; 0 means never set."""
        return self._staking_yield_index

    def last_yield_index(self, user: Address, validator: Address) -> int:
        """Raw index the user's delegation was recorded at; 0 means never set."""
        return self._last_yield_index.get((normalize_address(user), normalize_address(validator)), 0)

    # ==================== Mutators ====================

    def _account_for_write(self, user: Address) -> Account:
        key = normalize_address(user)
        account = self._accounts.get(key)
        if account is None:
            account = Account()
            self._accounts[key] = account
        return account

    def register_token(self, token: int, name: str, sz_decimals: int = 0, wei_decimals: int = 0) -> None:
        self._tokens[token] = Token(name=name, sz_decimals=sz_decimals, wei_decimals=wei_decimals)

    def activate_account(self, user: Address) -> None:
        self._account_for_write(user).activated = True

    def set_spot_balance(self, user: Address, token: int, amount: int) -> None:
        """Record a spot balance override (marks the pair initialized)."""
        self._account_for_write(user).spot[token] = to_uint64(amount)
        self._initialized_spot.add((normalize_address(user), token))

    def set_perp_balance(self, user: Address, amount: int) -> None:
        self._account_for_write(user).perp_balance = to_uint64(amount)

    def set_position(self, user: Address, perp: int, position: Position) -> None:
        self._account_for_write(user).positions[perp] = position

    def set_staking(self, user: Address, amount: int) -> None:
        self._account_for_write(user).staking = to_uint64(amount)

    def set_mark_px(self, perp: int, px: int) -> None:
        """Override a mark price. Setting 0 clears the override."""
        self._mark_px[perp] = to_uint64(px)

    def set_spot_px(self, spot: int, px: int) -> None:
        """Override a spot price. Setting 0 clears the override."""
        self._spot_px[spot] = to_uint64(px)

    def set_vault_multiplier(self, vault: Address, multiplier: int) -> None:
        self._vault_multiplier[normalize_address(vault)] = _check_multiplier("vault multiplier", multiplier)

    def set_staking_yield_index(self, index: int) -> None:
        self._staking_yield_index = _check_multiplier("staking yield index", index)

    def set_vault_equity(
        self,
        user: Address,
        vault: Address,
        equity: int,
        locked_until_timestamp: int = 0,
        observed_multiplier: Optional[int] = None,
    ) -> None:
        """
        Record a vault equity snapshot.

        Args:
            observed_multiplier: Multiplier the equity was measured at.
                Defaults to the vault's current multiplier.
        """
        user = normalize_address(user)
        vault = normalize_address(vault)
        if observed_multiplier is None:
            observed_multiplier = lookup_multiplier(self._vault_multiplier, vault)
        else:
            observed_multiplier = _check_multiplier("observed multiplier", observed_multiplier)
        self._account_for_write(user).vault_equity[vault] = VaultEquitySnapshot(
            equity=to_uint64(equity),
            locked_until_timestamp=locked_until_timestamp,
        )
        self._last_vault_multiplier[(user, vault)] = observed_multiplier

    def delegate(
        self,
        user: Address,
        validator: Address,
        amount: int,
        locked_until_timestamp: int = 0,
        observed_index: Optional[int] = None,
    ) -> None:
        """
        Add to a delegation.

        An existing amount is first rebased to the current yield index, then
        the new amount is added and the current index recorded as observed.
        observed_index overrides the recorded index (for scenarios that start
        mid-accrual).
        """
        user = normalize_address(user)
        validator = normalize_address(validator)
        if observed_index is None:
            observed_index = multiplier_or_base(self._staking_yield_index)
        else:
            observed_index = _check_multiplier("observed index", observed_index)
        account = self._account_for_write(user)
        key = (user, validator)

        existing = account.delegations.get(validator)
        carried = 0
        if existing is not None:
            carried = rebase(existing.amount, self._staking_yield_index, self._last_yield_index.get(key, 0))

        account.delegations[validator] = DelegationRecord(
            validator=validator,
            amount=to_uint64(carried + amount),
            locked_until_timestamp=locked_until_timestamp,
        )
        account.delegated_validators[validator] = None
        self._last_yield_index[key] = observed_index

    def request_withdrawal(self, user: Address, amount: int) -> None:
        """Append an encoded withdrawal request to the queue."""
        request = WithdrawRequest(owner=normalize_address(user), amount=amount)
        self.withdrawals.push(encode_withdraw_request(request))
