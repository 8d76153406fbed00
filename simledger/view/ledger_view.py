"""
Read-side view over the simulated ledger.

Each query returns either the locally overridden value or, when no
override is recorded, the external oracle's value (see sources.py).
Stored vault equity and delegation amounts are rebased on read
(see rebasing.py).

The view never writes to the store and caches nothing between calls.
"""

from typing import List, Optional

from ..oracle.protocol import Oracle
from ..rebasing import multiplier_or_base, rebase, to_uint64
from ..store.state import LedgerStore
from ..store.withdrawals import decode_withdraw_request
from ..types import (
    AccountMarginSummary,
    Address,
    CoreUserExists,
    Delegation,
    DelegatorSummary,
    Position,
    SpotBalance,
    UserVaultEquity,
    Withdrawable,
)
from ..utils.helpers import normalize_address
from ..utils.logger import get_logger
from .margin import MarginAggregator, PositionMarginAggregator
from .sources import Fact, FallbackResolver, LocalSource, OracleSource


class LedgerView:
    """
    Query surface over a LedgerStore with oracle fallback.

    Usage:
        store = LedgerStore()
        view = LedgerView(store, BybitOracle.from_config(get_config().oracle))

        view.read_mark_px(0)              # oracle
        store.set_mark_px(0, 70_000_000000)
        view.read_mark_px(0)              # 70_000_000000 from now on
    """

    def __init__(
        self,
        store: LedgerStore,
        oracle: Oracle,
        margin_aggregator: Optional[MarginAggregator] = None,
    ):
        """
        Args:
            store: Simulated ledger state (read only from here)
            oracle: Ground truth for facts without an override
            margin_aggregator: Account margin computation; defaults to
                PositionMarginAggregator priced by read_mark_px
        """
        self._store = store
        self._resolver = FallbackResolver(store, LocalSource(store), OracleSource(oracle))
        self._margin = margin_aggregator or PositionMarginAggregator(store, self.read_mark_px)
        self.logger = get_logger()

    @property
    def resolver(self) -> FallbackResolver:
        return self._resolver

    # ==================== Existence ====================

    def token_exists(self, token: int) -> bool:
        return self._store.token(token).exists

    def core_user_exists(self, user: Address) -> CoreUserExists:
        return self._resolver.resolve(Fact.CORE_USER_EXISTS, user)

    # ==================== Prices ====================

    def read_mark_px(self, perp: int) -> int:
        return self._resolver.resolve(Fact.MARK_PX, perp)

    def read_spot_px(self, spot: int) -> int:
        return self._resolver.resolve(Fact.SPOT_PX, spot)

    # ==================== Balances ====================

    def read_spot_balance(self, user: Address, token: int) -> SpotBalance:
        return self._resolver.resolve(Fact.SPOT_BALANCE, user, token)

    def read_withdrawable(self, user: Address) -> Withdrawable:
        return self._resolver.resolve(Fact.WITHDRAWABLE, user)

    # ==================== Positions / Margin ====================

    def read_position(self, user: Address, perp: int) -> Position:
        """Stored position, or an empty Position. No fallback, no rebasing."""
        return self._store.account(user).positions.get(perp, Position())

    def read_account_margin_summary(self, version: int, user: Address) -> AccountMarginSummary:
        return self._margin.account_margin_summary(version, user)

    # ==================== Vault Equity ====================

    def read_user_vault_equity(self, user: Address, vault: Address) -> UserVaultEquity:
        """
        Vault equity rebased by the vault multiplier.

        equity = stored * vault_multiplier[vault] // last_observed[(user, vault)]
        The lock timestamp passes through. Vault equity has no oracle.

        Raises:
            AmountOverflowError: If the rebased equity exceeds uint64
        """
        vault = normalize_address(vault)
        snapshot = self._store.account(user).vault_equity.get(vault)
        if snapshot is None:
            return UserVaultEquity()

        current = multiplier_or_base(self._store.vault_multiplier(vault))
        last = multiplier_or_base(self._store.last_vault_multiplier(user, vault))

        return UserVaultEquity(
            equity=rebase(snapshot.equity, current, last),
            locked_until_timestamp=snapshot.locked_until_timestamp,
        )

    # ==================== Delegations ====================

    def read_delegation(self, user: Address, validator: Address) -> Delegation:
        """
        Delegation with its amount rebased by the staking yield index.

        Raises:
            AmountOverflowError: If the rebased amount exceeds uint64
        """
        validator = normalize_address(validator)
        record = self._store.account(user).delegations.get(validator)
        if record is None:
            return Delegation(validator=validator)

        current = multiplier_or_base(self._store.staking_yield_index)
        last = multiplier_or_base(self._store.last_yield_index(user, validator))

        return Delegation(
            validator=validator,
            amount=rebase(record.amount, current, last),
            locked_until_timestamp=record.locked_until_timestamp,
        )

    def read_delegations(self, user: Address) -> List[Delegation]:
        """One Delegation per validator, in the order the user first delegated."""
        validators = list(self._store.account(user).delegated_validators)
        return [self.read_delegation(user, validator) for validator in validators]

    def read_delegator_summary(self, user: Address) -> DelegatorSummary:
        """
        Staking totals plus pending withdrawals.

        - delegated: sum of rebased delegations
        - undelegated: raw staking balance (not rebased)
        - pending withdrawals: full scan of the withdrawal queue

        The scan is linear in the total queue length; the queue is a bounded
        simulation structure, not an owner index.

        Raises:
            AmountOverflowError: If a rebased amount or a total exceeds uint64
        """
        user = normalize_address(user)
        account = self._store.account(user)

        delegated = 0
        for delegation in self.read_delegations(user):
            delegated = to_uint64(delegated + delegation.amount)

        queue = self._store.withdrawals
        n_pending = 0
        total_pending = 0
        for i in range(len(queue)):
            request = decode_withdraw_request(queue.at(i))
            if request.owner == user:
                n_pending += 1
                total_pending = to_uint64(total_pending + request.amount)

        return DelegatorSummary(
            delegated=delegated,
            undelegated=account.staking,
            total_pending_withdrawal=total_pending,
            n_pending_withdrawals=n_pending,
        )
