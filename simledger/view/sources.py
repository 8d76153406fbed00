"""
Value sources and the fallback resolver.

Every overridable fact can be answered by two sources:
- LocalSource: the simulated value held by the LedgerStore
- OracleSource: the external oracle's ground truth

FallbackResolver picks between them per query using the store's
presence flag for that fact:

    Fact               override present when
    ----               ---------------------
    MARK_PX            stored mark price != 0
    SPOT_PX            stored spot price != 0
    SPOT_BALANCE       (user, token) balance initialized
    WITHDRAWABLE       account activated
    CORE_USER_EXISTS   account activated

Once a flag is set the oracle is never consulted for that fact again.
"""

from enum import Enum
from typing import Any, Callable, Dict, Protocol, runtime_checkable

from ..oracle.protocol import Oracle
from ..store.state import LedgerStore
from ..types import Address, CoreUserExists, SpotBalance, Withdrawable
from ..utils.logger import get_logger


class Fact(str, Enum):
    """Overridable facts. Values are the ValueSource accessor names."""

    MARK_PX = "mark_px"
    SPOT_PX = "spot_px"
    SPOT_BALANCE = "spot_balance"
    WITHDRAWABLE = "withdrawable"
    CORE_USER_EXISTS = "core_user_exists"


@runtime_checkable
class ValueSource(Protocol):
    """
    Protocol for fact sources.

    Both implementations return the same record types so callers never
    learn which one answered.
    """

    @property
    def source_name(self) -> str:
        ...

    def mark_px(self, perp: int) -> int:
        ...

    def spot_px(self, spot: int) -> int:
        ...

    def spot_balance(self, user: Address, token: int) -> SpotBalance:
        ...

    def withdrawable(self, user: Address) -> Withdrawable:
        ...

    def core_user_exists(self, user: Address) -> CoreUserExists:
        ...


class LocalSource:
    """
    Simulated values from the store.

    Oracle-only fields (hold, entry_ntl) are not tracked and read as 0.
    """

    source_name = "local"

    def __init__(self, store: LedgerStore):
        self._store = store

    def mark_px(self, perp: int) -> int:
        return self._store.stored_mark_px(perp)

    def spot_px(self, spot: int) -> int:
        return self._store.stored_spot_px(spot)

    def spot_balance(self, user: Address, token: int) -> SpotBalance:
        total = self._store.account(user).spot.get(token, 0)
        return SpotBalance(total=total, hold=0, entry_ntl=0)

    def withdrawable(self, user: Address) -> Withdrawable:
        return Withdrawable(withdrawable=self._store.account(user).perp_balance)

    def core_user_exists(self, user: Address) -> CoreUserExists:
        return CoreUserExists(exists=self._store.is_activated(user))


class OracleSource:
    """Delegates to the oracle; results and failures pass through unchanged."""

    def __init__(self, oracle: Oracle):
        self._oracle = oracle

    @property
    def source_name(self) -> str:
        return self._oracle.source_name

    def mark_px(self, perp: int) -> int:
        return self._oracle.mark_px(perp)

    def spot_px(self, spot: int) -> int:
        return self._oracle.spot_px(spot)

    def spot_balance(self, user: Address, token: int) -> SpotBalance:
        return self._oracle.spot_balance(user, token)

    def withdrawable(self, user: Address) -> Withdrawable:
        return self._oracle.withdrawable(user)

    def core_user_exists(self, user: Address) -> CoreUserExists:
        return self._oracle.account_exists(user)


def _presence_predicates(store: LedgerStore) -> Dict[Fact, Callable[..., bool]]:
    return {
        Fact.MARK_PX: lambda perp: store.stored_mark_px(perp) != 0,
        Fact.SPOT_PX: lambda spot: store.stored_spot_px(spot) != 0,
        Fact.SPOT_BALANCE: lambda user, token: store.is_spot_initialized(user, token),
        Fact.WITHDRAWABLE: lambda user: store.is_activated(user),
        Fact.CORE_USER_EXISTS: lambda user: store.is_activated(user),
    }


class FallbackResolver:
    """
    Override-vs-oracle decision, one presence predicate per fact.

    Usage:
        resolver = FallbackResolver(store, LocalSource(store), OracleSource(oracle))
        px = resolver.resolve(Fact.MARK_PX, 0)
    """

    def __init__(self, store: LedgerStore, local: ValueSource, remote: ValueSource):
        self._local = local
        self._remote = remote
        self._has_override = _presence_predicates(store)
        self.logger = get_logger()

    def has_override(self, fact: Fact, *key: Any) -> bool:
        return self._has_override[fact](*key)

    def source_for(self, fact: Fact, *key: Any) -> ValueSource:
        """The source that would answer this query right now."""
        return self._local if self.has_override(fact, *key) else self._remote

    def resolve(self, fact: Fact, *key: Any) -> Any:
        """
        Answer a fact query from the override or the oracle.

        Args:
            fact: Which fact
            *key: The fact's key (perp id; spot id; user, token; user)

        Returns:
            The chosen source's record, unchanged
        """
        source = self.source_for(fact, *key)
        self.logger.resolution(fact.value, source.source_name, key=key)
        return getattr(source, fact.value)(*key)
