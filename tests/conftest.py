"""
Pytest configuration for simledger tests.

Provides a recording fake oracle so fallback behaviour can be asserted
without network access.
"""

from typing import Dict, List, Set, Tuple

import pytest

from simledger.store import LedgerStore
from simledger.types import CoreUserExists, SpotBalance, Withdrawable
from simledger.utils.helpers import normalize_address
from simledger.utils.logger import setup_logger
from simledger.view import LedgerView


class RecordingOracle:
    """
    In-memory oracle that records every call.

    Values can be changed between queries to check that overrides never
    fall back once recorded.
    """

    source_name = "fake_oracle"

    def __init__(self):
        self.mark: Dict[int, int] = {}
        self.spot: Dict[int, int] = {}
        self.balances: Dict[Tuple[str, int], SpotBalance] = {}
        self.withdrawables: Dict[str, int] = {}
        self.existing: Set[str] = set()
        self.calls: List[tuple] = []

    def mark_px(self, perp: int) -> int:
        self.calls.append(("mark_px", perp))
        return self.mark.get(perp, 0)

    def spot_px(self, spot: int) -> int:
        self.calls.append(("spot_px", spot))
        return self.spot.get(spot, 0)

    def spot_balance(self, user: str, token: int) -> SpotBalance:
        self.calls.append(("spot_balance", user, token))
        return self.balances.get((normalize_address(user), token), SpotBalance())

    def withdrawable(self, user: str) -> Withdrawable:
        self.calls.append(("withdrawable", user))
        return Withdrawable(withdrawable=self.withdrawables.get(normalize_address(user), 0))

    def account_exists(self, user: str) -> CoreUserExists:
        self.calls.append(("account_exists", user))
        return CoreUserExists(exists=normalize_address(user) in self.existing)


@pytest.fixture(autouse=True, scope="session")
def quiet_logger():
    """Console-only logger at WARNING for the whole run."""
    setup_logger(log_dir=None, log_level="WARNING")


@pytest.fixture
def oracle() -> RecordingOracle:
    return RecordingOracle()


@pytest.fixture
def store() -> LedgerStore:
    return LedgerStore()


@pytest.fixture
def view(store, oracle) -> LedgerView:
    return LedgerView(store, oracle)
