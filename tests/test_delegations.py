"""
Tests for delegation queries and the delegator summary.

Validates that:
1. Delegated amounts are rebased by the staking yield index
2. read_delegations follows first-delegation order
3. The summary sums rebased delegations, keeps staking raw and scans the
   whole withdrawal queue for the account's requests
"""

import pytest

from simledger.config.constants import BASE_UNIT, UINT64_MAX
from simledger.errors import AmountOverflowError
from simledger.types import Delegation, DelegatorSummary

USER = "0x" + "aa" * 20
OTHER = "0x" + "bb" * 20
VALIDATOR_A = "0x" + "0a" * 20
VALIDATOR_B = "0x" + "0b" * 20


class TestReadDelegation:
    def test_unset_index_returns_raw_amount(self, view, store):
        store.delegate(USER, VALIDATOR_A, 100, locked_until_timestamp=42)
        assert view.read_delegation(USER, VALIDATOR_A) == Delegation(
            validator=VALIDATOR_A, amount=100, locked_until_timestamp=42
        )

    def test_yield_index_growth_is_applied(self, view, store):
        store.delegate(USER, VALIDATOR_A, 100)
        store.set_staking_yield_index(3 * BASE_UNIT // 2)
        assert view.read_delegation(USER, VALIDATOR_A).amount == 150

    def test_redelegation_carries_accrued_amount(self, view, store):
        store.delegate(USER, VALIDATOR_A, 100)
        store.set_staking_yield_index(2 * BASE_UNIT)
        store.delegate(USER, VALIDATOR_A, 50)
        assert view.read_delegation(USER, VALIDATOR_A).amount == 250

        store.set_staking_yield_index(4 * BASE_UNIT)
        assert view.read_delegation(USER, VALIDATOR_A).amount == 500

    def test_explicit_observed_index(self, view, store):
        store.set_staking_yield_index(2 * BASE_UNIT)
        store.delegate(USER, VALIDATOR_A, 100, observed_index=BASE_UNIT)
        assert view.read_delegation(USER, VALIDATOR_A).amount == 200

    def test_unknown_delegation_is_zero(self, view):
        assert view.read_delegation(USER, VALIDATOR_A) == Delegation(validator=VALIDATOR_A)

    def test_rebased_amount_overflow_raises(self, view, store):
        store.delegate(USER, VALIDATOR_A, UINT64_MAX)
        store.set_staking_yield_index(2 * BASE_UNIT)
        with pytest.raises(AmountOverflowError):
            view.read_delegation(USER, VALIDATOR_A)


class TestReadDelegations:
    def test_order_follows_first_delegation(self, view, store):
        store.delegate(USER, VALIDATOR_B, 200)
        store.delegate(USER, VALIDATOR_A, 100)
        store.delegate(USER, VALIDATOR_B, 1)

        delegations = view.read_delegations(USER)
        assert [d.validator for d in delegations] == [VALIDATOR_B, VALIDATOR_A]
        assert [d.amount for d in delegations] == [201, 100]

    def test_no_delegations(self, view):
        assert view.read_delegations(USER) == []


class TestDelegatorSummary:
    def test_two_delegations_and_mixed_queue(self, view, store):
        """100 + 200 delegated, queue holds 5 and 7 for USER plus one foreign entry."""
        store.delegate(USER, VALIDATOR_A, 100)
        store.delegate(USER, VALIDATOR_B, 200)
        store.request_withdrawal(USER, 5)
        store.request_withdrawal(OTHER, 11)
        store.request_withdrawal(USER, 7)

        summary = view.read_delegator_summary(USER)
        assert summary.delegated == 300
        assert summary.n_pending_withdrawals == 2
        assert summary.total_pending_withdrawal == 12

    def test_staking_is_not_rebased(self, view, store):
        store.delegate(USER, VALIDATOR_A, 100)
        store.set_staking(USER, 40)
        store.set_staking_yield_index(2 * BASE_UNIT)

        summary = view.read_delegator_summary(USER)
        assert summary.delegated == 200
        assert summary.undelegated == 40

    def test_empty_account(self, view):
        assert view.read_delegator_summary(USER) == DelegatorSummary()

    def test_other_account_sees_only_its_withdrawals(self, view, store):
        store.request_withdrawal(USER, 5)
        store.request_withdrawal(OTHER, 11)
        summary = view.read_delegator_summary(OTHER)
        assert summary.n_pending_withdrawals == 1
        assert summary.total_pending_withdrawal == 11

    def test_mixed_case_user_matches_queue_owner(self, view, store):
        store.request_withdrawal(USER, 5)
        summary = view.read_delegator_summary("0x" + "AA" * 20)
        assert summary.n_pending_withdrawals == 1

    def test_scan_leaves_queue_untouched(self, view, store):
        store.request_withdrawal(USER, 5)
        store.request_withdrawal(OTHER, 11)
        before = list(store.withdrawals)

        view.read_delegator_summary(USER)
        view.read_delegator_summary(USER)

        assert list(store.withdrawals) == before

    def test_pending_total_overflow_raises(self, view, store):
        store.request_withdrawal(USER, UINT64_MAX)
        store.request_withdrawal(USER, 1)
        with pytest.raises(AmountOverflowError):
            view.read_delegator_summary(USER)


class TestIndexValidation:
    @pytest.mark.parametrize("bad", [1.5e18, "2", True, -1])
    def test_yield_index_rejects_non_int(self, store, bad):
        with pytest.raises(ValueError):
            store.set_staking_yield_index(bad)
        assert store.staking_yield_index == 0

    def test_observed_index_rejects_float(self, store):
        with pytest.raises(ValueError):
            store.delegate(USER, VALIDATOR_A, 100, observed_index=1.0e18)
        assert store.account(USER).delegations == {}
