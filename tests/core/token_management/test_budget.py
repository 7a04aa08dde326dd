"""Tests for ContextBudget and TokenLedger.

Tests cover:
1. Budget validation and the available/misconfigured properties
2. Budgets derived from a request plus response reserve
3. Ledger commits never exceeding the available budget
"""

import dataclasses

import pytest

from context_pack.core.token_management import (
    DEFAULT_RESPONSE_RESERVE,
    ContextBudget,
    TokenLedger,
)


class TestContextBudget:
    """Tests for ContextBudget."""

    def test_available(self):
        assert ContextBudget(total=1000).available == 1000
        assert ContextBudget(total=1000, reserved=150).available == 850

    @pytest.mark.parametrize(
        "total,reserved,expected",
        [(100, 0, False), (100, 99, False), (100, 100, True), (100, 250, True), (0, 0, True)],
    )
    def test_is_misconfigured(self, total, reserved, expected):
        assert ContextBudget(total=total, reserved=reserved).is_misconfigured is expected

    def test_over_reservation_is_not_rejected(self):
        """Test reserved > total is representable; the allocator handles it."""
        budget = ContextBudget(total=100, reserved=250)
        assert budget.available == -150

    def test_negative_values_rejected(self):
        with pytest.raises(ValueError, match="total"):
            ContextBudget(total=-1)
        with pytest.raises(ValueError, match="reserved"):
            ContextBudget(total=10, reserved=-1)

    def test_frozen(self):
        budget = ContextBudget(total=10)
        with pytest.raises(dataclasses.FrozenInstanceError):
            budget.total = 20

    def test_for_request_reserves_request_and_response(self):
        budget = ContextBudget.for_request(8000, "x" * 40)
        assert budget.total == 8000
        assert budget.reserved == 10 + DEFAULT_RESPONSE_RESERVE
        assert budget.available == 5990

    def test_for_request_custom_estimator_and_reserve(self):
        budget = ContextBudget.for_request(
            1000, "anything", response_reserve=100, token_estimator=lambda text: 5
        )
        assert budget.reserved == 105


class TestTokenLedger:
    """Tests for TokenLedger."""

    def test_commit_within_budget(self):
        ledger = TokenLedger(100)
        assert ledger.commit(60) is True
        assert ledger.used_tokens == 60
        assert ledger.remaining == 40

    def test_refused_commit_leaves_state_unchanged(self):
        ledger = TokenLedger(100)
        ledger.commit(60)
        assert ledger.commit(50) is False
        assert ledger.used_tokens == 60

    def test_exact_fit_fills_ledger(self):
        ledger = TokenLedger(100)
        assert ledger.commit(100) is True
        assert ledger.is_full is True
        assert ledger.commit(0) is True
        assert ledger.commit(1) is False

    def test_negative_available_is_clamped(self):
        ledger = TokenLedger(-5)
        assert ledger.available == 0
        assert ledger.is_full is True

    def test_negative_tokens_rejected(self):
        ledger = TokenLedger(10)
        with pytest.raises(ValueError):
            ledger.can_fit(-1)
        with pytest.raises(ValueError):
            ledger.commit(-1)
