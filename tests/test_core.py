"""
test_core.py - Unit tests for core data structures

Tests:
- Side and Category: polarity, normalization of signed amounts
- Posting: creation, validation, immutability, contribution
- Account: opening balances, convenience postings, sequence ids
- SequentialIds and to_decimal
"""

import pytest
from dataclasses import FrozenInstanceError
from decimal import Decimal

from bookkeeper import (
    Side, Category, Posting, Account, SequentialIds,
    InvariantViolation, DualityViolation,
    debited, credited, balance_of, to_decimal,
)


class TestCategoryPolarity:
    """Tests for normal sides of the five categories."""

    @pytest.mark.parametrize("category", [Category.ASSET, Category.EXPENSE])
    def test_debit_normal_categories(self, category):
        """Assets and expenses increase on the debit side."""
        assert category.normal_side is Side.DEBIT
        assert category.is_debit_normal

    @pytest.mark.parametrize("category", [Category.LIABILITY, Category.EQUITY, Category.REVENUE])
    def test_credit_normal_categories(self, category):
        """Liabilities, equity and revenue increase on the credit side."""
        assert category.normal_side is Side.CREDIT
        assert not category.is_debit_normal

    def test_side_opposite(self):
        assert Side.DEBIT.opposite is Side.CREDIT
        assert Side.CREDIT.opposite is Side.DEBIT


class TestPostingNormalization:
    """Tests for turning signed raw amounts into postings."""

    def test_positive_asset_amount_is_debit(self):
        posting = Category.ASSET.posting_for(Decimal("50"))
        assert posting == Posting(Side.DEBIT, Decimal("50"))

    def test_negative_asset_amount_is_credit_of_magnitude(self):
        posting = Category.ASSET.posting_for(Decimal("-50"))
        assert posting == Posting(Side.CREDIT, Decimal("50"))

    def test_positive_liability_amount_is_credit(self):
        posting = Category.LIABILITY.posting_for(Decimal("20"))
        assert posting.is_credit
        assert posting.amount == Decimal("20")

    def test_negative_revenue_amount_is_debit(self):
        posting = Category.REVENUE.posting_for(-7)
        assert posting.is_debit
        assert posting.amount == Decimal("7")

    def test_zero_goes_to_increasing_side(self):
        """Zero is a valid, degenerate posting on the increasing side."""
        assert Category.EQUITY.posting_for(0) == Posting(Side.CREDIT, Decimal("0"))
        assert Category.EXPENSE.posting_for(0) == Posting(Side.DEBIT, Decimal("0"))

    def test_increasing_and_decreasing(self):
        assert Category.ASSET.increasing(by=30).is_debit
        assert Category.ASSET.decreasing(by=30).is_credit
        assert Category.LIABILITY.increasing(by=30).is_credit
        assert Category.LIABILITY.decreasing(by=30).is_debit


class TestPosting:
    """Tests for Posting creation, validation and contribution."""

    def test_factories(self):
        assert debited(by=10) == Posting(Side.DEBIT, Decimal("10"))
        assert credited(by="2.50") == Posting(Side.CREDIT, Decimal("2.50"))

    def test_float_amount_has_no_binary_artifacts(self):
        assert debited(by=0.1).amount == Decimal("0.1")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            Posting(Side.DEBIT, Decimal("-1"))

    def test_nan_amount_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            Posting(Side.DEBIT, Decimal("NaN"))

    def test_infinite_amount_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            Posting(Side.CREDIT, Decimal("Infinity"))

    def test_bool_amount_rejected(self):
        with pytest.raises(TypeError):
            Posting(Side.CREDIT, True)

    def test_invalid_side_rejected(self):
        with pytest.raises(ValueError, match="side"):
            Posting("debit", Decimal("1"))

    def test_posting_is_immutable(self):
        posting = debited(by=10)
        with pytest.raises(FrozenInstanceError):
            posting.amount = Decimal("20")

    def test_contribution_debit_normal(self):
        assert debited(by=10).contribution(Category.ASSET) == Decimal("10")
        assert credited(by=10).contribution(Category.EXPENSE) == Decimal("-10")

    def test_contribution_credit_normal(self):
        assert credited(by=10).contribution(Category.LIABILITY) == Decimal("10")
        assert debited(by=10).contribution(Category.REVENUE) == Decimal("-10")

    def test_balance_of_sums_contributions(self):
        postings = [debited(by=100), credited(by=25), debited(by=5)]
        assert balance_of(postings, Category.ASSET) == Decimal("80")
        assert balance_of(postings, Category.EQUITY) == Decimal("-80")
        assert balance_of([], Category.ASSET) == Decimal("0")

    def test_repr(self):
        assert repr(debited(by=5)) == "Posting(Dr 5)"


class TestAccount:
    """Tests for Account value semantics."""

    def test_opening_positive_asset(self):
        account = Account.opening(Category.ASSET, "Cash", "1", Decimal("100"))
        assert len(account.postings) == 1
        assert account.postings[0].is_debit
        assert account.current_balance() == Decimal("100")

    def test_opening_negative_asset(self):
        account = Account.opening(Category.ASSET, "Cash", "1", Decimal("-100"))
        assert account.postings[0].is_credit
        assert account.postings[0].amount == Decimal("100")
        assert account.current_balance() == Decimal("-100")

    def test_opening_negative_revenue(self):
        account = Account.opening(Category.REVENUE, "Fees", "r", Decimal("-100"))
        assert account.postings[0].is_debit
        assert account.current_balance() == Decimal("-100")

    def test_new_account_has_zero_balance(self):
        account = Account("1", "Cash", Category.ASSET)
        assert account.postings == ()
        assert account.current_balance() == Decimal("0")

    def test_equity_convenience_methods(self):
        equity = Account("e", "Capital", Category.EQUITY).credited(by=150).debited(by=50)
        assert equity.current_balance() == Decimal("100")
        assert len(equity.postings) == 2

    def test_increase_and_decrease_follow_polarity(self):
        liability = Account.opening(Category.LIABILITY, "Loan", "l", 100)
        assert liability.increased(by=20).current_balance() == Decimal("120")
        assert liability.decreased(by=20).current_balance() == Decimal("80")

    def test_transacted_returns_new_value(self):
        """The receiver keeps its history; the result shares it plus one entry."""
        account = Account.opening(Category.ASSET, "Cash", "1", 100)
        later = account.debited(by=50)
        assert account.current_balance() == Decimal("100")
        assert later.current_balance() == Decimal("150")
        assert later.postings[:1] == account.postings

    def test_postings_stamped_with_sequence_ids(self):
        account = Account("1", "Cash", Category.ASSET).debited(by=1).credited(by=2).debited(by=3)
        assert [p.id for p in account.postings] == ["0", "1", "2"]

    def test_repr_shows_balance(self):
        account = Account.opening(Category.ASSET, "Cash", "1", 100).credited(by=25)
        text = repr(account)
        assert "Cash [asset] id=1" in text
        assert "Balance: 75" in text


class TestSequentialIds:
    """Tests for the injectable id source."""

    def test_sequence(self):
        ids = SequentialIds("bank")
        assert [ids(), ids(), ids()] == ["bank-0", "bank-1", "bank-2"]

    def test_instances_are_independent(self):
        first = SequentialIds("x")
        second = SequentialIds("x")
        first()
        assert second() == "x-0"

    def test_peek_does_not_consume(self):
        ids = SequentialIds("x", start=5)
        assert ids.peek() == "x-5"
        assert ids() == "x-5"

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError):
            SequentialIds("x", start=-1)


class TestAmounts:
    """Tests for Decimal coercion."""

    def test_to_decimal(self):
        assert to_decimal(Decimal("1.5")) == Decimal("1.5")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal("4.25") == Decimal("4.25")
        assert to_decimal(0.2) == Decimal("0.2")

    def test_to_decimal_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_decimal(None)
        with pytest.raises(TypeError):
            to_decimal(False)


class TestInvariantSignals:
    """The fatal signal must not be an ordinary Exception."""

    def test_invariant_violation_escapes_except_exception(self):
        assert not issubclass(InvariantViolation, Exception)
        assert issubclass(DualityViolation, InvariantViolation)

    def test_duality_violation_message(self):
        error = DualityViolation(Decimal("1"), Decimal("2"))
        assert "must be equal" in str(error)
        assert error.asset_balance == Decimal("1")
        assert error.liability_balance == Decimal("2")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
