"""
Unit tests for Money, DateRange and the notes helper.

Verifies:
- Rounding to 2 places, ROUND_HALF_UP
- Negative amounts and empty currencies rejected
- Arithmetic never mixes currencies and never goes negative
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from insurance_kernel.domain.values import DateRange, Money, append_note
from insurance_kernel.exceptions import (
    CurrencyMismatchError,
    NegativeMoneyError,
    ValidationError,
)

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000000"),
    places=3,
    allow_nan=False,
    allow_infinity=False,
)


class TestMoneyConstruction:

    def test_rounds_half_up(self):
        """10.005 rounds away from zero to 10.01."""
        assert Money.of("10.005").amount == Decimal("10.01")
        assert Money(Decimal("10.005"), "RUB").amount == Decimal("10.01")

    def test_rounds_down_below_half(self):
        assert Money.of("10.004").amount == Decimal("10.00")

    def test_int_amount(self):
        assert Money.of(10000).amount == Decimal("10000.00")

    def test_currency_normalised(self):
        assert Money.of("1", " rub ").currency == "RUB"

    def test_negative_rejected(self):
        with pytest.raises(NegativeMoneyError):
            Money.of("-0.01")

    @pytest.mark.parametrize("amount", [Decimal("-0.004"), "-0.001", -0.001])
    def test_negative_below_rounding_rejected(self, amount):
        with pytest.raises(NegativeMoneyError):
            Money(amount, "RUB")

    def test_negative_zero_accepted(self):
        assert Money.of("-0.00").amount == Decimal("0.00")

    def test_empty_currency_rejected(self):
        with pytest.raises(ValidationError):
            Money.of("1", "  ")

    def test_garbage_amount_rejected(self):
        with pytest.raises(ValidationError):
            Money.of("ten roubles")

    def test_zero_allowed_but_not_positive(self):
        zero = Money.zero()
        assert zero.is_zero
        assert not zero.is_positive

    def test_value_equality(self):
        assert Money.of("10.00") == Money.of("10")
        assert Money.of("10", "RUB") != Money.of("10", "USD")
        assert len({Money.of("10"), Money.of("10.00")}) == 1

    def test_str(self):
        assert str(Money.of("10000")) == "10000.00 RUB"

    @given(amounts)
    def test_always_two_places_half_up(self, raw):
        money = Money(raw, "RUB")
        assert money.amount == raw.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        assert money.amount.as_tuple().exponent == -2


class TestMoneyArithmetic:

    def test_add(self):
        assert Money.of("10.50") + Money.of("0.50") == Money.of("11.00")

    def test_subtract(self):
        assert Money.of("10.50") - Money.of("0.50") == Money.of("10.00")

    def test_add_currency_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "RUB") + Money.of("1", "USD")

    def test_subtract_currency_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "RUB").subtract(Money.of("1", "EUR"))

    def test_subtract_below_zero(self):
        with pytest.raises(NegativeMoneyError):
            Money.of("1.00") - Money.of("1.01")

    @given(amounts, amounts)
    def test_add_then_subtract_returns_original(self, a, b):
        left, right = Money(a), Money(b)
        assert (left + right) - right == left

    @given(amounts, amounts)
    def test_add_commutative(self, a, b):
        assert Money(a) + Money(b) == Money(b) + Money(a)

    @given(amounts, amounts)
    def test_subtract_negative_always_fails(self, a, b):
        left, right = Money(a), Money(b)
        if right.amount > left.amount:
            with pytest.raises(NegativeMoneyError):
                left - right
        else:
            assert (left - right).amount >= 0


class TestDateRange:

    def test_contains_both_ends(self):
        window = DateRange(date(2024, 6, 1), date(2024, 7, 1))
        assert window.contains(date(2024, 6, 1))
        assert window.contains(date(2024, 7, 1))
        assert not window.contains(date(2024, 7, 2))

    def test_days_inclusive(self):
        assert DateRange(date(2024, 6, 1), date(2024, 6, 1)).days == 1

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            DateRange(date(2024, 6, 2), date(2024, 6, 1))


class TestAppendNote:

    def test_first_note(self):
        assert append_note(None, "Problem: x") == "Problem: x"

    def test_joined_with_pipe(self):
        assert append_note("a", "b") == "a | b"

    def test_blank_note_is_noop(self):
        assert append_note("a", "  ") == "a"
        assert append_note(None, None) is None
