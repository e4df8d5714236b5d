"""Tests for exact money arithmetic.

Tests verify:
- Sums and products keep every digit past the default 28-digit context
- Results that cannot be held exactly raise AmountPrecisionError
- Cent rounding is half-up
"""

from decimal import Decimal

import pytest

from stakeledger.engine.money import MONEY_PRECISION, add, multiply, round_amount
from stakeledger.exceptions import AmountPrecisionError, LedgerError


class TestAdd:
    def test_keeps_small_digits_of_large_amount(self) -> None:
        total = add(Decimal("12345678901234567890123456.01"), Decimal("0.008"))
        assert total == Decimal("12345678901234567890123456.018")

    def test_sum_wider_than_context_raises(self) -> None:
        with pytest.raises(AmountPrecisionError):
            add(Decimal("1e100"), Decimal("1e-100"))

    def test_error_is_a_ledger_error(self) -> None:
        assert issubclass(AmountPrecisionError, LedgerError)


class TestMultiply:
    def test_half_of_large_amount(self) -> None:
        result = multiply(Decimal("12345678901234567890123456789.01"), Decimal("0.5"))
        assert result == Decimal("6172839450617283945061728394.505")

    def test_product_wider_than_context_raises(self) -> None:
        amount = Decimal("1" * MONEY_PRECISION)
        with pytest.raises(AmountPrecisionError):
            multiply(amount, Decimal("0.25"))


class TestRoundAmount:
    def test_half_up(self) -> None:
        assert round_amount(Decimal("0.005")) == Decimal("0.01")
        assert round_amount(Decimal("0.0049")) == Decimal("0.00")

    def test_1e27_rounds_to_cents(self) -> None:
        assert round_amount(Decimal("1e27")) == Decimal("1000000000000000000000000000.00")

    def test_too_many_integer_digits_raises(self) -> None:
        with pytest.raises(AmountPrecisionError):
            round_amount(Decimal("1e200"))
