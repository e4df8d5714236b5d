"""Decimal contexts for money arithmetic.

Token amounts can run to many integer digits (base units), well past the
default 28-digit context. Sums and rule fractions are computed in a wide
context that traps Inexact, so a result that cannot be held exactly
raises AmountPrecisionError instead of being rounded silently. Only the
two-decimal export rounding is allowed to round.
"""

from decimal import (
    ROUND_HALF_UP,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
)

from stakeledger.exceptions import AmountPrecisionError

MONEY_PRECISION = 120

_EXACT = Context(
    prec=MONEY_PRECISION,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)
_ROUNDING = Context(
    prec=MONEY_PRECISION,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

_CENTS = Decimal("0.01")


def add(left: Decimal, right: Decimal) -> Decimal:
    """Exact sum of two amounts."""
    try:
        return _EXACT.add(left, right)
    except DecimalException as e:
        raise AmountPrecisionError(f"Cannot add {left} and {right} exactly") from e


def multiply(amount: Decimal, fraction: Decimal) -> Decimal:
    """Exact product of an amount and a rule fraction."""
    try:
        return _EXACT.multiply(amount, fraction)
    except DecimalException as e:
        raise AmountPrecisionError(f"Cannot multiply {amount} by {fraction} exactly") from e


def round_amount(value: Decimal) -> Decimal:
    """Round a money value to two decimal places (half-up)."""
    try:
        return value.quantize(_CENTS, context=_ROUNDING)
    except DecimalException as e:
        raise AmountPrecisionError(f"Cannot round {value} to cents") from e
