"""Decimal helpers for currency and percentage arithmetic"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Convert input to Decimal via str() so floats keep their printed value"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents (ROUND_HALF_UP)"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_rate(value: Decimal) -> Decimal:
    """Round a percentage to 4 decimals"""
    return value.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """amount * percentage / 100, unrounded"""
    return amount * percentage / HUNDRED
