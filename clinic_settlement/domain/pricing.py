"""Bidirectional price solver: markup over cost and discount off a list price.

Each pair is an algebraic inverse of the other. Prices keep full precision
so that a percentage solved back from a computed price matches the one that
produced it; percentages are rounded to 4 decimals.
"""

import logging
from decimal import Decimal

from clinic_settlement.domain.exceptions import InvalidInputError
from clinic_settlement.domain.models import Issue, IssueKind, SolvedValue
from clinic_settlement.utils.money import HUNDRED, ZERO, Number, quantize_rate, to_decimal


def _non_negative(value: Number, name: str) -> Decimal:
    amount = to_decimal(value)
    if amount < 0:
        raise InvalidInputError(f"{name} cannot be negative, got {amount}")
    return amount


def _clamped(price: Decimal, reason: str) -> SolvedValue:
    logging.warning("Negative price clamped to zero", extra={"price": str(price), "reason": reason})
    return SolvedValue(
        value=ZERO,
        issue=Issue(
            kind=IssueKind.NEGATIVE_OR_CLAMPED_PRICE,
            message=f"{reason} would produce a negative price ({price}); clamped to 0",
        ),
    )


def price_from_markup(cost: Number, markup_percent: Number) -> SolvedValue:
    """cost * (1 + markup/100); 100% markup doubles the cost"""
    base = _non_negative(cost, "Cost")
    markup = to_decimal(markup_percent)

    price = base * (1 + markup / HUNDRED)
    if price < 0:
        return _clamped(price, f"Markup of {markup}%")
    return SolvedValue(value=price)


def markup_from_price(cost: Number, price: Number) -> SolvedValue:
    """(price - cost) / cost * 100; undefined when cost is zero"""
    base = _non_negative(cost, "Cost")
    target = _non_negative(price, "Price")

    if base == 0:
        return SolvedValue(
            value=None,
            issue=Issue(kind=IssueKind.DIVISION_BY_ZERO, message="Markup is undefined for a zero cost"),
        )
    return SolvedValue(value=quantize_rate((target - base) / base * HUNDRED))


def price_from_discount(list_price: Number, discount_percent: Number) -> SolvedValue:
    """list_price * (1 - discount/100); discounts above 100% clamp to 0"""
    base = _non_negative(list_price, "List price")
    discount = to_decimal(discount_percent)

    price = base * (1 - discount / HUNDRED)
    if price < 0:
        return _clamped(price, f"Discount of {discount}%")
    return SolvedValue(value=price)


def discount_from_price(list_price: Number, final_price: Number) -> SolvedValue:
    """(list_price - final_price) / list_price * 100; undefined when list price is zero"""
    base = _non_negative(list_price, "List price")
    target = _non_negative(final_price, "Final price")

    if base == 0:
        return SolvedValue(
            value=None,
            issue=Issue(kind=IssueKind.DIVISION_BY_ZERO, message="Discount is undefined for a zero list price"),
        )
    return SolvedValue(value=quantize_rate((base - target) / base * HUNDRED))
