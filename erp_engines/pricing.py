"""
Module: erp_engines.pricing
Responsibility:
    Line-item subtotal and document total calculation for quotes, sales
    orders and purchase orders, including per-line and overall percentage
    discounts.

Architecture position:
    Engines -- pure calculation layer, zero I/O, no clock.
    May only import erp_kernel (domain values and exceptions).

Invariants enforced:
    - Decimal-only arithmetic; no binary floating point.
    - No intermediate rounding: subtotals and totals keep full precision;
      rounding happens only at display (format_money) or when a total
      becomes a ledger amount.
    - Explicit failure: out-of-range inputs raise ValidationError
      subclasses, they are never clamped.

Failure modes:
    - InvalidQuantityError when quantity <= 0.
    - InvalidPriceError when unit price < 0.
    - InvalidPercentageError when a percentage is outside [0, 100].
    - CurrencyMismatchError when a line is priced in another currency.

Usage:
    from erp_engines.pricing import line_subtotal, document_total

    line_subtotal(Decimal("3"), Money.of("250.00", "BRL"), Decimal("10"))
    # Money(Decimal('675.0000'), Currency('BRL'))
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Protocol, Sequence

from erp_engines.tracer import traced_engine
from erp_kernel.domain.values import Currency, Money, ONE_HUNDRED, discount_factor
from erp_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidPercentageError,
    InvalidPriceError,
    InvalidQuantityError,
)


class PricedLine(Protocol):
    """Anything the engine can price: a quantity, a unit price and a discount."""

    quantity: Decimal
    unit_price: Money
    discount_percent: Decimal


def _as_decimal(value: Decimal | int | str) -> Decimal | None:
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def validate_quantity(quantity: Decimal | int | str) -> Decimal:
    """Return the quantity as Decimal, rejecting zero, negatives and garbage."""
    value = _as_decimal(quantity)
    if value is None or value <= 0:
        raise InvalidQuantityError(str(quantity))
    return value


def validate_unit_price(unit_price: Money) -> Money:
    """Unit prices may be zero (free items) but never negative."""
    if unit_price.is_negative:
        raise InvalidPriceError(str(unit_price.amount))
    return unit_price


def validate_percentage(
    percent: Decimal | int | str,
    field_name: str = "discount_percent",
) -> Decimal:
    """Return the percentage as Decimal, rejecting values outside [0, 100]."""
    value = _as_decimal(percent)
    if value is None or value < 0 or value > ONE_HUNDRED:
        raise InvalidPercentageError(field_name, str(percent))
    return value


def line_subtotal(
    quantity: Decimal | int | str,
    unit_price: Money,
    discount_percent: Decimal | int | str = Decimal("0"),
) -> Money:
    """
    ``quantity * unit_price * (1 - discount_percent/100)``.

    A 100% discount yields zero, not an error.
    """
    qty = validate_quantity(quantity)
    price = validate_unit_price(unit_price)
    pct = validate_percentage(discount_percent)
    return price * qty * discount_factor(pct)


@traced_engine("pricing", "1.0", fingerprint_fields=("overall_discount_percent",))
def document_total(
    items: Sequence[PricedLine],
    overall_discount_percent: Decimal | int | str = Decimal("0"),
    *,
    currency: Currency | str,
) -> Money:
    """
    Sum of line subtotals with the overall discount applied.

    Preconditions:
        - every line is priced in ``currency``.
    Postconditions:
        - empty ``items`` yields zero in ``currency``.
        - the result does not depend on the order of ``items``.
        - the result is not rounded.
    """
    expected = currency if isinstance(currency, Currency) else Currency(currency)
    pct = validate_percentage(overall_discount_percent, "overall_discount_percent")

    gross = Money.zero(expected)
    for item in items:
        if item.unit_price.currency != expected:
            raise CurrencyMismatchError(expected.code, item.unit_price.currency.code)
        gross = gross + line_subtotal(item.quantity, item.unit_price, item.discount_percent)

    return gross * discount_factor(pct)
