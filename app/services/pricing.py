# app/services/pricing.py
"""
Cart pricing.

The discount depends only on how many distinct products sit in the cart:
a tier rate R is looked up by that count D and the discount is a flat
R * D * 100, independent of the subtotal. The total is not floored, a cart
of cheap products can price below zero.

Nothing here touches the database, callers persist the result.
"""
from decimal import Decimal, InvalidOperation
from typing import Iterable, NamedTuple

from app.domain.errors import ComputationError

DISCOUNT_RATES = {
    1: Decimal("0"),
    2: Decimal("0.1"),
    3: Decimal("0.2"),
    4: Decimal("0.3"),
    5: Decimal("0.4"),
    6: Decimal("0.5"),
    7: Decimal("0.6"),
}
DEFAULT_FALLBACK_RATE = Decimal("1")
DISCOUNT_UNIT = Decimal("100")
CENT = Decimal("0.01")


class PricedLine(NamedTuple):
    product_id: int
    quantity: int
    unit_price: Decimal


def discount_rate(distinct_count: int, fallback_rate: Decimal = DEFAULT_FALLBACK_RATE) -> Decimal:
    if distinct_count <= 0:
        return Decimal("0")
    return DISCOUNT_RATES.get(distinct_count, fallback_rate)


def discount_amount(distinct_count: int, fallback_rate: Decimal = DEFAULT_FALLBACK_RATE) -> Decimal:
    return discount_rate(distinct_count, fallback_rate) * distinct_count * DISCOUNT_UNIT


def compute_total(
    lines: Iterable[PricedLine],
    fallback_rate: Decimal = DEFAULT_FALLBACK_RATE,
) -> Decimal:
    lines = list(lines)
    if not lines:
        return Decimal("0.00")

    try:
        subtotal = Decimal("0")
        for line in lines:
            if line.quantity < 0:
                raise ComputationError(
                    f"Negative quantity {line.quantity} for product {line.product_id}"
                )
            subtotal += Decimal(line.quantity) * Decimal(line.unit_price)
    except (TypeError, ValueError, InvalidOperation) as e:
        raise ComputationError("Could not calculate total price") from e

    distinct = len({line.product_id for line in lines})
    total = subtotal - discount_amount(distinct, fallback_rate)
    return total.quantize(CENT)
