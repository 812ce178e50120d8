"""Fixed-point money helpers.

Prices and totals are persisted as floats rounded to two places; all
arithmetic happens on ``Decimal`` so sums never drift.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a float, int, str or Decimal to a two-place Decimal."""
    if isinstance(value, Decimal):
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(unit_price, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def as_float(amount: Decimal) -> float:
    return float(to_money(amount))
