"""
Money helpers. Amounts are Decimal in the database and integer cents at Stripe.
"""
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Quantize any numeric value to two decimals."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    return int((money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))
