"""Money type and rounding helpers shared by every calculator."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Any

from pydantic import PlainSerializer

# Decimal internally so sums and differences stay exact; plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats and numeric strings to Decimal without float artifacts."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Any) -> Decimal:
    """Round to 2 decimals, half-up."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def percent_of(value: Any, percentage: Any) -> Decimal:
    """Return `percentage` percent of `value` (percentage is 0-100)."""
    return to_decimal(value) * to_decimal(percentage) / HUNDRED
