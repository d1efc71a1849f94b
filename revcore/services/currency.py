"""
Display-only currency formatting and conversion.

The engine computes everything in the home currency. Conversion happens at
the edges, for rendering, using rates relative to EUR.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from revcore.config import settings
from revcore.data.money import to_decimal
from revcore.errors import InvalidInput

SUPPORTED_CURRENCIES = ['USD', 'EUR', 'GBP', 'AED', 'AUD', 'CAD', 'CHF', 'SGD', 'JPY', 'NZD']


def get_fallback_rates() -> dict[str, Decimal]:
    """Approximate EUR-based rates used when no live rates are supplied."""
    return {
        'EUR': Decimal('1.0'),
        'USD': Decimal('1.08'),
        'GBP': Decimal('0.86'),
        'AED': Decimal('3.97'),
        'AUD': Decimal('1.65'),
        'CAD': Decimal('1.47'),
        'CHF': Decimal('0.94'),
        'SGD': Decimal('1.45'),
        'JPY': Decimal('160.50'),
        'NZD': Decimal('1.78'),
    }


def _quantize(value: Decimal, decimals: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_number(value, decimals: int = 0) -> str:
    """Thousands-separated number, e.g. 1234.5 -> "1,235"."""
    return f"{_quantize(to_decimal(value), decimals):,.{decimals}f}"


def format_money(value, currency: Optional[str] = None, decimals: int = 0) -> str:
    """Amount followed by its currency code, e.g. "1,234 AED"."""
    currency = currency or settings.HOME_CURRENCY
    return f"{format_number(value, decimals)} {currency}"


def format_percent(value, decimals: int = 1) -> str:
    return f"{_quantize(to_decimal(value), decimals):.{decimals}f}%"


def format_delta(value, decimals: int = 0, currency: Optional[str] = None) -> str:
    """Signed change: "+1,200" / "-300", with a currency suffix when given."""
    value = to_decimal(value)
    prefix = "+" if value >= 0 else ""
    if currency:
        return f"{prefix}{format_money(value, currency, decimals)}"
    return f"{prefix}{format_number(value, decimals)}"


def format_delta_percent(value, decimals: int = 1) -> str:
    value = to_decimal(value)
    prefix = "+" if value >= 0 else ""
    return f"{prefix}{format_percent(value, decimals)}"


def convert_for_display(
    amount,
    from_currency: str,
    to_currency: str,
    rates: Optional[dict[str, Decimal]] = None
) -> Decimal:
    """
    Convert an amount between currencies via their EUR rates.

    Args:
        amount: Amount in `from_currency`
        from_currency: ISO code of the amount
        to_currency: ISO code to display in
        rates: EUR-based rates; defaults to the static fallback table

    Returns:
        Converted amount rounded to 2 decimals

    Raises:
        InvalidInput: either currency has no rate
    """
    amount = to_decimal(amount)
    if from_currency == to_currency:
        return amount

    rates = rates or get_fallback_rates()
    for code in (from_currency, to_currency):
        if code not in rates or rates[code] <= 0:
            raise InvalidInput(f"No exchange rate for currency: {code}")

    # A -> B = (EUR/B) / (EUR/A)
    cross_rate = rates[to_currency] / rates[from_currency]
    return _quantize(amount * cross_rate, 2)
