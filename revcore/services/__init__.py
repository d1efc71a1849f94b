"""
Edge services that sit outside the revenue core.

Usage:
    from revcore.services import format_money, convert_for_display
"""
from revcore.services.currency import (
    SUPPORTED_CURRENCIES,
    convert_for_display,
    format_delta,
    format_delta_percent,
    format_money,
    format_number,
    format_percent,
    get_fallback_rates,
)

__all__ = [
    "SUPPORTED_CURRENCIES",
    "convert_for_display",
    "format_delta",
    "format_delta_percent",
    "format_money",
    "format_number",
    "format_percent",
    "get_fallback_rates",
]
