"""Month-key (YYYY-MM) arithmetic."""
import re
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from revcore.errors import InvalidInput

MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
_MONTH_KEY_RE = re.compile(MONTH_KEY_PATTERN)


def validate_month_key(month: str) -> str:
    """Raise InvalidInput unless `month` is a YYYY-MM key."""
    if not isinstance(month, str) or not _MONTH_KEY_RE.match(month):
        raise InvalidInput(f"Invalid month key: {month!r} (expected YYYY-MM)")
    return month


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_start(month: str) -> date:
    """First calendar day of a month key."""
    validate_month_key(month)
    year, mon = month.split("-")
    return date(int(year), int(mon), 1)


def add_months(month: str, count: int) -> str:
    """Shift a month key by `count` months (negative counts go back)."""
    return month_key(month_start(month) + relativedelta(months=count))


def current_month(today: Optional[date] = None) -> str:
    return month_key(today or date.today())


def month_range(start: str, count: int) -> List[str]:
    """`count` consecutive month keys beginning at `start`."""
    return [add_months(start, offset) for offset in range(count)]
