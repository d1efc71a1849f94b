"""Read-side views over a receivable schedule: totals, groupings, filters."""
import re
from typing import Dict, List, Optional

from revcore.data.models import ReceivableEntry, RecordModel
from revcore.data.money import Money, ZERO
from revcore.errors import InvalidInput

RECEIVABLE_STATUSES = ("pending", "invoiced", "paid", "overdue")

_ONE_TIME_PATTERN = re.compile(
    r"one-time|one time|setup|onboarding|website|integration|training|go live|development",
    re.IGNORECASE,
)
_RECURRING_PATTERN = re.compile(r"subscription|monthly|quarterly|half yearly|annual|managed|plan", re.IGNORECASE)


class ReceivableTotals(RecordModel):
    total: Money = ZERO
    paid: Money = ZERO
    invoiced: Money = ZERO
    pending: Money = ZERO
    overdue: Money = ZERO


class MonthlyReceivableSummary(RecordModel):
    month: str
    total: Money = ZERO
    paid: Money = ZERO
    outstanding: Money = ZERO
    count: int = 0


def receivable_totals(receivables: List[ReceivableEntry]) -> ReceivableTotals:
    """Sum of all entries, and per status."""
    by_status = {status: ZERO for status in RECEIVABLE_STATUSES}
    total = ZERO
    for entry in receivables:
        total += entry.amount
        by_status[entry.status] += entry.amount
    return ReceivableTotals(total=total, **by_status)


def group_by_month(receivables: List[ReceivableEntry]) -> Dict[str, List[ReceivableEntry]]:
    grouped: Dict[str, List[ReceivableEntry]] = {}
    for entry in receivables:
        grouped.setdefault(entry.month, []).append(entry)
    return grouped


def group_by_client(receivables: List[ReceivableEntry]) -> Dict[str, List[ReceivableEntry]]:
    grouped: Dict[str, List[ReceivableEntry]] = {}
    for entry in receivables:
        grouped.setdefault(entry.client_id, []).append(entry)
    return grouped


def monthly_summary(receivables: List[ReceivableEntry]) -> List[MonthlyReceivableSummary]:
    """
    Per-month total, paid, outstanding and entry count, ordered by month.

    Outstanding is everything not yet paid, invoiced entries included.
    """
    summaries = []
    for month, entries in sorted(group_by_month(receivables).items()):
        total = sum((e.amount for e in entries), ZERO)
        paid = sum((e.amount for e in entries if e.status == "paid"), ZERO)
        summaries.append(MonthlyReceivableSummary(
            month=month,
            total=total,
            paid=paid,
            outstanding=total - paid,
            count=len(entries),
        ))
    return summaries


def filter_by_status(receivables: List[ReceivableEntry], status: Optional[str] = "all") -> List[ReceivableEntry]:
    """Entries with the given status; "all" (or None) returns everything."""
    if status in (None, "all"):
        return list(receivables)
    if status not in RECEIVABLE_STATUSES:
        raise InvalidInput(f"Unknown receivable status: {status}")
    return [e for e in receivables if e.status == status]


def classify_revenue(description: str) -> str:
    """Guess whether a receivable is recurring ("mrr"), "one_time" or "mixed" from its description."""
    one_time = bool(_ONE_TIME_PATTERN.search(description))
    recurring = bool(_RECURRING_PATTERN.search(description))
    if one_time and recurring:
        return "mixed"
    if one_time:
        return "one_time"
    return "mrr"
