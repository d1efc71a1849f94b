"""Payment terms, due dates and receivables aging."""
from datetime import date, timedelta
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta
from pydantic import Field

from revcore.data.models import Invoice, RecordModel
from revcore.data.money import Money, ZERO
from revcore.errors import InvalidInput

PAYMENT_TERMS_DAYS: Dict[str, Optional[int]] = {
    "due_on_receipt": 0,
    "net_14": 14,
    "net_30": 30,
    "net_45": 45,
    "net_60": 60,
    "due_end_of_month": None,  # calculated from the calendar
    "due_end_of_next_month": None,
}

BILLING_CYCLE_TERMS: Dict[str, str] = {
    "Monthly": "net_30",
    "Quarterly": "net_45",
    "Half Yearly": "net_60",
    "Annual": "net_60",
    "One Time": "due_on_receipt",
}

AGING_BUCKETS = ("current", "1-15", "16-30", "31-45", "45+")

# Invoices that no longer carry an open balance for aging purposes
CLOSED_STATUSES = ("paid", "void", "draft")


class AgingSummary(RecordModel):
    current: Money = ZERO
    days_1_15: Money = Field(default=ZERO, alias="1-15")
    days_16_30: Money = Field(default=ZERO, alias="16-30")
    days_31_45: Money = Field(default=ZERO, alias="31-45")
    days_45_plus: Money = Field(default=ZERO, alias="45+")
    total: Money = ZERO


_BUCKET_FIELDS = {
    "current": "current",
    "1-15": "days_1_15",
    "16-30": "days_16_30",
    "31-45": "days_31_45",
    "45+": "days_45_plus",
}


def calculate_due_date(invoice_date: date, terms: str) -> date:
    """
    Due date for an invoice issued on `invoice_date` under `terms`.

    Raises:
        InvalidInput: unknown payment terms
    """
    if terms not in PAYMENT_TERMS_DAYS:
        raise InvalidInput(f"Unknown payment terms: {terms}")

    if terms == "due_end_of_month":
        return invoice_date + relativedelta(day=31)
    if terms == "due_end_of_next_month":
        return invoice_date + relativedelta(months=1, day=31)
    return invoice_date + timedelta(days=PAYMENT_TERMS_DAYS[terms])


def billing_cycle_to_terms(billing_cycle: Optional[str]) -> str:
    """Default payment terms for a client billing cycle (net_30 when unknown)."""
    return BILLING_CYCLE_TERMS.get(billing_cycle or "", "net_30")


def aging_bucket(due_date: date, as_of: Optional[date] = None) -> str:
    """Which aging bucket an invoice due on `due_date` falls into."""
    as_of = as_of or date.today()
    days_overdue = (as_of - due_date).days

    if days_overdue <= 0:
        return "current"
    if days_overdue <= 15:
        return "1-15"
    if days_overdue <= 30:
        return "16-30"
    if days_overdue <= 45:
        return "31-45"
    return "45+"


def aging_summary(invoices: List[Invoice], as_of: Optional[date] = None) -> AgingSummary:
    """Outstanding balances of open invoices, bucketed by days past due."""
    totals = {name: ZERO for name in _BUCKET_FIELDS.values()}
    total = ZERO

    for invoice in invoices:
        if invoice.status in CLOSED_STATUSES:
            continue
        field_name = _BUCKET_FIELDS[aging_bucket(invoice.due_date, as_of)]
        totals[field_name] += invoice.balance_due
        total += invoice.balance_due

    return AgingSummary(total=total, **totals)
