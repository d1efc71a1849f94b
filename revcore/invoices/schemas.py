"""Invoice request/response schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from revcore.data.models import Invoice, InvoiceLineItem, RecordModel
from revcore.data.money import Money, ZERO
from revcore.invoices.terms import AgingSummary
from revcore.invoices.totals import InvoiceMetrics


class LineItemAmountResponse(RecordModel):
    amount: Money


class TotalsRequest(RecordModel):
    line_items: List[InvoiceLineItem] = Field(default_factory=list)
    amount_paid: Decimal = ZERO


class TotalsResponse(RecordModel):
    line_items: List[InvoiceLineItem] = Field(default_factory=list)
    subtotal: Money
    discount_total: Money
    total: Money
    amount_paid: Money
    balance_due: Money
    raw_balance: Money
    overpaid: bool


class PaymentRequest(RecordModel):
    invoice: Invoice
    amount: Decimal
    paid_at: Optional[datetime] = None


class AgingRequest(RecordModel):
    invoices: List[Invoice] = Field(default_factory=list)
    as_of: Optional[date] = None


class AgingResponse(RecordModel):
    as_of: date
    aging: AgingSummary
    metrics: InvoiceMetrics
