"""Invoice API routes."""
from datetime import date, datetime, time, timezone

from fastapi import APIRouter

from revcore.data.models import Invoice, InvoiceLineItem
from revcore.invoices.schemas import (
    AgingRequest,
    AgingResponse,
    LineItemAmountResponse,
    PaymentRequest,
    TotalsRequest,
    TotalsResponse,
)
from revcore.invoices.terms import aging_summary
from revcore.invoices.totals import (
    apply_payment,
    compute_balance,
    compute_invoice_totals,
    compute_line_item_amount,
    invoice_metrics,
    price_line_items,
)

router = APIRouter()


@router.post("/line-items/amount", response_model=LineItemAmountResponse)
async def line_item_amount(item: InvoiceLineItem):
    """Post-discount amount of a single line item."""
    return LineItemAmountResponse(amount=compute_line_item_amount(item))


@router.post("/totals", response_model=TotalsResponse)
async def invoice_totals(request: TotalsRequest):
    """
    Price line items and roll them up.

    Returns:
        Priced line items, pre-discount subtotal, post-discount total and balance due
    """
    items = price_line_items(request.line_items)
    totals = compute_invoice_totals(items)
    balance = compute_balance(totals.total, request.amount_paid)

    return TotalsResponse(
        line_items=items,
        subtotal=totals.subtotal,
        discount_total=totals.discount_total,
        total=totals.total,
        amount_paid=request.amount_paid,
        balance_due=balance.balance_due,
        raw_balance=balance.raw_balance,
        overpaid=balance.overpaid,
    )


@router.post("/payments", response_model=Invoice)
async def record_payment(request: PaymentRequest):
    """Apply a payment and return the updated invoice."""
    return apply_payment(request.invoice, request.amount, paid_at=request.paid_at)


@router.post("/aging", response_model=AgingResponse)
async def invoice_aging(request: AgingRequest):
    """Aging buckets and portfolio totals for a set of invoices."""
    as_of = request.as_of or date.today()
    return AgingResponse(
        as_of=as_of,
        aging=aging_summary(request.invoices, as_of),
        metrics=invoice_metrics(request.invoices, datetime.combine(as_of, time.min, tzinfo=timezone.utc)),
    )
