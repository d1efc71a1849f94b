"""
Invoice line-item and totals calculation.

    percent discount   amount = quantity x rate x (1 - discount / 100)
    flat discount      amount = max(0, quantity x rate - discount)

    subtotal    = sum(quantity x rate)        pre-discount
    total       = sum(amount)                 post-discount
    balance_due = max(0, total - amount_paid) raw delta kept for reconciliation
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from revcore.data.models import CatalogItem, Invoice, InvoiceLineItem, ReceivableEntry, RecordModel
from revcore.data.money import HUNDRED, Money, ZERO, round_money, to_decimal
from revcore.errors import InvalidInput

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = ("sent", "unpaid", "partially_paid", "overdue")


class InvoiceTotals(RecordModel):
    subtotal: Money = ZERO
    discount_total: Money = ZERO
    total: Money = ZERO


class BalanceDue(RecordModel):
    balance_due: Money = ZERO  # floored at zero for display
    raw_balance: Money = ZERO  # negative when overpaid
    overpaid: bool = False


class InvoiceMetrics(RecordModel):
    total_invoiced: Money = ZERO
    total_paid: Money = ZERO
    total_outstanding: Money = ZERO
    total_overdue: Money = ZERO
    draft_count: int = 0
    sent_count: int = 0
    paid_count: int = 0
    overdue_count: int = 0


# =============================================================================
# Line items
# =============================================================================

def _validate_line_item(item: InvoiceLineItem) -> None:
    if item.quantity < 0:
        raise InvalidInput(f"Line item quantity cannot be negative, got {item.quantity}")
    if item.rate < 0:
        raise InvalidInput(f"Line item rate cannot be negative, got {item.rate}")
    if item.discount_value < 0:
        raise InvalidInput(f"Line item discount cannot be negative, got {item.discount_value}")
    if item.discount_type == "percent" and item.discount_value > HUNDRED:
        raise InvalidInput(f"Percent discount cannot exceed 100, got {item.discount_value}")


def line_item_gross(item: InvoiceLineItem) -> Decimal:
    return to_decimal(item.quantity) * to_decimal(item.rate)


def compute_line_item_amount(item: InvoiceLineItem) -> Decimal:
    """
    Post-discount amount of a single line item, rounded to cents.

    Flat discounts larger than the line value clamp the amount to zero.

    Raises:
        InvalidInput: negative quantity, rate or discount; percent discount over 100
    """
    _validate_line_item(item)
    gross = line_item_gross(item)
    if item.discount_type == "percent":
        return round_money(gross * (1 - item.discount_value / HUNDRED))
    return round_money(max(ZERO, gross - item.discount_value))


def price_line_items(items: List[InvoiceLineItem]) -> List[InvoiceLineItem]:
    """Return copies of the line items with `amount` recomputed."""
    return [item.model_copy(update={"amount": compute_line_item_amount(item)}) for item in items]


def compute_invoice_totals(items: List[InvoiceLineItem]) -> InvoiceTotals:
    """Roll a set of line items into subtotal (pre-discount) and total (post-discount)."""
    subtotal = ZERO
    total = ZERO
    for item in items:
        subtotal += line_item_gross(item)
        total += compute_line_item_amount(item)

    return InvoiceTotals(
        subtotal=round_money(subtotal),
        discount_total=round_money(subtotal) - total,
        total=total,
    )


def compute_balance(total, amount_paid) -> BalanceDue:
    """Balance still owed; never negative for display, raw delta preserved."""
    raw = to_decimal(total) - to_decimal(amount_paid)
    return BalanceDue(balance_due=max(ZERO, raw), raw_balance=raw, overpaid=raw < 0)


def recalculate_invoice(invoice: Invoice) -> Invoice:
    """Recompute line amounts, totals and balance of an invoice."""
    items = price_line_items(invoice.line_items)
    totals = compute_invoice_totals(items)
    balance = compute_balance(totals.total, invoice.amount_paid)
    return invoice.model_copy(update={
        "line_items": items,
        "subtotal": totals.subtotal,
        "total": totals.total,
        "balance_due": balance.balance_due,
    })


# =============================================================================
# Payments
# =============================================================================

def can_record_payment(status: str) -> bool:
    return status in PAYABLE_STATUSES


def apply_payment(invoice: Invoice, amount, paid_at: Optional[datetime] = None) -> Invoice:
    """
    Apply a payment to an invoice.

    Returns:
        Invoice with updated amount_paid, balance_due and status

    Raises:
        InvalidInput: non-positive amount, or invoice not in a payable status
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidInput(f"Payment amount must be positive, got {amount}")
    if not can_record_payment(invoice.status):
        raise InvalidInput(f"Cannot record a payment on a {invoice.status} invoice")

    amount_paid = invoice.amount_paid + amount
    balance = compute_balance(invoice.total, amount_paid)
    if balance.overpaid:
        logger.warning(f"Invoice {invoice.invoice_number} overpaid by {-balance.raw_balance}")

    update = {
        "amount_paid": amount_paid,
        "balance_due": balance.balance_due,
        "status": "paid" if balance.balance_due == 0 else "partially_paid",
    }
    if balance.balance_due == 0:
        update["paid_at"] = paid_at or datetime.now(timezone.utc)
    return invoice.model_copy(update=update)


# =============================================================================
# Metrics / helpers
# =============================================================================

def invoice_metrics(invoices: List[Invoice], as_of: Optional[datetime] = None) -> InvoiceMetrics:
    """Portfolio-level invoice totals; void invoices are excluded."""
    as_of_date = (as_of or datetime.now(timezone.utc)).date()
    metrics = InvoiceMetrics()

    for invoice in invoices:
        if invoice.status == "void":
            continue

        metrics.total_invoiced += invoice.total
        metrics.total_paid += invoice.amount_paid

        if invoice.status == "draft":
            metrics.draft_count += 1
        elif invoice.status == "paid":
            metrics.paid_count += 1
        else:
            metrics.total_outstanding += invoice.balance_due
            metrics.sent_count += 1
            if invoice.due_date < as_of_date and invoice.balance_due > 0:
                metrics.total_overdue += invoice.balance_due
                metrics.overdue_count += 1

    return metrics


def format_invoice_number(seq: int) -> str:
    return f"INV-{seq:06d}"


def format_payment_number(seq: int) -> str:
    return f"PAY-{seq:06d}"


def line_items_from_receivable(
    receivable: ReceivableEntry,
    catalog_items: Optional[List[CatalogItem]] = None
) -> List[InvoiceLineItem]:
    """Turn a receivable into a single invoice line, named after a matching catalog item if any."""
    description = receivable.description.lower()
    match = next(
        (
            item for item in catalog_items or []
            if item.name.lower() in description or description in item.name.lower()
        ),
        None,
    )

    return [InvoiceLineItem(
        id=f"li-{receivable.id}",
        item_id=match.id if match else None,
        description=match.name if match else receivable.description,
        quantity=Decimal("1"),
        rate=receivable.amount,
        discount_type="flat",
        discount_value=ZERO,
        amount=receivable.amount,
    )]
