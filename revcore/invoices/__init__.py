"""Invoices module - line items, totals, payments, terms and aging."""
from revcore.invoices.terms import (
    AgingSummary,
    aging_bucket,
    aging_summary,
    billing_cycle_to_terms,
    calculate_due_date,
)
from revcore.invoices.totals import (
    BalanceDue,
    InvoiceMetrics,
    InvoiceTotals,
    apply_payment,
    compute_balance,
    compute_invoice_totals,
    compute_line_item_amount,
    format_invoice_number,
    invoice_metrics,
    line_items_from_receivable,
    recalculate_invoice,
)

__all__ = [
    # Terms / aging
    "AgingSummary",
    "aging_bucket",
    "aging_summary",
    "billing_cycle_to_terms",
    "calculate_due_date",
    # Totals / payments
    "BalanceDue",
    "InvoiceMetrics",
    "InvoiceTotals",
    "apply_payment",
    "compute_balance",
    "compute_invoice_totals",
    "compute_line_item_amount",
    "format_invoice_number",
    "invoice_metrics",
    "line_items_from_receivable",
    "recalculate_invoice",
]
