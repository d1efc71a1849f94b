"""Receivables module - schedule generation, regeneration and summaries."""
from revcore.receivables.scheduler import (
    RegenerationPlan,
    generate_receivables,
    mark_overdue,
    needs_regeneration,
    regenerate_receivables,
    transition_receivable,
)
from revcore.receivables.summary import (
    MonthlyReceivableSummary,
    ReceivableTotals,
    classify_revenue,
    filter_by_status,
    group_by_client,
    group_by_month,
    monthly_summary,
    receivable_totals,
)

__all__ = [
    "RegenerationPlan",
    "generate_receivables",
    "mark_overdue",
    "needs_regeneration",
    "regenerate_receivables",
    "transition_receivable",
    "MonthlyReceivableSummary",
    "ReceivableTotals",
    "classify_revenue",
    "filter_by_status",
    "group_by_client",
    "group_by_month",
    "monthly_summary",
    "receivable_totals",
]
