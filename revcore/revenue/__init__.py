"""
Revenue module - MRR/ARR aggregation, snapshot waterfall, partner
commissions and dashboard metrics.
"""
from revcore.revenue.aggregator import (
    MRRAggregate,
    PortfolioAggregate,
    aggregate_mrr,
    aggregate_portfolio,
    normalize_to_monthly,
)
from revcore.revenue.snapshot import (
    SnapshotLog,
    TrendPoint,
    Waterfall,
    capture_snapshot,
    compute_waterfall,
    snapshot_trend,
)
from revcore.revenue.commission import (
    Attribution,
    CommissionBreakdown,
    compute_commission,
    compute_partner_commissions,
    record_commission_payment,
    resolve_attribution,
)
from revcore.revenue.metrics import DashboardMetrics, compute_dashboard_metrics

__all__ = [
    # Aggregator
    "MRRAggregate",
    "PortfolioAggregate",
    "aggregate_mrr",
    "aggregate_portfolio",
    "normalize_to_monthly",
    # Snapshots
    "SnapshotLog",
    "TrendPoint",
    "Waterfall",
    "capture_snapshot",
    "compute_waterfall",
    "snapshot_trend",
    # Commission
    "Attribution",
    "CommissionBreakdown",
    "compute_commission",
    "compute_partner_commissions",
    "record_commission_payment",
    "resolve_attribution",
    # Metrics
    "DashboardMetrics",
    "compute_dashboard_metrics",
]
