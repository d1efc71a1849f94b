"""Revenue API routes."""
from typing import List

from fastapi import APIRouter

from revcore.config import get_engine_config
from revcore.data.pricing import apply_client_update, mrr_at_price
from revcore.revenue.aggregator import PortfolioAggregate, aggregate_mrr, aggregate_portfolio
from revcore.revenue.commission import CommissionBreakdown, compute_partner_commissions
from revcore.revenue.metrics import DashboardMetrics, compute_dashboard_metrics
from revcore.revenue.schemas import (
    CommissionRequest,
    MetricsRequest,
    MRRRequest,
    MRRResponse,
    PortfolioRequest,
    PricingRequest,
    PricingResponse,
    SnapshotRequest,
    SnapshotResponse,
)
from revcore.revenue.snapshot import SnapshotLog, capture_snapshot, snapshot_trend

router = APIRouter()


@router.post("/mrr", response_model=MRRResponse)
async def customer_mrr(request: MRRRequest):
    """
    Derive a customer's MRR, ARR and one-time revenue from its contracts.

    Returns:
        MRR for the customer's active contracts only
    """
    aggregate = aggregate_mrr(
        request.customer_id,
        request.contracts,
        request.revenue_streams,
        config=get_engine_config(),
    )
    return MRRResponse(**aggregate.model_dump(), arr=aggregate.arr)


@router.post("/portfolio", response_model=PortfolioAggregate)
async def portfolio_mrr(request: PortfolioRequest):
    """Per-customer and total MRR across every contract supplied."""
    return aggregate_portfolio(request.contracts, request.revenue_streams, config=get_engine_config())


@router.post("/snapshots", response_model=SnapshotResponse)
async def capture_monthly_snapshot(request: SnapshotRequest):
    """
    Capture a monthly snapshot and its MRR waterfall.

    The previous snapshot is taken from `previousSnapshot` when given,
    otherwise from the latest month in `history` before the captured month.
    """
    config = get_engine_config()
    log = SnapshotLog(request.history)
    previous = request.previous_snapshot or log.previous_for(request.month)

    snapshot = capture_snapshot(request.clients, previous, request.month, config=config)
    log.upsert(snapshot)

    return SnapshotResponse(snapshot=snapshot, trend=snapshot_trend(log.history()))


@router.post("/commissions", response_model=List[CommissionBreakdown])
async def partner_commissions(request: CommissionRequest):
    """Monthly, one-time and annual commission for each partner."""
    return compute_partner_commissions(request.partners, request.clients, request.links)


@router.post("/metrics", response_model=DashboardMetrics)
async def dashboard_metrics(request: MetricsRequest):
    """Headline dashboard numbers for the client book."""
    return compute_dashboard_metrics(request.clients, request.receivables, config=get_engine_config())


@router.post("/pricing", response_model=PricingResponse)
async def update_client_pricing(request: PricingRequest):
    """
    Apply an edit to a client and re-derive its MRR.

    A supplied `mrr` is ignored for per-seat clients with seat inputs.
    """
    result = apply_client_update(request.client, request.changes)

    what_if = None
    if request.what_if_per_seat_price is not None:
        what_if = mrr_at_price(result.client, request.what_if_per_seat_price)

    return PricingResponse(
        client=result.client,
        pricing_mode=result.pricing_mode,
        billing_changed=result.billing_changed,
        changed_fields=result.changed_fields,
        what_if_mrr=what_if,
    )
