"""
Dashboard metrics - the headline numbers derived from the client book and
its receivable schedule.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from revcore.config import EngineConfig
from revcore.data.models import Client, ReceivableEntry, RecordModel
from revcore.data.money import Money, ZERO, round_money
from revcore.data.pricing import normalize_client

SUBSCRIPTION_PRICING_MODELS = ("per_seat", "flat_mrr")
OUTSTANDING_RECEIVABLE_STATUSES = ("pending", "invoiced", "overdue")


class DashboardMetrics(RecordModel):
    total_mrr: Money = Field(default=ZERO, alias="totalMRR")
    total_arr: Money = Field(default=ZERO, alias="totalARR")
    active_client_count: int = 0
    total_clients: int = 0
    total_one_time_revenue: Money = ZERO
    avg_revenue_per_client: Money = ZERO
    mrr_by_partner: Dict[str, Money] = Field(default_factory=dict)
    clients_by_partner: Dict[str, int] = Field(default_factory=dict)

    # Receivables
    total_receivables: Money = ZERO
    receivables_paid: Money = ZERO
    receivables_pending: Money = ZERO

    # Subscriber vs one-time breakdown
    subscriber_count: int = 0
    active_subscriber_count: int = 0
    one_time_client_count: int = 0
    active_one_time_client_count: int = 0
    avg_mrr_per_subscriber: Money = Field(default=ZERO, alias="avgMRRPerSubscriber")
    avg_one_time_per_client: Money = ZERO
    total_seats: int = 0


def _average(total: Decimal, count: int) -> Decimal:
    return round_money(total / count) if count else ZERO


def compute_dashboard_metrics(
    clients: List[Client],
    receivables: Optional[List[ReceivableEntry]] = None,
    config: Optional[EngineConfig] = None
) -> DashboardMetrics:
    """
    Headline metrics for the dashboard.

    Revenue totals and partner splits cover active clients only; the client
    counts and the one-time average cover the whole book. Per-seat MRR is
    re-derived from seat inputs before anything is summed.

    Args:
        clients: Every client record, active or not
        receivables: Receivable entries to total (optional)
        config: Engine configuration (label for unattributed clients)

    Returns:
        DashboardMetrics
    """
    config = config or EngineConfig()
    clients = [normalize_client(c) for c in clients]
    active = [c for c in clients if c.status == "active"]

    total_mrr = ZERO
    total_one_time = ZERO
    mrr_by_partner: Dict[str, Decimal] = {}
    clients_by_partner: Dict[str, int] = {}

    for client in active:
        total_mrr += client.mrr
        total_one_time += client.one_time_revenue

        partner = client.sales_partner or config.direct_partner_label
        mrr_by_partner[partner] = mrr_by_partner.get(partner, ZERO) + client.mrr
        clients_by_partner[partner] = clients_by_partner.get(partner, 0) + 1

    subscribers = [c for c in clients if c.pricing_model in SUBSCRIPTION_PRICING_MODELS]
    active_subscribers = [c for c in subscribers if c.status == "active"]
    one_time_clients = [c for c in clients if c.pricing_model == "one_time_only"]
    active_one_time_clients = [c for c in one_time_clients if c.status == "active"]

    total_receivables = ZERO
    receivables_paid = ZERO
    receivables_pending = ZERO
    for entry in receivables or []:
        total_receivables += entry.amount
        if entry.status == "paid":
            receivables_paid += entry.amount
        elif entry.status in OUTSTANDING_RECEIVABLE_STATUSES:
            receivables_pending += entry.amount

    return DashboardMetrics(
        total_mrr=total_mrr,
        total_arr=total_mrr * 12,
        active_client_count=len(active),
        total_clients=len(clients),
        total_one_time_revenue=total_one_time,
        avg_revenue_per_client=_average(total_mrr, len(active)),
        mrr_by_partner=mrr_by_partner,
        clients_by_partner=clients_by_partner,
        total_receivables=total_receivables,
        receivables_paid=receivables_paid,
        receivables_pending=receivables_pending,
        subscriber_count=len(subscribers),
        active_subscriber_count=len(active_subscribers),
        one_time_client_count=len(one_time_clients),
        active_one_time_client_count=len(active_one_time_clients),
        avg_mrr_per_subscriber=_average(sum((c.mrr for c in active_subscribers), ZERO), len(active_subscribers)),
        avg_one_time_per_client=_average(
            sum((c.one_time_revenue for c in one_time_clients), ZERO),
            len(one_time_clients),
        ),
        total_seats=sum(c.seat_count or 0 for c in active),
    )
