"""Revenue request/response schemas."""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field

from revcore.data.models import (
    Client,
    Contract,
    CustomerPartnerLink,
    MonthKey,
    MonthlySnapshot,
    Partner,
    ReceivableEntry,
    RecordModel,
    RevenueStream,
)
from revcore.data.money import Money
from revcore.revenue.snapshot import TrendPoint


class MRRRequest(RecordModel):
    customer_id: str
    contracts: List[Contract] = Field(default_factory=list)
    revenue_streams: List[RevenueStream] = Field(default_factory=list)


class MRRResponse(RecordModel):
    customer_id: str
    mrr: Money
    arr: Money
    one_time_revenue: Money
    active_contracts: int
    stream_count: int


class PortfolioRequest(RecordModel):
    contracts: List[Contract] = Field(default_factory=list)
    revenue_streams: List[RevenueStream] = Field(default_factory=list)


class SnapshotRequest(RecordModel):
    """Capture `month` from the client book; pass the preceding snapshot if one exists."""
    month: MonthKey
    clients: List[Client] = Field(default_factory=list)
    previous_snapshot: Optional[MonthlySnapshot] = None
    history: List[MonthlySnapshot] = Field(default_factory=list)


class SnapshotResponse(RecordModel):
    snapshot: MonthlySnapshot
    trend: List[TrendPoint] = Field(default_factory=list)


class CommissionRequest(RecordModel):
    partners: List[Partner] = Field(default_factory=list)
    clients: List[Client] = Field(default_factory=list)
    links: List[CustomerPartnerLink] = Field(default_factory=list)


class MetricsRequest(RecordModel):
    clients: List[Client] = Field(default_factory=list)
    receivables: List[ReceivableEntry] = Field(default_factory=list)


class PricingRequest(RecordModel):
    """Apply `changes` to a client; optionally price it at a different per-seat rate."""
    client: Client
    changes: Dict[str, Any] = Field(default_factory=dict)
    what_if_per_seat_price: Optional[Decimal] = None


class PricingResponse(RecordModel):
    client: Client
    pricing_mode: str
    billing_changed: bool
    changed_fields: List[str] = Field(default_factory=list)
    what_if_mrr: Optional[Money] = None
