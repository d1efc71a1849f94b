"""
Entity records for the revenue engine.

These are passive, JSON-serializable records. The persistence layer hands them
in as plain dicts (camelCase keys, as stored) and gets derived records back in
the same shape. No ORM types cross this boundary.

Entity graph:
    Client ──< Contract ──< RevenueStream
    Client >──< Partner      (via CustomerPartnerLink, or Client.sales_partner)
    Client ──< ReceivableEntry
    Client ──< Invoice ──< InvoiceLineItem
    MonthlySnapshot ──< ClientSnapshotEntry
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from revcore.data.money import Money
from revcore.data.months import MONTH_KEY_PATTERN

MonthKey = Annotated[str, Field(pattern=MONTH_KEY_PATTERN)]

ClientStatus = Literal["active", "inactive"]
PricingModel = Literal["per_seat", "flat_mrr", "one_time_only"]
ContractStatus = Literal["active", "expired", "terminated"]
RevenueStreamType = Literal["subscription", "one_time", "add_on", "managed_service"]
ReceivableStatus = Literal["pending", "invoiced", "paid", "overdue"]
DiscountType = Literal["percent", "flat"]
InvoiceStatus = Literal["draft", "sent", "partially_paid", "unpaid", "overdue", "paid", "void"]
PaymentTerms = Literal[
    "due_on_receipt",
    "net_14",
    "net_30",
    "net_45",
    "net_60",
    "due_end_of_month",
    "due_end_of_next_month",
]


class RecordModel(BaseModel):
    """Base for every record: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# CLIENT / PARTNER
# =============================================================================

class BillingPhase(RecordModel):
    """One leg of a phased billing schedule (e.g. 3 months monthly, then quarterly)."""
    cycle: str
    duration_months: int = 0  # 0 = fills the remainder of the horizon
    amount: Money
    note: Optional[str] = None


class Client(RecordModel):
    """A billable account."""
    id: str
    name: str
    status: ClientStatus = "active"
    pricing_model: PricingModel = "flat_mrr"
    per_seat_cost: Optional[Money] = None
    seat_count: Optional[int] = None
    billing_cycle: Optional[str] = "Monthly"
    plan: Optional[str] = None
    discount: Optional[Money] = None  # percent, 0-100
    mrr: Money = Decimal("0")
    one_time_revenue: Money = Decimal("0")
    annual_run_rate: Money = Decimal("0")
    sales_partner: Optional[str] = None
    onboarding_date: Optional[date] = None
    billing_phases: List[BillingPhase] = Field(default_factory=list)
    notes: Optional[str] = None


class Partner(RecordModel):
    """Referral / reseller partner."""
    id: str
    name: str
    commission_percentage: Money = Decimal("0")  # applies to MRR
    one_time_commission_percentage: Money = Decimal("0")  # applies to one-time revenue
    total_paid: Money = Decimal("0")
    is_active: bool = True
    joined_date: Optional[date] = None


class CustomerPartnerLink(RecordModel):
    """Attribution edge between a client and a partner."""
    id: str
    customer_id: str
    partner_id: str
    attribution_pct: Money = Decimal("100")


# =============================================================================
# CONTRACT / REVENUE STREAM
# =============================================================================

class Contract(RecordModel):
    id: str
    customer_id: str
    start_date: date
    end_date: Optional[date] = None
    billing_cycle: Optional[str] = None
    plan: Optional[str] = None
    status: ContractStatus = "active"


class RevenueStream(RecordModel):
    """Per-period amount attached to a contract; not monthly-normalized."""
    id: str
    contract_id: str
    type: RevenueStreamType
    amount: Money
    frequency: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# =============================================================================
# RECEIVABLES
# =============================================================================

class ReceivableEntry(RecordModel):
    """One scheduled billing event for a client."""
    id: str
    client_id: str
    month: MonthKey
    amount: Money
    description: str
    status: ReceivableStatus = "pending"
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    covers_months: int = Field(default=1, ge=1)  # months billed, starting at `month`


# =============================================================================
# INVOICES
# =============================================================================

class InvoiceLineItem(RecordModel):
    id: Optional[str] = None
    item_id: Optional[str] = None
    revenue_stream_id: Optional[str] = None
    description: str = ""
    quantity: Money = Decimal("1")
    rate: Money = Decimal("0")
    discount_type: DiscountType = "flat"
    discount_value: Money = Decimal("0")
    amount: Money = Decimal("0")


class Invoice(RecordModel):
    id: str
    invoice_number: str
    client_id: str
    contract_id: Optional[str] = None
    receivable_id: Optional[str] = None
    currency: str = "AED"
    status: InvoiceStatus = "draft"
    invoice_date: date
    terms: PaymentTerms = "net_30"
    due_date: date
    line_items: List[InvoiceLineItem] = Field(default_factory=list)
    subtotal: Money = Decimal("0")
    total: Money = Decimal("0")
    amount_paid: Money = Decimal("0")
    balance_due: Money = Decimal("0")
    paid_at: Optional[datetime] = None


class CatalogItem(RecordModel):
    """Billable item from the product catalog."""
    id: str
    name: str
    rate: Money = Decimal("0")
    unit: str = "unit"
    is_active: bool = True


# =============================================================================
# SNAPSHOTS
# =============================================================================

class ClientSnapshotEntry(RecordModel):
    client_id: str
    name: str
    sales_partner: Optional[str] = None
    status: ClientStatus = "active"
    mrr: Money


class MonthlySnapshot(RecordModel):
    """
    Point-in-time rollup of the active book, immutable once captured.

    `client_snapshots` is the ground truth the waterfall diffs against on the
    next capture.
    """
    month: MonthKey
    captured_at: datetime
    total_mrr: Money = Field(alias="totalMRR")
    total_arr: Money = Field(alias="totalARR")
    client_count: int
    mrr_by_partner: Dict[str, Money] = Field(default_factory=dict)
    clients_by_partner: Dict[str, int] = Field(default_factory=dict)
    total_one_time_revenue: Money = Decimal("0")
    new_mrr: Money = Field(default=Decimal("0"), alias="newMRR")
    expansion_mrr: Money = Field(default=Decimal("0"), alias="expansionMRR")
    contraction_mrr: Money = Field(default=Decimal("0"), alias="contractionMRR")
    churned_mrr: Money = Field(default=Decimal("0"), alias="churnedMRR")
    net_new_mrr: Money = Field(default=Decimal("0"), alias="netNewMRR")
    client_snapshots: List[ClientSnapshotEntry] = Field(default_factory=list)
