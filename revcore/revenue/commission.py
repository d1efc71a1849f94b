"""
Partner commission calculation.

    monthly   = commission_percentage / 100          x attributed MRR
    one_time  = one_time_commission_percentage / 100 x attributed one-time revenue
    annual    = monthly x 12 + one_time

Attribution: a client with any CustomerPartnerLink is attributed only
through its links, weighted by `attribution_pct` (split credit). Clients
without links fall back to an exact name match on `sales_partner`.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from revcore.data.models import Client, CustomerPartnerLink, Partner, RecordModel
from revcore.data.money import HUNDRED, Money, ZERO, percent_of, to_decimal
from revcore.data.pricing import normalize_client
from revcore.errors import InconsistentState, InvalidInput

logger = logging.getLogger(__name__)


class Attribution(RecordModel):
    """A client credited to a partner, with its share (0-100)."""
    client_id: str
    client_name: str
    attribution_pct: Money = HUNDRED
    source: str = "sales_partner"  # "sales_partner" | "link"
    attributed_mrr: Money = ZERO
    attributed_one_time_revenue: Money = ZERO


class CommissionBreakdown(RecordModel):
    """Commission owed to one partner."""
    partner_id: str
    partner_name: str
    monthly: Money = ZERO
    one_time: Money = ZERO
    annual: Money = ZERO
    attributed_mrr: Money = Field(default=ZERO, alias="attributedMRR")
    attributed_one_time_revenue: Money = ZERO
    client_count: int = 0
    total_paid: Money = ZERO
    attributions: List[Attribution] = Field(default_factory=list)


def _check_percentage(value: Decimal, label: str) -> None:
    if not (ZERO <= value <= HUNDRED):
        raise InvalidInput(f"{label} must be between 0 and 100, got {value}")


def _links_by_customer(links: List[CustomerPartnerLink]) -> Dict[str, List[CustomerPartnerLink]]:
    grouped: Dict[str, List[CustomerPartnerLink]] = {}
    for link in links:
        _check_percentage(link.attribution_pct, f"Attribution for link {link.id}")
        grouped.setdefault(link.customer_id, []).append(link)

    for customer_id, customer_links in grouped.items():
        total = sum((l.attribution_pct for l in customer_links), ZERO)
        if total > HUNDRED:
            logger.error(f"Client {customer_id} is attributed {total}% across partners")
            raise InconsistentState(f"Client {customer_id} attribution exceeds 100% ({total}%)")
    return grouped


def resolve_attribution(
    partner: Partner,
    clients: List[Client],
    links: Optional[List[CustomerPartnerLink]] = None
) -> List[Attribution]:
    """
    Work out which active clients earn this partner commission, and at what share.

    Raises:
        InvalidInput: an attribution percentage outside 0-100
        InconsistentState: a client's links add up to more than 100%
    """
    grouped = _links_by_customer(links or [])
    attributions: List[Attribution] = []

    for client in clients:
        if client.status != "active":
            continue
        client = normalize_client(client)

        client_links = grouped.get(client.id)
        if client_links:
            pct = sum((l.attribution_pct for l in client_links if l.partner_id == partner.id), ZERO)
            if pct == 0:
                continue
            source = "link"
        elif client.sales_partner == partner.name:
            pct = HUNDRED
            source = "sales_partner"
        else:
            continue

        attributions.append(Attribution(
            client_id=client.id,
            client_name=client.name,
            attribution_pct=pct,
            source=source,
            attributed_mrr=percent_of(client.mrr, pct),
            attributed_one_time_revenue=percent_of(client.one_time_revenue, pct),
        ))

    return attributions


def compute_commission(
    partner: Partner,
    clients: List[Client],
    links: Optional[List[CustomerPartnerLink]] = None
) -> CommissionBreakdown:
    """
    Compute a partner's monthly, one-time and annual commission.

    Args:
        partner: Partner with its commission rates
        clients: Candidate clients (inactive ones are ignored)
        links: Optional CustomerPartnerLinks; authoritative where present

    Returns:
        CommissionBreakdown
    """
    _check_percentage(partner.commission_percentage, "Commission percentage")
    _check_percentage(partner.one_time_commission_percentage, "One-time commission percentage")

    attributions = resolve_attribution(partner, clients, links)
    attributed_mrr = sum((a.attributed_mrr for a in attributions), ZERO)
    attributed_one_time = sum((a.attributed_one_time_revenue for a in attributions), ZERO)

    monthly = percent_of(attributed_mrr, partner.commission_percentage)
    one_time = percent_of(attributed_one_time, partner.one_time_commission_percentage)

    return CommissionBreakdown(
        partner_id=partner.id,
        partner_name=partner.name,
        monthly=monthly,
        one_time=one_time,
        annual=monthly * 12 + one_time,
        attributed_mrr=attributed_mrr,
        attributed_one_time_revenue=attributed_one_time,
        client_count=len(attributions),
        total_paid=partner.total_paid,
        attributions=attributions,
    )


def compute_partner_commissions(
    partners: List[Partner],
    clients: List[Client],
    links: Optional[List[CustomerPartnerLink]] = None
) -> List[CommissionBreakdown]:
    """Commission breakdown for every partner, in the order given."""
    return [compute_commission(partner, clients, links) for partner in partners]


def record_commission_payment(partner: Partner, amount) -> Partner:
    """Return the partner with `amount` appended to its running total paid."""
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidInput(f"Commission payment must be positive, got {amount}")
    return partner.model_copy(update={"total_paid": partner.total_paid + amount})
