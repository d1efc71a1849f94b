"""
Monthly snapshot capture and the MRR waterfall.

A capture rolls the active book up into a MonthlySnapshot and classifies
the change against the immediately preceding snapshot:

    new          client present now, absent before      -> full current MRR
    expansion    present in both, MRR went up           -> positive delta
    contraction  present in both, MRR went down         -> |negative delta|
    churn        present before, absent from active set -> full previous MRR

    net_new = new + expansion - contraction - churn
            = current_total - previous_total            (always, exactly)

The previous snapshot is passed in explicitly; `SnapshotLog` is the
month-keyed history a caller can keep it in.

Client MRR is re-derived from pricing inputs and held at cent precision, and
the previous total is taken from the previous `client_snapshots`, so a
snapshot reloaded from JSON diffs exactly like the in-memory one.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from revcore.config import EngineConfig
from revcore.data.models import (
    Client,
    ClientSnapshotEntry,
    MonthlySnapshot,
    RecordModel,
)
from revcore.data.money import HUNDRED, Money, ZERO, round_money
from revcore.data.months import validate_month_key
from revcore.data.pricing import normalize_client
from revcore.errors import InconsistentState, InvalidInput

logger = logging.getLogger(__name__)


class Waterfall(RecordModel):
    """Period-over-period MRR movement."""
    new_mrr: Money = Field(default=ZERO, alias="newMRR")
    expansion_mrr: Money = Field(default=ZERO, alias="expansionMRR")
    contraction_mrr: Money = Field(default=ZERO, alias="contractionMRR")
    churned_mrr: Money = Field(default=ZERO, alias="churnedMRR")

    @property
    def net_new_mrr(self) -> Decimal:
        return self.new_mrr + self.expansion_mrr - self.contraction_mrr - self.churned_mrr


class TrendPoint(RecordModel):
    month: str
    total_mrr: Money = Field(alias="totalMRR")
    net_new_mrr: Money = Field(alias="netNewMRR")
    client_count: int
    growth_pct: Optional[Money] = None  # None for the first month or a zero base


# =============================================================================
# Waterfall
# =============================================================================

def _index_entries(entries: List[ClientSnapshotEntry], label: str) -> Dict[str, ClientSnapshotEntry]:
    indexed: Dict[str, ClientSnapshotEntry] = {}
    for entry in entries:
        if entry.client_id in indexed:
            logger.error(f"Duplicate client id {entry.client_id} in {label} snapshot set")
            raise InconsistentState(f"Duplicate client id {entry.client_id} in {label} snapshot set")
        indexed[entry.client_id] = entry
    return indexed


def compute_waterfall(
    current: List[ClientSnapshotEntry],
    previous: Optional[List[ClientSnapshotEntry]]
) -> Waterfall:
    """
    Classify MRR movement between two client sets.

    With no previous set, everything current is new MRR.
    """
    current_by_id = _index_entries(current, "current")

    if previous is None:
        return Waterfall(new_mrr=sum((e.mrr for e in current), ZERO))

    previous_by_id = _index_entries(previous, "previous")

    new_mrr = ZERO
    expansion = ZERO
    contraction = ZERO
    churned = ZERO

    for client_id, entry in current_by_id.items():
        prior = previous_by_id.get(client_id)
        if prior is None:
            new_mrr += entry.mrr
            continue
        delta = entry.mrr - prior.mrr
        if delta > 0:
            expansion += delta
        elif delta < 0:
            contraction += -delta

    for client_id, prior in previous_by_id.items():
        if client_id not in current_by_id:
            churned += prior.mrr

    return Waterfall(
        new_mrr=new_mrr,
        expansion_mrr=expansion,
        contraction_mrr=contraction,
        churned_mrr=churned,
    )


# =============================================================================
# Capture
# =============================================================================

def capture_snapshot(
    clients: List[Client],
    previous_snapshot: Optional[MonthlySnapshot],
    month: str,
    captured_at: Optional[datetime] = None,
    config: Optional[EngineConfig] = None
) -> MonthlySnapshot:
    """
    Capture the active book for `month` and diff it against the previous snapshot.

    Args:
        clients: Client records; only status == "active" are included
        previous_snapshot: Snapshot of the preceding month, or None for the first ever
        month: Month key being captured (YYYY-MM)
        captured_at: Capture timestamp (defaults to now, UTC)
        config: Engine configuration (label for unattributed clients)

    Returns:
        The new MonthlySnapshot

    Raises:
        InvalidInput: bad month key, or previous snapshot is not earlier than `month`
        InconsistentState: duplicate client ids, or the waterfall fails to reconcile
    """
    config = config or EngineConfig()
    validate_month_key(month)
    if previous_snapshot is not None and previous_snapshot.month >= month:
        raise InvalidInput(
            f"Previous snapshot {previous_snapshot.month} must precede captured month {month}"
        )

    active = [normalize_client(c) for c in clients if c.status == "active"]

    total_mrr = ZERO
    total_one_time = ZERO
    mrr_by_partner: Dict[str, Decimal] = {}
    clients_by_partner: Dict[str, int] = {}
    entries: List[ClientSnapshotEntry] = []

    for client in active:
        mrr = round_money(client.mrr)
        total_mrr += mrr
        total_one_time += client.one_time_revenue

        partner = client.sales_partner or config.direct_partner_label
        mrr_by_partner[partner] = mrr_by_partner.get(partner, ZERO) + mrr
        clients_by_partner[partner] = clients_by_partner.get(partner, 0) + 1

        entries.append(ClientSnapshotEntry(
            client_id=client.id,
            name=client.name,
            sales_partner=client.sales_partner,
            status=client.status,
            mrr=mrr,
        ))

    waterfall = compute_waterfall(
        entries,
        previous_snapshot.client_snapshots if previous_snapshot is not None else None,
    )

    previous_total = ZERO
    if previous_snapshot is not None:
        previous_total = sum((e.mrr for e in previous_snapshot.client_snapshots), ZERO)
        if previous_total != previous_snapshot.total_mrr:
            logger.warning(
                f"Snapshot {previous_snapshot.month} total {previous_snapshot.total_mrr} differs from "
                f"its client entries {previous_total}; diffing against the entries"
            )
    if waterfall.net_new_mrr != total_mrr - previous_total:
        logger.error(
            f"Waterfall for {month} does not reconcile: net {waterfall.net_new_mrr} "
            f"vs delta {total_mrr - previous_total}"
        )
        raise InconsistentState(f"Waterfall for {month} does not reconcile with MRR totals")

    snapshot = MonthlySnapshot(
        month=month,
        captured_at=captured_at or datetime.now(timezone.utc),
        total_mrr=total_mrr,
        total_arr=total_mrr * 12,
        client_count=len(active),
        mrr_by_partner=mrr_by_partner,
        clients_by_partner=clients_by_partner,
        total_one_time_revenue=total_one_time,
        new_mrr=waterfall.new_mrr,
        expansion_mrr=waterfall.expansion_mrr,
        contraction_mrr=waterfall.contraction_mrr,
        churned_mrr=waterfall.churned_mrr,
        net_new_mrr=waterfall.net_new_mrr,
        client_snapshots=entries,
    )

    logger.info(
        f"Captured snapshot {month}: {len(active)} clients, MRR {total_mrr}, net new {snapshot.net_new_mrr}"
    )
    return snapshot


# =============================================================================
# History
# =============================================================================

class SnapshotLog:
    """
    Month-keyed snapshot history: at most one snapshot per month.

    Capturing a month that already exists replaces it (upsert); earlier
    months are never modified.
    """

    def __init__(self, snapshots: Optional[List[MonthlySnapshot]] = None):
        self._by_month: Dict[str, MonthlySnapshot] = {}
        for snapshot in snapshots or []:
            self.upsert(snapshot)

    def __len__(self) -> int:
        return len(self._by_month)

    def __contains__(self, month: str) -> bool:
        return month in self._by_month

    def upsert(self, snapshot: MonthlySnapshot) -> MonthlySnapshot:
        if snapshot.month in self._by_month:
            logger.info(f"Replacing existing snapshot for {snapshot.month}")
        self._by_month[snapshot.month] = snapshot
        return snapshot

    def get(self, month: str) -> Optional[MonthlySnapshot]:
        return self._by_month.get(month)

    def previous_for(self, month: str) -> Optional[MonthlySnapshot]:
        """Latest snapshot strictly before `month`."""
        earlier = [m for m in self._by_month if m < month]
        return self._by_month[max(earlier)] if earlier else None

    def history(self) -> List[MonthlySnapshot]:
        return [self._by_month[m] for m in sorted(self._by_month)]

    def capture(
        self,
        clients: List[Client],
        month: str,
        captured_at: Optional[datetime] = None,
        config: Optional[EngineConfig] = None
    ) -> MonthlySnapshot:
        """Capture `month` against the latest earlier snapshot and store it."""
        snapshot = capture_snapshot(
            clients,
            self.previous_for(month),
            month,
            captured_at=captured_at,
            config=config,
        )
        return self.upsert(snapshot)


def snapshot_trend(snapshots: List[MonthlySnapshot]) -> List[TrendPoint]:
    """Month-ordered MRR series with month-over-month growth percentage."""
    points: List[TrendPoint] = []
    previous: Optional[MonthlySnapshot] = None

    for snapshot in sorted(snapshots, key=lambda s: s.month):
        growth = None
        if previous is not None and previous.total_mrr != 0:
            growth = round_money((snapshot.total_mrr - previous.total_mrr) / previous.total_mrr * HUNDRED)
        points.append(TrendPoint(
            month=snapshot.month,
            total_mrr=snapshot.total_mrr,
            net_new_mrr=snapshot.net_new_mrr,
            client_count=snapshot.client_count,
            growth_pct=growth,
        ))
        previous = snapshot

    return points
