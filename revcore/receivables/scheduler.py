"""
Receivable schedule generation and regeneration.

A client's billing cycle expands into a forward schedule of ReceivableEntry
rows, one per invoice the client will owe:

    Monthly      one entry per month           amount = mrr
    Quarterly    one entry every 3 months      amount = mrr x 3
    Half Yearly  one entry every 6 months      amount = mrr x 6
    Annual       one entry every 12 months     amount = mrr x 12
    One Time     no recurring entries

One-time revenue adds exactly one extra entry at the anchor month.

Regeneration replaces the unsettled part of the schedule (pending / overdue)
and never touches paid or invoiced entries, nor schedules a second entry in
any month a settled entry bills for (`covers_months` from its own month on).
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Set

from pydantic import Field

from revcore.config import EngineConfig
from revcore.data.models import BillingPhase, Client, ReceivableEntry, RecordModel
from revcore.data.money import round_money
from revcore.data.months import add_months, current_month, month_key, month_start, validate_month_key
from revcore.data.pricing import billing_fields_changed, normalize_client
from revcore.errors import InvalidInput
from revcore.invoices.terms import billing_cycle_to_terms, calculate_due_date

logger = logging.getLogger(__name__)

SETTLED_STATUSES = ("paid", "invoiced")
UNSETTLED_STATUSES = ("pending", "overdue")

# Allowed status moves; paid is final
STATUS_TRANSITIONS: Dict[str, Set[str]] = {
    "pending": {"invoiced", "overdue", "paid"},
    "overdue": {"invoiced", "paid"},
    "invoiced": {"paid", "overdue"},
    "paid": set(),
}

BILLING_LABELS = {
    "Monthly": "Monthly Subscription",
    "Quarterly": "Quarterly Subscription Fee",
    "Half Yearly": "Half Yearly Subscription",
    "Annual": "Annual Subscription",
}


class RegenerationPlan(RecordModel):
    """What the persistence layer must do to bring a client's schedule up to date."""
    client_id: str
    regenerated: bool = False
    keep: List[ReceivableEntry] = Field(default_factory=list)
    delete: List[ReceivableEntry] = Field(default_factory=list)
    create: List[ReceivableEntry] = Field(default_factory=list)

    @property
    def receivables(self) -> List[ReceivableEntry]:
        """The client's schedule after the plan is applied, ordered by month."""
        return sorted(self.keep + self.create, key=lambda r: r.month)


# =============================================================================
# Helpers
# =============================================================================

def billing_period_months(billing_cycle: Optional[str], config: Optional[EngineConfig] = None) -> int:
    """
    Months between invoices for a billing cycle (0 for One Time).

    A missing cycle falls back to the configured default; an unknown one is rejected.
    """
    config = config or EngineConfig()
    cycle = billing_cycle or config.default_billing_cycle
    if cycle not in config.billing_cycle_months:
        raise InvalidInput(f"Unknown billing cycle: {cycle}")
    return config.billing_cycle_months[cycle]


def _billing_label(billing_cycle: Optional[str]) -> str:
    return BILLING_LABELS.get(billing_cycle or "", "Subscription Fee")


def _anchor_month(client: Client, anchor_month: Optional[str], today: Optional[date]) -> str:
    if anchor_month:
        return validate_month_key(anchor_month)
    if client.onboarding_date:
        return month_key(client.onboarding_date)
    return current_month(today)


def _entry(
    entry_id: str,
    client: Client,
    month: str,
    amount,
    description: str,
    billing_cycle: Optional[str],
    covers_months: int = 1
) -> ReceivableEntry:
    terms = billing_cycle_to_terms(billing_cycle)
    return ReceivableEntry(
        id=entry_id,
        client_id=client.id,
        month=month,
        amount=amount,
        description=description,
        status="pending",
        covers_months=covers_months,
        due_date=calculate_due_date(month_start(month), terms),
    )


def _one_time_entry(client: Client, month: str, label: str) -> ReceivableEntry:
    return _entry(
        f"rcv-{client.id}-ot-{month}",
        client,
        month,
        client.one_time_revenue,
        f"{client.name} - {label}",
        "One Time",
    )


def _covered_months(entries: List[ReceivableEntry]) -> Set[str]:
    """Every month billed by the given entries."""
    return {add_months(r.month, offset) for r in entries for offset in range(r.covers_months)}


def _phase_entries(
    client: Client,
    phases: List[BillingPhase],
    start: str,
    months_ahead: int,
    config: EngineConfig
) -> List[ReceivableEntry]:
    """Walk phases in order; a phase with duration 0 fills the rest of the horizon."""
    entries: List[ReceivableEntry] = []
    offset = 0

    for index, phase in enumerate(phases):
        if phase.duration_months < 0:
            raise InvalidInput(f"Billing phase {index + 1} has a negative duration")
        if phase.amount < 0:
            raise InvalidInput(f"Billing phase {index + 1} has a negative amount")

        period = billing_period_months(phase.cycle, config)
        if period == 0:
            month = add_months(start, offset)
            entries.append(_entry(
                f"rcv-{client.id}-ph{index}-{month}",
                client,
                month,
                phase.amount,
                f"{phase.note or 'One-Time Payment'} (Phase {index + 1})",
                phase.cycle,
            ))
            continue

        duration = phase.duration_months if phase.duration_months > 0 else months_ahead - offset
        phase_end = min(offset + duration, months_ahead)
        note = f" - {phase.note}" if phase.note else ""

        for month_offset in range(offset, phase_end, period):
            month = add_months(start, month_offset)
            entries.append(_entry(
                f"rcv-{client.id}-ph{index}-{month}",
                client,
                month,
                phase.amount,
                f"{_billing_label(phase.cycle)}{note}",
                phase.cycle,
                period,
            ))

        offset = phase_end
        if offset >= months_ahead:
            break

    return entries


# =============================================================================
# Generation
# =============================================================================

def generate_receivables(
    client: Client,
    anchor_month: Optional[str] = None,
    months_ahead: Optional[int] = None,
    config: Optional[EngineConfig] = None,
    today: Optional[date] = None
) -> List[ReceivableEntry]:
    """
    Generate the forward receivable schedule implied by a client's billing terms.

    Args:
        client: Client record (must be active with MRR, one-time revenue or phases)
        anchor_month: First month of the schedule; defaults to the onboarding
            month, then the current month
        months_ahead: Horizon in months (defaults to the configured horizon)
        config: Billing cycle table and defaults
        today: Reference date for the current-month fallback

    Returns:
        Pending ReceivableEntry rows ordered by month

    Raises:
        InvalidInput: unknown billing cycle, bad anchor month or negative horizon
    """
    config = config or EngineConfig()
    months_ahead = config.months_ahead if months_ahead is None else months_ahead
    if months_ahead < 0:
        raise InvalidInput(f"months_ahead cannot be negative, got {months_ahead}")

    client = normalize_client(client)
    if client.status != "active":
        logger.warning(f"Skipping receivable generation for inactive client {client.id}")
        return []
    if client.mrr <= 0 and client.one_time_revenue <= 0 and not client.billing_phases:
        return []

    start = _anchor_month(client, anchor_month, today)

    if client.pricing_model == "one_time_only":
        if client.one_time_revenue <= 0:
            return []
        return [_one_time_entry(client, start, "One-Time Payment")]

    entries: List[ReceivableEntry] = []

    if client.billing_phases:
        entries.extend(_phase_entries(client, client.billing_phases, start, months_ahead, config))
    else:
        period = billing_period_months(client.billing_cycle, config)
        if period > 0 and client.mrr > 0:
            amount = round_money(client.mrr * period)
            label = _billing_label(client.billing_cycle)
            plan = f" ({client.plan})" if client.plan else ""
            for offset in range(0, months_ahead, period):
                month = add_months(start, offset)
                entries.append(_entry(
                    f"rcv-{client.id}-{month}",
                    client,
                    month,
                    amount,
                    f"{label}{plan}",
                    client.billing_cycle,
                    period,
                ))

    if client.one_time_revenue > 0:
        entries.append(_one_time_entry(client, start, "One-Time Setup"))

    logger.info(f"Generated {len(entries)} receivables for client {client.id} from {start}")
    return sorted(entries, key=lambda r: r.month)


def needs_regeneration(
    client: Client,
    existing: List[ReceivableEntry],
    previous: Optional[Client] = None
) -> bool:
    """True when billing fields changed or the client has no receivables at all."""
    own = [r for r in existing if r.client_id == client.id]
    if not own:
        return True
    return previous is not None and billing_fields_changed(previous, client)


def regenerate_receivables(
    client: Client,
    existing: List[ReceivableEntry],
    previous: Optional[Client] = None,
    anchor_month: Optional[str] = None,
    months_ahead: Optional[int] = None,
    config: Optional[EngineConfig] = None,
    today: Optional[date] = None,
    force: bool = False
) -> RegenerationPlan:
    """
    Plan the regeneration of a client's receivable schedule.

    Pending and overdue entries are deleted and the schedule is rebuilt from
    the client's current fields. Paid and invoiced entries are kept as-is, and
    no new entry is created in a month one of them already bills for.

    Args:
        client: Client with its current (post-edit) fields
        existing: Existing receivables; entries of other clients are ignored
        previous: Client as it was before the edit, used to detect billing changes
        anchor_month: First month of the rebuilt schedule
        months_ahead: Horizon in months
        config: Engine configuration
        today: Reference date for the current-month fallback
        force: Regenerate even if nothing billing-relevant changed

    Returns:
        RegenerationPlan listing entries to keep, delete and create
    """
    if previous is not None and previous.id != client.id:
        raise InvalidInput(f"Previous record {previous.id} does not belong to client {client.id}")

    client = normalize_client(client)
    if previous is not None:
        previous = normalize_client(previous)

    own = [r for r in existing if r.client_id == client.id]

    if not (force or needs_regeneration(client, existing, previous)):
        return RegenerationPlan(client_id=client.id, regenerated=False, keep=own)

    keep = [r for r in own if r.status in SETTLED_STATUSES]
    delete = [r for r in own if r.status in UNSETTLED_STATUSES]
    settled_months = _covered_months(keep)

    generated = generate_receivables(
        client,
        anchor_month=anchor_month,
        months_ahead=months_ahead,
        config=config,
        today=today,
    )
    create = [r for r in generated if r.month not in settled_months]

    logger.info(
        f"Regenerating receivables for client {client.id}: "
        f"keep {len(keep)}, delete {len(delete)}, create {len(create)}"
    )
    return RegenerationPlan(
        client_id=client.id,
        regenerated=True,
        keep=keep,
        delete=delete,
        create=create,
    )


# =============================================================================
# Status lifecycle
# =============================================================================

def transition_receivable(
    entry: ReceivableEntry,
    new_status: str,
    paid_date: Optional[date] = None
) -> ReceivableEntry:
    """Move a receivable to a new status, rejecting moves the lifecycle forbids."""
    if new_status not in STATUS_TRANSITIONS:
        raise InvalidInput(f"Unknown receivable status: {new_status}")
    if new_status == entry.status:
        return entry
    if new_status not in STATUS_TRANSITIONS[entry.status]:
        raise InvalidInput(f"Cannot move receivable {entry.id} from {entry.status} to {new_status}")

    update = {"status": new_status}
    if new_status == "paid":
        update["paid_date"] = paid_date or date.today()
    return entry.model_copy(update=update)


def mark_overdue(entries: List[ReceivableEntry], as_of_month: str) -> List[ReceivableEntry]:
    """Flag pending entries for months before `as_of_month` as overdue."""
    validate_month_key(as_of_month)
    return [
        transition_receivable(r, "overdue") if r.status == "pending" and r.month < as_of_month else r
        for r in entries
    ]
