"""
Tests for the Receivable Scheduler.

Covers schedule expansion per billing cycle, one-time entries, billing
phases, regeneration (which must never disturb settled history), the
status lifecycle and the read-side summaries.
"""

import pytest
from datetime import date
from decimal import Decimal

from revcore.data.models import BillingPhase
from revcore.errors import InvalidInput
from revcore.receivables.scheduler import (
    billing_period_months,
    generate_receivables,
    mark_overdue,
    needs_regeneration,
    regenerate_receivables,
    transition_receivable,
)
from revcore.receivables.summary import (
    classify_revenue,
    filter_by_status,
    group_by_client,
    monthly_summary,
    receivable_totals,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def monthly_client(make_client):
    """mrr 1125, billed monthly, onboarded November 2025."""
    return make_client()


@pytest.fixture
def quarterly_client(monthly_client):
    return monthly_client.model_copy(update={"billing_cycle": "Quarterly"})


# =============================================================================
# Generation
# =============================================================================

class TestGenerateReceivables:
    """Tests for forward schedule generation."""

    def test_monthly_schedule(self, monthly_client):
        """One entry per month for the MRR, starting at the onboarding month."""
        entries = generate_receivables(monthly_client)

        assert len(entries) == 12
        assert entries[0].month == "2025-11"
        assert entries[-1].month == "2026-10"
        assert all(e.amount == Decimal("1125") for e in entries)
        assert all(e.status == "pending" for e in entries)
        assert entries[0].id == "rcv-c1-2025-11"
        assert entries[0].description == "Monthly Subscription"

    def test_quarterly_schedule(self, quarterly_client):
        """Quarterly clients get one entry every 3 months for 3 x MRR."""
        entries = generate_receivables(quarterly_client)

        assert [e.month for e in entries] == ["2025-11", "2026-02", "2026-05", "2026-08"]
        assert all(e.amount == Decimal("3375") for e in entries)
        assert entries[0].description == "Quarterly Subscription Fee"
        assert all(e.covers_months == 3 for e in entries)

    def test_annual_schedule(self, monthly_client):
        client = monthly_client.model_copy(update={"billing_cycle": "Annual", "plan": "Pro"})

        entries = generate_receivables(client)

        assert len(entries) == 1
        assert entries[0].amount == Decimal("13500")
        assert entries[0].description == "Annual Subscription (Pro)"

    def test_one_time_revenue_adds_single_entry(self, monthly_client):
        """One-time revenue adds exactly one entry at the anchor month."""
        client = monthly_client.model_copy(update={"one_time_revenue": Decimal("5000")})

        entries = generate_receivables(client)
        one_time = [e for e in entries if e.id.startswith("rcv-c1-ot-")]

        assert len(entries) == 13
        assert len(one_time) == 1
        assert one_time[0].month == "2025-11"
        assert one_time[0].amount == Decimal("5000")
        assert one_time[0].description == "Acme - One-Time Setup"

    def test_one_time_only_client(self, make_client):
        """One-time-only clients get just their one-time payment."""
        client = make_client(pricing_model="one_time_only", mrr=Decimal("0"), one_time_revenue=Decimal("8000"))

        entries = generate_receivables(client)

        assert len(entries) == 1
        assert entries[0].description == "Acme - One-Time Payment"
        assert entries[0].due_date == date(2025, 11, 1)

    def test_anchor_month_overrides_onboarding(self, monthly_client):
        entries = generate_receivables(monthly_client, anchor_month="2026-01", months_ahead=3)

        assert [e.month for e in entries] == ["2026-01", "2026-02", "2026-03"]

    def test_current_month_fallback(self, make_client):
        """Without onboarding date or anchor, the schedule starts this month."""
        client = make_client(onboarding_date=None)

        entries = generate_receivables(client, months_ahead=2, today=date(2026, 3, 15))

        assert [e.month for e in entries] == ["2026-03", "2026-04"]

    def test_due_date_from_billing_terms(self, monthly_client, quarterly_client):
        """Monthly bills are net 30, quarterly net 45, from the first of the month."""
        assert generate_receivables(monthly_client)[0].due_date == date(2025, 12, 1)
        assert generate_receivables(quarterly_client)[0].due_date == date(2025, 12, 16)

    def test_stale_per_seat_mrr_is_rederived(self, make_client):
        """Entries bill seats x price even when the stored mrr is out of date."""
        client = make_client(pricing_model="per_seat", per_seat_cost=Decimal("100"), seat_count=10, mrr=Decimal("5"))

        entries = generate_receivables(client)

        assert entries[0].amount == Decimal("1000.00")
        assert all(e.amount == Decimal("1000") for e in entries)

    def test_inactive_client_yields_nothing(self, make_client):
        assert generate_receivables(make_client(status="inactive")) == []

    def test_no_revenue_yields_nothing(self, make_client):
        assert generate_receivables(make_client(mrr=Decimal("0"))) == []

    def test_unknown_billing_cycle(self, make_client):
        with pytest.raises(InvalidInput):
            generate_receivables(make_client(billing_cycle="Weekly"))

    def test_missing_billing_cycle_defaults_to_monthly(self, make_client):
        entries = generate_receivables(make_client(billing_cycle=None), months_ahead=3)

        assert len(entries) == 3

    def test_negative_horizon(self, monthly_client):
        with pytest.raises(InvalidInput):
            generate_receivables(monthly_client, months_ahead=-1)

    def test_billing_phases(self, make_client):
        """Phases run in order; a zero-duration phase fills the rest of the horizon."""
        client = make_client(
            onboarding_date=date(2025, 1, 1),
            billing_phases=[
                BillingPhase(cycle="Monthly", duration_months=3, amount=Decimal("1000"), note="Pilot"),
                BillingPhase(cycle="Quarterly", duration_months=0, amount=Decimal("3300")),
            ],
        )

        entries = generate_receivables(client)

        assert [e.month for e in entries] == ["2025-01", "2025-02", "2025-03", "2025-04", "2025-07", "2025-10"]
        assert entries[0].id == "rcv-c1-ph0-2025-01"
        assert entries[0].description == "Monthly Subscription - Pilot"
        assert entries[3].id == "rcv-c1-ph1-2025-04"
        assert entries[3].amount == Decimal("3300")

    def test_billing_period_months(self, engine_config):
        assert billing_period_months("Half Yearly", engine_config) == 6
        assert billing_period_months("One Time", engine_config) == 0


# =============================================================================
# Regeneration
# =============================================================================

class TestRegenerateReceivables:
    """Tests for schedule regeneration."""

    def test_monthly_to_quarterly(self, monthly_client, quarterly_client):
        """Switching to quarterly replaces every pending entry with quarterly ones."""
        existing = generate_receivables(monthly_client)

        plan = regenerate_receivables(quarterly_client, existing, previous=monthly_client)

        assert plan.regenerated is True
        assert len(plan.delete) == 12
        assert plan.keep == []
        assert [e.month for e in plan.create] == ["2025-11", "2026-02", "2026-05", "2026-08"]
        assert all(e.amount == Decimal("3375") for e in plan.create)

    def test_paid_entry_survives(self, monthly_client, make_receivable):
        """One paid and two pending: the paid entry is untouched, the pending ones replaced."""
        paid = make_receivable("2025-11", status="paid", paid_date=date(2025, 11, 20))
        pending = [make_receivable("2025-12"), make_receivable("2026-01")]
        updated = monthly_client.model_copy(update={"mrr": Decimal("1200")})

        plan = regenerate_receivables(updated, [paid] + pending, previous=monthly_client)

        assert plan.keep == [paid]
        assert plan.delete == pending
        assert "2025-11" not in [e.month for e in plan.create]
        assert len(plan.create) == 11
        assert all(e.amount == Decimal("1200") for e in plan.create)
        assert plan.receivables[0] == paid

    def test_invoiced_month_not_duplicated(self, monthly_client, make_receivable):
        """No second entry is scheduled for a month already invoiced."""
        invoiced = make_receivable("2025-12", status="invoiced")

        plan = regenerate_receivables(monthly_client, [invoiced], force=True)

        months = [e.month for e in plan.receivables]
        assert months.count("2025-12") == 1
        assert len(months) == 12

    def test_paid_quarter_blocks_the_months_it_bills(self, monthly_client, quarterly_client):
        """A paid quarterly entry covers three months; switching to monthly does not bill them again."""
        schedule = generate_receivables(quarterly_client)
        paid = schedule[0].model_copy(update={"status": "paid", "paid_date": date(2025, 11, 20)})

        plan = regenerate_receivables(monthly_client, [paid] + schedule[1:], previous=quarterly_client)

        months = [e.month for e in plan.create]
        assert plan.keep == [paid]
        assert len(plan.delete) == 3
        assert "2025-12" not in months
        assert "2026-01" not in months
        assert months[0] == "2026-02"
        assert len(months) == 9

    def test_overdue_entries_replaced(self, monthly_client, make_receivable):
        overdue = make_receivable("2025-11", status="overdue")

        plan = regenerate_receivables(monthly_client, [overdue], force=True)

        assert plan.delete == [overdue]
        assert plan.create[0].month == "2025-11"
        assert plan.create[0].status == "pending"

    def test_no_billing_change_is_noop(self, monthly_client, make_receivable):
        """Without a billing change and with existing entries nothing is rebuilt."""
        existing = [make_receivable("2025-11")]
        edited = monthly_client.model_copy(update={"notes": "VIP"})

        plan = regenerate_receivables(edited, existing, previous=monthly_client)

        assert plan.regenerated is False
        assert plan.keep == existing
        assert plan.create == []
        assert plan.delete == []

    def test_zero_receivables_triggers_generation(self, monthly_client):
        plan = regenerate_receivables(monthly_client, [])

        assert plan.regenerated is True
        assert len(plan.create) == 12

    def test_stale_previous_mrr_is_not_a_billing_change(self, make_client, make_receivable):
        """A stored per-seat record with an out-of-date mrr compares by its derived MRR."""
        stored = make_client(pricing_model="per_seat", per_seat_cost=Decimal("100"), seat_count=10, mrr=Decimal("5"))
        current = stored.model_copy(update={"mrr": Decimal("1000")})

        plan = regenerate_receivables(current, [make_receivable("2025-11", amount="1000")], previous=stored)

        assert plan.regenerated is False

    def test_other_clients_ignored(self, monthly_client, make_receivable):
        other = make_receivable("2025-11", status="pending", client_id="c2")

        plan = regenerate_receivables(monthly_client, [other], force=True)

        assert other not in plan.delete
        assert other not in plan.keep

    def test_previous_for_other_client_rejected(self, monthly_client, make_client):
        with pytest.raises(InvalidInput):
            regenerate_receivables(monthly_client, [], previous=make_client(id="c2"))

    def test_needs_regeneration(self, monthly_client, quarterly_client, make_receivable):
        existing = [make_receivable("2025-11")]

        assert needs_regeneration(monthly_client, []) is True
        assert needs_regeneration(quarterly_client, existing, previous=monthly_client) is True
        assert needs_regeneration(monthly_client, existing, previous=monthly_client) is False


# =============================================================================
# Status lifecycle
# =============================================================================

class TestStatusLifecycle:
    """Tests for receivable status transitions."""

    def test_pending_to_invoiced(self, make_receivable):
        entry = transition_receivable(make_receivable("2025-11"), "invoiced")

        assert entry.status == "invoiced"

    def test_paid_sets_paid_date(self, make_receivable):
        entry = transition_receivable(make_receivable("2025-11", status="invoiced"), "paid", date(2025, 12, 3))

        assert entry.status == "paid"
        assert entry.paid_date == date(2025, 12, 3)

    def test_paid_is_final(self, make_receivable):
        with pytest.raises(InvalidInput):
            transition_receivable(make_receivable("2025-11", status="paid"), "pending")

    def test_unknown_status(self, make_receivable):
        with pytest.raises(InvalidInput):
            transition_receivable(make_receivable("2025-11"), "written_off")

    def test_mark_overdue(self, make_receivable):
        """Only pending entries from earlier months become overdue."""
        entries = [
            make_receivable("2025-10"),
            make_receivable("2025-10", status="paid", id="rcv-paid"),
            make_receivable("2025-11"),
        ]

        result = mark_overdue(entries, "2025-11")

        assert [e.status for e in result] == ["overdue", "paid", "pending"]


# =============================================================================
# Summaries
# =============================================================================

class TestReceivableSummaries:
    """Tests for totals, grouping and filtering."""

    @pytest.fixture
    def entries(self, make_receivable):
        return [
            make_receivable("2025-11", status="paid", amount="1000"),
            make_receivable("2025-11", status="invoiced", amount="500", client_id="c2"),
            make_receivable("2025-12", status="pending", amount="1000"),
            make_receivable("2025-12", status="overdue", amount="250", client_id="c2"),
        ]

    def test_totals_by_status(self, entries):
        totals = receivable_totals(entries)

        assert totals.total == Decimal("2750")
        assert totals.paid == Decimal("1000")
        assert totals.invoiced == Decimal("500")
        assert totals.pending == Decimal("1000")
        assert totals.overdue == Decimal("250")

    def test_monthly_summary(self, entries):
        summary = monthly_summary(entries)

        assert [s.month for s in summary] == ["2025-11", "2025-12"]
        assert summary[0].total == Decimal("1500")
        assert summary[0].paid == Decimal("1000")
        assert summary[0].outstanding == Decimal("500")
        assert summary[1].count == 2

    def test_group_by_client(self, entries):
        grouped = group_by_client(entries)

        assert sorted(grouped) == ["c1", "c2"]
        assert len(grouped["c2"]) == 2

    def test_filter_by_status(self, entries):
        assert len(filter_by_status(entries, "all")) == 4
        assert [e.status for e in filter_by_status(entries, "overdue")] == ["overdue"]

        with pytest.raises(InvalidInput):
            filter_by_status(entries, "cancelled")

    def test_classify_revenue(self):
        assert classify_revenue("Monthly Subscription (Pro)") == "mrr"
        assert classify_revenue("Acme - One-Time Setup") == "one_time"
        assert classify_revenue("Quarterly plan incl. onboarding") == "mixed"
