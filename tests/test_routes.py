"""
Tests for the HTTP surface.

Requests carry entity records in their persisted camelCase shape; responses
carry derived records in the same shape.
"""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from revcore.config import Settings
from revcore.main import app
from revcore.middleware.rate_limit import build_limiter, setup_rate_limiting


# =============================================================================
# Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def api():
    """HTTP client bound to the app without a network."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def client_payload():
    return {
        "id": "c1",
        "name": "Acme",
        "status": "active",
        "pricingModel": "flat_mrr",
        "mrr": 1125,
        "billingCycle": "Monthly",
        "onboardingDate": "2025-11-01",
    }


# =============================================================================
# Meta
# =============================================================================

class TestMetaEndpoints:
    """Tests for root and health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, api):
        response = await api.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_root(self, api):
        response = await api.get("/")

        assert response.json()["message"] == "Revcore API"


# =============================================================================
# Revenue
# =============================================================================

class TestRevenueRoutes:
    """Tests for /api/revenue."""

    @pytest.mark.asyncio
    async def test_customer_mrr(self, api):
        """A quarterly stream of 3000 yields MRR 1000 and ARR 12000."""
        response = await api.post("/api/revenue/mrr", json={
            "customerId": "c1",
            "contracts": [{"id": "k1", "customerId": "c1", "startDate": "2025-01-01", "status": "active"}],
            "revenueStreams": [
                {"id": "s1", "contractId": "k1", "type": "subscription", "amount": 3000, "frequency": "quarterly"},
            ],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["mrr"] == 1000
        assert body["arr"] == 12000
        assert body["oneTimeRevenue"] == 0

    @pytest.mark.asyncio
    async def test_orphan_stream_is_conflict(self, api):
        """A stream pointing at a missing contract is reported as inconsistent state."""
        response = await api.post("/api/revenue/portfolio", json={
            "contracts": [],
            "revenueStreams": [
                {"id": "s1", "contractId": "k-missing", "type": "subscription", "amount": 100, "frequency": "monthly"},
            ],
        })

        assert response.status_code == 409
        assert response.json()["error_type"] == "inconsistent_state"

    @pytest.mark.asyncio
    async def test_first_snapshot(self, api, client_payload):
        response = await api.post("/api/revenue/snapshots", json={
            "month": "2025-11",
            "clients": [client_payload],
        })

        assert response.status_code == 200
        snapshot = response.json()["snapshot"]
        assert snapshot["totalMRR"] == 1125
        assert snapshot["newMRR"] == 1125
        assert snapshot["mrrByPartner"] == {"Direct": 1125}

    @pytest.mark.asyncio
    async def test_snapshot_against_history(self, api, client_payload):
        first = await api.post("/api/revenue/snapshots", json={"month": "2025-11", "clients": [client_payload]})
        grown = {**client_payload, "mrr": 1500}

        response = await api.post("/api/revenue/snapshots", json={
            "month": "2025-12",
            "clients": [grown],
            "history": [first.json()["snapshot"]],
        })

        body = response.json()
        assert body["snapshot"]["expansionMRR"] == 375
        assert body["snapshot"]["netNewMRR"] == 375
        assert [p["month"] for p in body["trend"]] == ["2025-11", "2025-12"]

    @pytest.mark.asyncio
    async def test_pricing_update(self, api, client_payload):
        per_seat = {**client_payload, "pricingModel": "per_seat", "perSeatCost": 225, "seatCount": 5}

        response = await api.post("/api/revenue/pricing", json={
            "client": per_seat,
            "changes": {"seatCount": 6, "mrr": 1},
            "whatIfPerSeatPrice": 249,
        })

        body = response.json()
        assert body["client"]["mrr"] == 1350
        assert body["pricingMode"] == "derived"
        assert body["billingChanged"] is True
        assert body["whatIfMrr"] == 1494

    @pytest.mark.asyncio
    async def test_commissions(self, api, client_payload):
        response = await api.post("/api/revenue/commissions", json={
            "partners": [{"id": "p1", "name": "Nexus", "commissionPercentage": 10}],
            "clients": [{**client_payload, "salesPartner": "Nexus"}],
        })

        body = response.json()
        assert body[0]["monthly"] == 112.5
        assert body[0]["annual"] == 1350
        assert body[0]["attributedMRR"] == 1125


# =============================================================================
# Receivables
# =============================================================================

class TestReceivableRoutes:
    """Tests for /api/receivables."""

    @pytest.mark.asyncio
    async def test_generate(self, api, client_payload):
        response = await api.post("/api/receivables/generate", json={"client": client_payload})

        entries = response.json()
        assert len(entries) == 12
        assert entries[0]["clientId"] == "c1"
        assert entries[0]["month"] == "2025-11"
        assert all(e["amount"] == 1125 for e in entries)

    @pytest.mark.asyncio
    async def test_switch_to_quarterly(self, api, client_payload):
        """Switching the billing cycle deletes pending entries and schedules quarterly ones."""
        generated = await api.post("/api/receivables/generate", json={"client": client_payload})
        quarterly = {**client_payload, "billingCycle": "Quarterly"}

        response = await api.post("/api/receivables/regenerate", json={
            "client": quarterly,
            "previous": client_payload,
            "existing": generated.json(),
        })

        body = response.json()
        assert body["regenerated"] is True
        assert len(body["delete"]) == 12
        assert [e["amount"] for e in body["create"]] == [3375, 3375, 3375, 3375]
        assert [e["month"] for e in body["receivables"]] == ["2025-11", "2026-02", "2026-05", "2026-08"]

    @pytest.mark.asyncio
    async def test_unknown_billing_cycle_is_unprocessable(self, api, client_payload):
        response = await api.post("/api/receivables/generate", json={
            "client": {**client_payload, "billingCycle": "Fortnightly"},
        })

        assert response.status_code == 422
        assert response.json()["error_type"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_summary(self, api, client_payload):
        generated = await api.post("/api/receivables/generate", json={"client": client_payload})

        response = await api.post("/api/receivables/summary", json={"receivables": generated.json()})

        body = response.json()
        assert body["totals"]["total"] == 13500
        assert body["totals"]["pending"] == 13500
        assert len(body["byMonth"]) == 12
        assert body["byClient"]["c1"]["total"] == 13500


# =============================================================================
# Invoices
# =============================================================================

class TestInvoiceRoutes:
    """Tests for /api/invoices."""

    @pytest.mark.asyncio
    async def test_flat_discount_clamp(self, api):
        response = await api.post("/api/invoices/line-items/amount", json={
            "quantity": 1, "rate": 300, "discountType": "flat", "discountValue": 500,
        })

        assert response.json() == {"amount": 0}

    @pytest.mark.asyncio
    async def test_totals(self, api):
        response = await api.post("/api/invoices/totals", json={
            "lineItems": [
                {"quantity": 2, "rate": 150, "discountType": "percent", "discountValue": 10},
                {"quantity": 1, "rate": 300, "discountType": "flat", "discountValue": 500},
            ],
            "amountPaid": 300,
        })

        body = response.json()
        assert body["subtotal"] == 600
        assert body["total"] == 270
        assert body["balanceDue"] == 0
        assert body["rawBalance"] == -30
        assert body["overpaid"] is True

    @pytest.mark.asyncio
    async def test_payment_on_draft_rejected(self, api):
        response = await api.post("/api/invoices/payments", json={
            "invoice": {
                "id": "inv-1",
                "invoiceNumber": "INV-000001",
                "clientId": "c1",
                "status": "draft",
                "invoiceDate": "2025-01-01",
                "dueDate": "2025-01-31",
                "total": 1000,
                "balanceDue": 1000,
            },
            "amount": 100,
        })

        assert response.status_code == 422


# =============================================================================
# Goals
# =============================================================================

class TestGoalRoutes:
    """Tests for /api/goals."""

    @pytest.mark.asyncio
    async def test_plan(self, api):
        response = await api.post("/api/goals/plan", json={
            "current": 10,
            "target": 50,
            "startMonth": "2025-01",
            "monthCount": 9,
            "avgMrrPerClient": 1000,
        })

        body = response.json()
        assert body["totalNew"] == 40
        assert body["months"][-1]["cumulativeTarget"] == 50
        assert body["months"][-1]["projectedMrr"] == 50000
        assert [m["monthlyNew"] for m in body["months"]] == [4, 4, 4, 4, 4, 5, 5, 5, 5]

    @pytest.mark.asyncio
    async def test_override_outside_plan(self, api):
        response = await api.post("/api/goals/plan", json={
            "current": 10,
            "target": 50,
            "months": ["2025-01", "2025-02"],
            "overrides": {"2025-06": 30},
        })

        assert response.status_code == 422


# =============================================================================
# Rate limiting
# =============================================================================

class TestRateLimiting:
    """Tests for the slowapi limiter wiring."""

    @pytest.mark.asyncio
    async def test_over_limit_is_rejected(self):
        """Requests beyond the configured default limit get 429."""
        limited = FastAPI()

        @limited.get("/ping")
        async def ping():
            return {"ok": True}

        setup_rate_limiting(
            limited,
            build_limiter(Settings(RATE_LIMIT_DEFAULT="2/minute", RATE_LIMIT_STORAGE_URI="memory://")),
        )

        async with AsyncClient(transport=ASGITransport(app=limited), base_url="http://test") as client:
            statuses = [(await client.get("/ping")).status_code for _ in range(3)]

        assert statuses == [200, 200, 429]

    def test_storage_defaults_to_memory(self):
        assert Settings().RATE_LIMIT_STORAGE_URI is None
