"""Shared test fixtures and configuration for revcore tests."""
from datetime import date
from decimal import Decimal

import pytest

from revcore.config import EngineConfig
from revcore.data.models import Client, ReceivableEntry


@pytest.fixture
def engine_config():
    """Default engine configuration with a 12 month horizon."""
    return EngineConfig()


@pytest.fixture
def make_client():
    """Factory for Client records with sensible defaults."""
    def _make(**overrides):
        fields = {
            "id": "c1",
            "name": "Acme",
            "status": "active",
            "pricing_model": "flat_mrr",
            "mrr": Decimal("1125"),
            "billing_cycle": "Monthly",
            "onboarding_date": date(2025, 11, 1),
        }
        fields.update(overrides)
        return Client(**fields)
    return _make


@pytest.fixture
def make_receivable():
    """Factory for ReceivableEntry records."""
    def _make(month, status="pending", amount="1125", client_id="c1", **overrides):
        return ReceivableEntry(
            id=overrides.pop("id", f"rcv-{client_id}-{month}"),
            client_id=client_id,
            month=month,
            amount=Decimal(amount),
            description=overrides.pop("description", "Monthly Subscription"),
            status=status,
            **overrides,
        )
    return _make
