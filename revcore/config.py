"""Application configuration."""
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from revcore.data.models import PricingModel


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_ENV: str = "development"
    API_V1_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # Rate limiting
    RATE_LIMIT_DEFAULT: str = "120/minute"
    RATE_LIMIT_STORAGE_URI: Optional[str] = None  # None = in-memory; redis://... to share across workers

    # Revenue engine
    HOME_CURRENCY: str = "AED"
    RECEIVABLE_MONTHS_AHEAD: int = 12
    GOAL_TARGET_CLIENTS: int = 50

    # CORS
    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        if self.APP_ENV == "development":
            return ["*"]  # Allow all origins in development
        return [self.FRONTEND_URL, "http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )


settings = Settings()


# =============================================================================
# Engine configuration (passed explicitly into calculators)
# =============================================================================

class PlanCatalogItem(BaseModel):
    """A sellable plan and its suggested per-seat price (None = priced manually)."""
    id: str
    name: str
    suggested_per_seat: Optional[Decimal] = None
    pricing_model: PricingModel


def _default_plans() -> List[PlanCatalogItem]:
    return [
        PlanCatalogItem(id="pro", name="Pro Plan", suggested_per_seat=Decimal("225"), pricing_model="per_seat"),
        PlanCatalogItem(id="elite", name="Elite Plan", suggested_per_seat=Decimal("249"), pricing_model="per_seat"),
        PlanCatalogItem(id="ultimate", name="Ultimate Plan", suggested_per_seat=Decimal("269"), pricing_model="per_seat"),
        PlanCatalogItem(id="custom", name="Custom", pricing_model="flat_mrr"),
        PlanCatalogItem(id="one_time", name="One-Time Only", pricing_model="one_time_only"),
    ]


class EngineConfig(BaseModel):
    """
    Lookup tables used by the aggregator, scheduler, snapshot engine and
    commission calculator.

    Callers build one (or use `get_engine_config()`) and pass it in; nothing
    in the engine reads a module-level table.
    """
    # Stream types that count toward MRR vs one-time revenue
    recurring_stream_types: List[str] = Field(
        default_factory=lambda: ["subscription", "add_on", "managed_service"]
    )
    one_time_stream_types: List[str] = Field(default_factory=lambda: ["one_time"])

    # Months covered by one period of a revenue stream frequency (0 = not recurring)
    frequency_months: Dict[str, int] = Field(
        default_factory=lambda: {"monthly": 1, "quarterly": 3, "annual": 12, "one_time": 0}
    )

    # Months between invoices for a client billing cycle (0 = not recurring)
    billing_cycle_months: Dict[str, int] = Field(
        default_factory=lambda: {
            "Monthly": 1,
            "Quarterly": 3,
            "Half Yearly": 6,
            "Annual": 12,
            "One Time": 0,
        }
    )
    default_billing_cycle: str = "Monthly"

    direct_partner_label: str = "Direct"
    months_ahead: int = 12
    plans: List[PlanCatalogItem] = Field(default_factory=_default_plans)


def get_engine_config(app_settings: Optional[Settings] = None) -> EngineConfig:
    """Build the engine configuration from application settings."""
    app_settings = app_settings or settings
    return EngineConfig(months_ahead=app_settings.RECEIVABLE_MONTHS_AHEAD)
