"""
Client pricing policy - the single place `Client.mrr` is derived.

Every mutation path (manual edit, CSV import, contract extraction) goes
through `apply_client_update`, so the stored MRR can never go stale against
seat count, seat price or discount.

Pricing modes:
    DerivedPricing  per-seat client with both seat inputs; MRR is computed,
                    a caller-supplied MRR is ignored
    ManualPricing   flat MRR / one-time-only clients; MRR is whatever the
                    user entered
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic.alias_generators import to_camel

from revcore.config import EngineConfig
from revcore.data.models import Client
from revcore.data.money import HUNDRED, ZERO, round_money, to_decimal
from revcore.errors import InvalidInput

logger = logging.getLogger(__name__)

# Fields whose change invalidates the receivable schedule
BILLING_FIELDS = ("mrr", "billing_cycle", "one_time_revenue", "billing_phases")


@dataclass(frozen=True)
class DerivedPricing:
    """MRR = per_seat_cost x seat_count x (1 - discount/100)."""
    per_seat_cost: Decimal
    seat_count: int
    discount: Decimal = ZERO

    @property
    def mode(self) -> str:
        return "derived"


@dataclass(frozen=True)
class ManualPricing:
    """MRR entered directly by the user."""
    mrr: Decimal

    @property
    def mode(self) -> str:
        return "manual"


PricingPolicy = Union[DerivedPricing, ManualPricing]


@dataclass
class ClientUpdateResult:
    """Outcome of applying an edit to a client."""
    client: Client
    billing_changed: bool
    changed_fields: List[str] = field(default_factory=list)
    pricing_mode: str = "manual"


def _validate_pricing_inputs(client: Client) -> None:
    if client.discount is not None and not (ZERO <= client.discount <= HUNDRED):
        raise InvalidInput(f"Discount must be between 0 and 100, got {client.discount}")
    if client.seat_count is not None and client.seat_count < 0:
        raise InvalidInput(f"Seat count cannot be negative, got {client.seat_count}")
    if client.per_seat_cost is not None and client.per_seat_cost < 0:
        raise InvalidInput(f"Per-seat cost cannot be negative, got {client.per_seat_cost}")
    if client.mrr < 0:
        raise InvalidInput(f"MRR cannot be negative, got {client.mrr}")
    if client.one_time_revenue < 0:
        raise InvalidInput(f"One-time revenue cannot be negative, got {client.one_time_revenue}")


def resolve_pricing(client: Client) -> PricingPolicy:
    """Classify a client into its pricing mode."""
    _validate_pricing_inputs(client)
    if (
        client.pricing_model == "per_seat"
        and client.per_seat_cost is not None
        and client.seat_count is not None
    ):
        return DerivedPricing(
            per_seat_cost=to_decimal(client.per_seat_cost),
            seat_count=client.seat_count,
            discount=to_decimal(client.discount),
        )
    return ManualPricing(mrr=to_decimal(client.mrr))


def compute_mrr(policy: PricingPolicy) -> Decimal:
    """Monthly recurring revenue implied by a pricing policy."""
    if isinstance(policy, DerivedPricing):
        if policy.seat_count == 0:
            return ZERO
        gross = policy.per_seat_cost * policy.seat_count
        return round_money(gross * (1 - policy.discount / HUNDRED))
    return policy.mrr


def derive_client_mrr(client: Client) -> Decimal:
    return compute_mrr(resolve_pricing(client))


def normalize_client(client: Client) -> Client:
    """Return a copy of the client with mrr and annual run rate re-derived."""
    mrr = derive_client_mrr(client)
    return client.model_copy(update={"mrr": mrr, "annual_run_rate": mrr * 12})


def apply_client_update(client: Client, changes: Dict[str, Any]) -> ClientUpdateResult:
    """
    Apply a partial update to a client and re-derive its MRR.

    Args:
        client: Current client record
        changes: Field updates, keyed by snake_case or camelCase field name

    Returns:
        ClientUpdateResult with the normalized client and whether a
        billing-relevant field changed (which triggers receivable regeneration)
    """
    field_by_alias = {info.alias or to_camel(name): name for name, info in Client.model_fields.items()}
    normalized = {field_by_alias.get(key, key): value for key, value in changes.items()}
    unknown = sorted(set(normalized) - set(Client.model_fields))
    if unknown:
        raise InvalidInput(f"Unknown client fields: {', '.join(unknown)}")
    if "id" in normalized and normalized["id"] != client.id:
        raise InvalidInput("Client id cannot be changed")

    updated = Client.model_validate({**client.model_dump(), **normalized})

    policy = resolve_pricing(updated)
    if isinstance(policy, DerivedPricing) and "mrr" in normalized:
        logger.info(f"Ignoring supplied MRR for per-seat client {client.id}; MRR is derived")

    updated = normalize_client(updated)

    changed_fields = [
        name for name in Client.model_fields
        if getattr(updated, name) != getattr(client, name)
    ]
    billing_changed = any(name in changed_fields for name in BILLING_FIELDS)

    return ClientUpdateResult(
        client=updated,
        billing_changed=billing_changed,
        changed_fields=changed_fields,
        pricing_mode=policy.mode,
    )


def billing_fields_changed(previous: Client, current: Client) -> bool:
    """True if any field that shapes the receivable schedule differs."""
    return any(getattr(previous, name) != getattr(current, name) for name in BILLING_FIELDS)


def mrr_at_price(client: Client, new_per_seat_price: Any) -> Decimal:
    """
    What-if MRR for a per-seat client at a different seat price.

    Non per-seat clients are unaffected by seat pricing and keep their MRR.
    """
    policy = resolve_pricing(client)
    if not isinstance(policy, DerivedPricing):
        return to_decimal(client.mrr)
    price = to_decimal(new_per_seat_price)
    if price < 0:
        raise InvalidInput(f"Per-seat price cannot be negative, got {price}")
    return compute_mrr(
        DerivedPricing(per_seat_cost=price, seat_count=policy.seat_count, discount=policy.discount)
    )


def suggested_per_seat_price(plan_id: str, config: Optional[EngineConfig] = None) -> Optional[Decimal]:
    """Suggested per-seat price for a catalog plan (None for manually priced plans)."""
    config = config or EngineConfig()
    for plan in config.plans:
        if plan.id == plan_id:
            return plan.suggested_per_seat
    raise InvalidInput(f"Unknown plan: {plan_id}")
