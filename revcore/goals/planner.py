"""
Goal Distribution Planner - spreads a client-acquisition gap across months.

    gap        = max(0, target - current)
    base       = gap // N
    remainder  = gap - base x N

Every month gets `base` new clients; the LAST `remainder` months get one
extra each. This tail-loading is a product policy, not a mathematical
requirement.

Manual overrides replace a month's cumulative target. After overrides the
series is re-scanned so it is:
    - never above the next override to its right (auto months only),
    - non-decreasing,
    - capped at the target (or the current count, if already past it),
and `monthly_new` is always the delta from the previous month's effective
cumulative value.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from revcore.data.models import RecordModel
from revcore.data.money import Money, ZERO, round_money
from revcore.errors import InvalidInput


class MonthlyTarget(RecordModel):
    month: str
    monthly_new: int
    cumulative_target: int
    is_override: bool = False


class GoalProjection(RecordModel):
    month: str
    monthly_new: int
    cumulative_target: int
    is_override: bool = False
    projected_mrr: Money = Decimal("0")
    projected_total_revenue: Money = Decimal("0")


def _validate(current: int, target: int, months: List[str], overrides: Dict[str, int]) -> None:
    if current < 0:
        raise InvalidInput(f"Current client count cannot be negative, got {current}")
    if target < 0:
        raise InvalidInput(f"Target client count cannot be negative, got {target}")
    if len(set(months)) != len(months):
        raise InvalidInput("Months must be unique")
    unknown = sorted(set(overrides) - set(months))
    if unknown:
        raise InvalidInput(f"Overrides reference months outside the plan: {', '.join(unknown)}")
    for month, value in overrides.items():
        if value < 0:
            raise InvalidInput(f"Override for {month} cannot be negative, got {value}")


def distribute_evenly(gap: int, month_count: int) -> List[int]:
    """Per-month additions: `gap // n` each, +1 on the last `gap % n` months."""
    if month_count == 0:
        return []
    base = gap // month_count
    remainder = gap - base * month_count
    first_extra = month_count - remainder
    return [base + (1 if index >= first_extra else 0) for index in range(month_count)]


def plan_monthly_targets(
    current: int,
    target: int,
    months: List[str],
    overrides: Optional[Dict[str, int]] = None
) -> List[MonthlyTarget]:
    """
    Allocate an acquisition target across months.

    Args:
        current: Clients today
        target: Client count to reach by the last month
        months: Ordered month labels
        overrides: Month -> manually set cumulative target

    Returns:
        One MonthlyTarget per month, in order

    Raises:
        InvalidInput: negative counts, duplicate months, or overrides for unknown months
    """
    overrides = overrides or {}
    _validate(current, target, months, overrides)
    if not months:
        return []

    gap = max(0, target - current)
    ceiling = max(target, current)

    auto: List[int] = []
    running = current
    for added in distribute_evenly(gap, len(months)):
        running += added
        auto.append(running)

    # Backward pass: auto months may not exceed any override to their right
    values: List[int] = [0] * len(months)
    limit: Optional[int] = None
    for index in range(len(months) - 1, -1, -1):
        month = months[index]
        if month in overrides:
            value = overrides[month]
            limit = value if limit is None else min(limit, value)
        else:
            value = auto[index] if limit is None else min(auto[index], limit)
        values[index] = value

    # Forward pass: non-decreasing and capped
    plan: List[MonthlyTarget] = []
    previous = current
    for index, month in enumerate(months):
        cumulative = max(min(values[index], ceiling), previous)
        plan.append(MonthlyTarget(
            month=month,
            monthly_new=cumulative - previous,
            cumulative_target=cumulative,
            is_override=month in overrides,
        ))
        previous = cumulative

    return plan


def project_goal_revenue(
    plan: List[MonthlyTarget],
    avg_mrr_per_client,
    avg_one_time_per_client=ZERO
) -> List[GoalProjection]:
    """Attach projected MRR and total revenue to each month of a plan."""
    avg_mrr = round_money(avg_mrr_per_client)
    avg_one_time = round_money(avg_one_time_per_client)
    projections = []
    for row in plan:
        projected_mrr = avg_mrr * row.cumulative_target
        projections.append(GoalProjection(
            **row.model_dump(),
            projected_mrr=projected_mrr,
            projected_total_revenue=projected_mrr + avg_one_time * row.cumulative_target,
        ))
    return projections
