"""Goal planning API routes."""
from fastapi import APIRouter

from revcore.data.months import month_range
from revcore.goals.planner import plan_monthly_targets, project_goal_revenue
from revcore.goals.schemas import GoalPlanRequest, GoalPlanResponse

router = APIRouter()


@router.post("/plan", response_model=GoalPlanResponse)
async def plan_goal(request: GoalPlanRequest):
    """
    Spread the gap between the current and target client counts across months.

    Returns:
        Per-month new-client and cumulative targets with projected revenue
    """
    months = request.months
    if request.start_month:
        months = month_range(request.start_month, request.month_count)

    plan = plan_monthly_targets(request.current, request.target, months, request.overrides)
    projections = project_goal_revenue(plan, request.avg_mrr_per_client, request.avg_one_time_per_client)

    return GoalPlanResponse(
        current=request.current,
        target=request.target,
        total_new=sum(row.monthly_new for row in plan),
        months=projections,
    )
