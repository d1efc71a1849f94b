# Goals Module
# Client-acquisition target planning

from .planner import MonthlyTarget, GoalProjection, plan_monthly_targets, project_goal_revenue

__all__ = ["MonthlyTarget", "GoalProjection", "plan_monthly_targets", "project_goal_revenue"]
