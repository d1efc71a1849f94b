"""Goal planning request/response schemas."""
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from revcore.config import settings
from revcore.data.models import MonthKey, RecordModel
from revcore.goals.planner import GoalProjection


class GoalPlanRequest(RecordModel):
    """
    Either an explicit `months` list, or `startMonth` + `monthCount`.
    """
    current: int
    target: int = Field(default_factory=lambda: settings.GOAL_TARGET_CLIENTS)
    months: List[str] = Field(default_factory=list)
    start_month: Optional[MonthKey] = None
    month_count: Optional[int] = None
    overrides: Dict[str, int] = Field(default_factory=dict)
    avg_mrr_per_client: Decimal = Decimal("0")
    avg_one_time_per_client: Decimal = Decimal("0")

    @model_validator(mode="after")
    def check_month_source(self):
        if self.months and self.start_month:
            raise ValueError("Provide either months or startMonth, not both")
        if self.start_month and (self.month_count is None or self.month_count < 0):
            raise ValueError("monthCount must be a non-negative integer when startMonth is given")
        return self


class GoalPlanResponse(RecordModel):
    current: int
    target: int
    total_new: int
    months: List[GoalProjection] = Field(default_factory=list)
