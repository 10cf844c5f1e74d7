from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LimitType = Literal["weekly_days", "daily_hours", "monthly_days"]


class WorkLimitBase(BaseModel):
    resident_id: int | None = None  # None applies to every resident
    limit_type: LimitType = "weekly_days"
    max_value: int = Field(ge=1, le=7)
    reason: str | None = None


class WorkLimitCreate(WorkLimitBase):
    pass


class WorkLimitUpdate(BaseModel):
    limit_type: LimitType | None = None
    max_value: int | None = Field(default=None, ge=1, le=7)
    reason: str | None = None


class WorkLimitRead(WorkLimitBase):
    id: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class EffectiveWorkLimits(BaseModel):
    resident_id: int
    individual_limits: list[WorkLimitRead] = Field(default_factory=list)
    global_limits: list[WorkLimitRead] = Field(default_factory=list)
    effective_limits: list[WorkLimitRead] = Field(default_factory=list)


class WorkLimitStats(BaseModel):
    total_limits: int
    global_limits: int
    individual_limits: int
    limits_by_type: dict[str, int] = Field(default_factory=dict)


class WorkLimitValidationRequest(BaseModel):
    resident_id: int
    limit_type: LimitType = "weekly_days"
    current_value: int = Field(ge=0)


class WorkLimitValidationResponse(BaseModel):
    resident_id: int
    limit_type: str
    current_value: int
    max_value: int
    is_valid: bool
