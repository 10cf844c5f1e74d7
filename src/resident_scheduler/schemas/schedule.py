from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from resident_scheduler.schemas.shift import DepartmentRead


class SchedulePeriodBase(BaseModel):
    name: str
    start_date: date
    end_date: date


class SchedulePeriodCreate(SchedulePeriodBase):
    @model_validator(mode="after")
    def check_range(self) -> "SchedulePeriodCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class SchedulePeriodRead(SchedulePeriodBase):
    id: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AssignedShiftRead(BaseModel):
    id: int
    name: str
    start_time: str
    end_time: str
    department: DepartmentRead | None = None

    model_config = ConfigDict(from_attributes=True)


class AssignedResidentRead(BaseModel):
    id: int
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class ShiftAssignmentRead(BaseModel):
    id: int
    schedule_period_id: int
    shift_id: int
    resident_id: int
    assigned_date: date
    role_title: str
    status: str
    notes: str | None = None
    shift: AssignedShiftRead | None = None
    resident: AssignedResidentRead | None = None

    model_config = ConfigDict(from_attributes=True)


class SchedulePeriodDetail(SchedulePeriodRead):
    assignments: list[ShiftAssignmentRead] = Field(default_factory=list)


class ShiftAssignmentUpdate(BaseModel):
    resident_id: int | None = None
    role_title: str | None = None
    status: str | None = None  # scheduled, confirmed, completed, cancelled
    notes: str | None = None


class ScheduleConflictRead(BaseModel):
    id: int
    resident_id: int | None = None
    conflict_date: date
    conflict_type: str
    description: str
    severity: str
    is_resolved: bool

    model_config = ConfigDict(from_attributes=True)


class ScheduleGenerationRequest(BaseModel):
    schedule_period_id: int
    start_date: date
    end_date: date


class ScheduleGenerationStats(BaseModel):
    assignments_generated: int
    assignments_created: int
    conflicts_found: int
    conflicts_created: int
    work_distribution: dict[int, int] = Field(default_factory=dict)


class ScheduleGenerationResponse(BaseModel):
    stats: ScheduleGenerationStats
    period: SchedulePeriodDetail
