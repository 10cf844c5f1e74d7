from pydantic import BaseModel, ConfigDict, Field

from resident_scheduler.schemas.resident import CLOCK_PATTERN


class DepartmentBase(BaseModel):
    name: str
    description: str | None = None
    priority: int = 0


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentRead(DepartmentBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class DepartmentUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    priority: int | None = None


class ShiftRoleBase(BaseModel):
    role_title: str
    qualification_id: int | None = None
    required_count: int = Field(default=1, ge=1)


class ShiftRoleCreate(ShiftRoleBase):
    pass


class ShiftRoleRead(ShiftRoleBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ShiftBase(BaseModel):
    department_id: int
    name: str
    description: str | None = None
    start_time: str = Field(pattern=CLOCK_PATTERN)
    end_time: str = Field(pattern=CLOCK_PATTERN)

    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False
    saturday: bool = False
    sunday: bool = False

    min_tenure_months: int = Field(default=0, ge=0)
    blocks_all_appointments: bool = False
    blocks_counseling_only: bool = False
    allows_temporary_leave: bool = False

    is_multi_period: bool = False
    is_delivery_shift: bool = False
    delivery_runs: str | None = None  # JSON list of {name, start_time, end_time}


class ShiftCreate(ShiftBase):
    roles: list[ShiftRoleCreate] = Field(default_factory=list)


class ShiftRead(ShiftBase):
    id: int
    is_active: bool
    department: DepartmentRead | None = None
    roles: list[ShiftRoleRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ShiftUpdate(BaseModel):
    """Partial update; a given ``roles`` list replaces the whole roster."""

    department_id: int | None = None
    name: str | None = None
    description: str | None = None
    start_time: str | None = Field(default=None, pattern=CLOCK_PATTERN)
    end_time: str | None = Field(default=None, pattern=CLOCK_PATTERN)

    monday: bool | None = None
    tuesday: bool | None = None
    wednesday: bool | None = None
    thursday: bool | None = None
    friday: bool | None = None
    saturday: bool | None = None
    sunday: bool | None = None

    min_tenure_months: int | None = Field(default=None, ge=0)
    blocks_all_appointments: bool | None = None
    blocks_counseling_only: bool | None = None
    allows_temporary_leave: bool | None = None

    is_multi_period: bool | None = None
    is_delivery_shift: bool | None = None
    delivery_runs: str | None = None

    roles: list[ShiftRoleCreate] | None = None
