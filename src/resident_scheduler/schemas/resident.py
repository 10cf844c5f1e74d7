from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class QualificationBase(BaseModel):
    name: str
    description: str | None = None
    category: str = "general"


class QualificationCreate(QualificationBase):
    pass


class QualificationRead(QualificationBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class QualificationUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None


class ResidentQualificationCreate(BaseModel):
    qualification_id: int
    earned_date: date | None = None


class ResidentQualificationRead(BaseModel):
    id: int
    qualification_id: int
    earned_date: date
    is_active: bool
    qualification: QualificationRead | None = None

    model_config = ConfigDict(from_attributes=True)


class AvailabilityWindowBase(BaseModel):
    day_of_week: int = Field(ge=0, le=6)  # 0 = Monday
    start_time: str = Field(pattern=CLOCK_PATTERN)
    end_time: str = Field(pattern=CLOCK_PATTERN)


class AvailabilityWindowCreate(AvailabilityWindowBase):
    pass


class AvailabilityWindowRead(AvailabilityWindowBase):
    id: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ResidentBase(BaseModel):
    first_name: str
    last_name: str
    admission_date: date
    notes: str | None = None


class ResidentCreate(ResidentBase):
    availability: list[AvailabilityWindowCreate] = Field(default_factory=list)


class ResidentRead(ResidentBase):
    id: int
    is_active: bool
    created_at: datetime | None = None
    qualifications: list[ResidentQualificationRead] = Field(default_factory=list)
    availability: list[AvailabilityWindowRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ResidentUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    admission_date: date | None = None
    notes: str | None = None
