from .resident import (
    Appointment,
    AppointmentType,
    Qualification,
    Resident,
    ResidentAvailability,
    ResidentQualification,
)
from .schedule import ScheduleConflict, SchedulePeriod, ShiftAssignment
from .shift import Department, Shift, ShiftRole
from .work_limit import WorkLimit

__all__ = [
    "Appointment",
    "AppointmentType",
    "Qualification",
    "Resident",
    "ResidentAvailability",
    "ResidentQualification",
    "Department",
    "Shift",
    "ShiftRole",
    "SchedulePeriod",
    "ShiftAssignment",
    "ScheduleConflict",
    "WorkLimit",
]
