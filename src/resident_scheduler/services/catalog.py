"""Read-only snapshots of the scheduling catalog.

A generation run loads shifts, residents and work limits once and works on
these dataclasses only, so nothing is re-queried per date.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from functools import cached_property
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.models.resident import Resident
from resident_scheduler.db.models.shift import Shift
from resident_scheduler.db.models.work_limit import WorkLimit
from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import shift as shift_repo
from resident_scheduler.repositories import work_limit as work_limit_repo

logger = logging.getLogger(__name__)


def parse_clock(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


@dataclass(frozen=True)
class AvailabilityWindow:
    day_of_week: int  # 0-6, Monday first
    start_time: time
    end_time: time


@dataclass(frozen=True)
class AppointmentWindow:
    start: datetime
    end: datetime
    category: Optional[str] = None


@dataclass(frozen=True)
class DeliveryRun:
    name: str
    start_time: time
    end_time: time


@dataclass
class SchedulingResident:
    id: int
    first_name: str
    last_name: str
    admission_date: date
    qualification_ids: frozenset[int] = frozenset()
    availability: list[AvailabilityWindow] = field(default_factory=list)
    appointments: list[AppointmentWindow] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def availability_for(self, day_of_week: int) -> AvailabilityWindow | None:
        for window in self.availability:
            if window.day_of_week == day_of_week:
                return window
        return None


@dataclass(frozen=True)
class SchedulingRole:
    title: str
    required_count: int = 1
    qualification_id: Optional[int] = None


@dataclass
class SchedulingShift:
    id: int
    name: str
    department: str
    start_time: time
    end_time: time
    weekdays: tuple[bool, bool, bool, bool, bool, bool, bool]
    roles: list[SchedulingRole] = field(default_factory=list)
    department_priority: int = 0
    min_tenure_months: int = 0
    blocks_all_appointments: bool = False
    blocks_counseling_only: bool = False
    allows_temporary_leave: bool = False
    is_multi_period: bool = False
    is_delivery_shift: bool = False
    delivery_runs_json: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.department} - {self.name}"

    @property
    def is_team_shift(self) -> bool:
        """Delivery and multi-period shifts are staffed as one all-day unit."""
        return self.is_multi_period or self.is_delivery_shift

    def runs_on(self, day: date) -> bool:
        return self.weekdays[day.weekday()]

    @cached_property
    def delivery_runs(self) -> list[DeliveryRun]:
        if not self.delivery_runs_json:
            return []
        try:
            payload = json.loads(self.delivery_runs_json)
            return [
                DeliveryRun(
                    name=str(item.get("name") or f"run {index + 1}"),
                    start_time=parse_clock(item["start_time"]),
                    end_time=parse_clock(item["end_time"]),
                )
                for index, item in enumerate(payload)
            ]
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning(
                "Ignoring malformed delivery runs for shift %s (%s): %s", self.id, self.label, exc
            )
            return []

    @property
    def commitment_window(self) -> tuple[time, time]:
        """Outer window covering the shift itself and every declared run."""
        starts = [self.start_time, *(run.start_time for run in self.delivery_runs)]
        ends = [self.end_time, *(run.end_time for run in self.delivery_runs)]
        return min(starts), max(ends)


@dataclass(frozen=True)
class WorkLimitRule:
    resident_id: Optional[int]
    limit_type: str
    max_value: int


@dataclass
class ScheduleCatalog:
    shifts: list[SchedulingShift]
    residents: list[SchedulingResident]
    work_limits: list[WorkLimitRule] = field(default_factory=list)


def to_scheduling_shift(shift: Shift) -> SchedulingShift:
    return SchedulingShift(
        id=shift.id,
        name=shift.name,
        department=shift.department.name,
        department_priority=shift.department.priority,
        start_time=parse_clock(shift.start_time),
        end_time=parse_clock(shift.end_time),
        weekdays=shift.weekdays,
        roles=[
            SchedulingRole(
                title=role.role_title,
                required_count=role.required_count,
                qualification_id=role.qualification_id,
            )
            for role in shift.roles
        ],
        min_tenure_months=shift.min_tenure_months,
        blocks_all_appointments=shift.blocks_all_appointments,
        blocks_counseling_only=shift.blocks_counseling_only,
        allows_temporary_leave=shift.allows_temporary_leave,
        is_multi_period=shift.is_multi_period,
        is_delivery_shift=shift.is_delivery_shift,
        delivery_runs_json=shift.delivery_runs,
    )


def to_scheduling_resident(resident: Resident) -> SchedulingResident:
    return SchedulingResident(
        id=resident.id,
        first_name=resident.first_name,
        last_name=resident.last_name,
        admission_date=resident.admission_date,
        qualification_ids=frozenset(
            grant.qualification_id for grant in resident.qualifications if grant.is_active
        ),
        availability=[
            AvailabilityWindow(
                day_of_week=window.day_of_week,
                start_time=parse_clock(window.start_time),
                end_time=parse_clock(window.end_time),
            )
            for window in resident.availability
            if window.is_active
        ],
        appointments=[
            AppointmentWindow(
                start=appointment.start_datetime,
                end=appointment.end_datetime,
                category=appointment.appointment_type.category if appointment.appointment_type else None,
            )
            for appointment in resident.appointments
            if appointment.is_active
        ],
    )


def to_work_limit_rules(limits: Iterable[WorkLimit]) -> list[WorkLimitRule]:
    return [
        WorkLimitRule(resident_id=limit.resident_id, limit_type=limit.limit_type, max_value=limit.max_value)
        for limit in limits
        if limit.is_active
    ]


async def load_schedule_catalog(session: AsyncSession, start_date: date, end_date: date) -> ScheduleCatalog:
    shifts = await shift_repo.list_active_shifts(session)
    residents = await resident_repo.list_residents_for_scheduling(session, start_date, end_date)
    limits = await work_limit_repo.list_work_limits(session)
    return ScheduleCatalog(
        shifts=[to_scheduling_shift(shift) for shift in shifts],
        residents=[to_scheduling_resident(resident) for resident in residents],
        work_limits=to_work_limit_rules(limits),
    )
