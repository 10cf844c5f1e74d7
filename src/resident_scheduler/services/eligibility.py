"""Decide whether a resident may fill a role on a given shift instance.

``is_eligible`` and ``explain_eligibility`` share one generator of failed
checks; the boolean variant stops at the first failure, the explain variant
collects every reason.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import AbstractSet, Iterator

from resident_scheduler.services.catalog import (
    SchedulingResident,
    SchedulingRole,
    SchedulingShift,
)

AVERAGE_DAYS_PER_MONTH = 30.44


def tenure_months(admission_date: date, on: date) -> float:
    return (on - admission_date).days / AVERAGE_DAYS_PER_MONTH


def _window_contains(resident: SchedulingResident, day: date, start: time, end: time) -> bool:
    # No availability record for the weekday means no constraint.
    window = resident.availability_for(day.weekday())
    if window is None:
        return True
    return start >= window.start_time and end <= window.end_time


def _appointment_dates(resident: SchedulingResident) -> set[date]:
    return {appointment.start.date() for appointment in resident.appointments}


def _standard_shift_failures(
    resident: SchedulingResident, shift: SchedulingShift, day: date
) -> Iterator[str]:
    if not _window_contains(resident, day, shift.start_time, shift.end_time):
        yield (
            f"not available {shift.start_time:%H:%M}-{shift.end_time:%H:%M} "
            f"on weekday {day.weekday()}"
        )
    if day in _appointment_dates(resident):
        yield f"has an appointment on {day.isoformat()}"


def _delivery_shift_failures(
    resident: SchedulingResident, shift: SchedulingShift, day: date
) -> Iterator[str]:
    start, end = shift.commitment_window
    if not _window_contains(resident, day, start, end):
        yield f"not available for the full commitment {start:%H:%M}-{end:%H:%M}"
    if day in _appointment_dates(resident):
        yield f"has an appointment on {day.isoformat()} (delivery shifts block the whole day)"
    for run in shift.delivery_runs:
        run_start = datetime.combine(day, run.start_time)
        run_end = datetime.combine(day, run.end_time)
        for appointment in resident.appointments:
            if run_start < appointment.end and run_end > appointment.start:
                yield f"appointment overlaps run '{run.name}'"
                break


def _failed_checks(
    resident: SchedulingResident,
    shift: SchedulingShift,
    role: SchedulingRole,
    day: date,
    daily_usage: AbstractSet[int],
    work_days: AbstractSet[date],
    work_day_limit: int,
) -> Iterator[str]:
    if resident.id in daily_usage:
        yield f"already assigned on {day.isoformat()}"
    if len(work_days) >= work_day_limit:
        yield f"reached work-day limit ({len(work_days)}/{work_day_limit})"
    if role.qualification_id is not None and role.qualification_id not in resident.qualification_ids:
        yield f"missing qualification {role.qualification_id} for {role.title}"
    if shift.min_tenure_months > 0:
        months = tenure_months(resident.admission_date, day)
        if months < shift.min_tenure_months:
            yield f"tenure {months:.1f} months below required {shift.min_tenure_months}"
    if shift.is_team_shift:
        yield from _delivery_shift_failures(resident, shift, day)
    else:
        yield from _standard_shift_failures(resident, shift, day)


def is_eligible(
    resident: SchedulingResident,
    shift: SchedulingShift,
    role: SchedulingRole,
    day: date,
    daily_usage: AbstractSet[int],
    work_days: AbstractSet[date],
    work_day_limit: int,
) -> bool:
    failures = _failed_checks(resident, shift, role, day, daily_usage, work_days, work_day_limit)
    return next(failures, None) is None


def explain_eligibility(
    resident: SchedulingResident,
    shift: SchedulingShift,
    role: SchedulingRole,
    day: date,
    daily_usage: AbstractSet[int],
    work_days: AbstractSet[date],
    work_day_limit: int,
) -> list[str]:
    """Return every reason the resident cannot take the slot; empty when eligible."""
    return list(_failed_checks(resident, shift, role, day, daily_usage, work_days, work_day_limit))
