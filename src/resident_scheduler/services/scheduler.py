from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Iterator, Literal, Optional, Sequence

from resident_scheduler.services.catalog import (
    ScheduleCatalog,
    SchedulingResident,
    SchedulingRole,
    SchedulingShift,
)
from resident_scheduler.services.eligibility import explain_eligibility, is_eligible
from resident_scheduler.services.work_limits import WORK_DAY_LIMIT_TYPE, WorkLimitResolver

logger = logging.getLogger(__name__)

NO_ELIGIBLE_RESIDENTS = "no_eligible_residents"
INCOMPLETE_DELIVERY_TEAM = "incomplete_delivery_team"


@dataclass
class ScheduledAssignment:
    shift_id: int
    resident_id: int
    assigned_date: date
    role_title: str
    status: str = "scheduled"


@dataclass
class ScheduleConflictRecord:
    conflict_date: date
    conflict_type: str
    description: str
    severity: Literal["warning", "high"] = "warning"
    resident_id: Optional[int] = None


@dataclass
class ScheduleRunResult:
    assignments: list[ScheduledAssignment]
    conflicts: list[ScheduleConflictRecord] = field(default_factory=list)
    work_distribution: dict[int, int] = field(default_factory=dict)


class TrackingJournal:
    """Undo log for the tracking mutations made by one in-progress team."""

    def __init__(self) -> None:
        self._entries: list[tuple[set, object]] = []

    def record(self, target: set, value: object) -> None:
        self._entries.append((target, value))

    def rollback(self) -> None:
        for target, value in reversed(self._entries):
            target.discard(value)
        self._entries.clear()


@dataclass
class AssignmentTracker:
    """Per-run tracking state read by the eligibility checks."""

    work_days: dict[int, set[date]] = field(default_factory=lambda: defaultdict(set))
    daily_usage: dict[date, set[int]] = field(default_factory=lambda: defaultdict(set))

    def days_worked(self, resident_id: int) -> int:
        return len(self.work_days[resident_id])

    def mark(self, resident_id: int, day: date, journal: TrackingJournal | None = None) -> None:
        days = self.work_days[resident_id]
        if day not in days:
            days.add(day)
            if journal is not None:
                journal.record(days, day)
        used = self.daily_usage[day]
        if resident_id not in used:
            used.add(resident_id)
            if journal is not None:
                journal.record(used, resident_id)


def iter_dates(start_date: date, end_date: date) -> Iterator[date]:
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def select_resident(
    candidates: Sequence[SchedulingResident], tracker: AssignmentTracker
) -> SchedulingResident | None:
    """Pick the candidate with the fewest assigned days; ties keep input order."""
    if not candidates:
        return None
    return sorted(candidates, key=lambda resident: tracker.days_worked(resident.id))[0]


class ScheduleEngine:
    """
    Greedy, single-pass assignment over a date range.

    Slots are filled strictly in iteration order (date, shift, role, slot) and
    each selection is written to the tracker before the next slot is evaluated.
    """

    def __init__(self, catalog: ScheduleCatalog, resolver: WorkLimitResolver | None = None) -> None:
        self.catalog = catalog
        self.resolver = resolver or WorkLimitResolver(catalog.work_limits)
        self.tracker = AssignmentTracker()
        self.assignments: list[ScheduledAssignment] = []
        self.conflicts: list[ScheduleConflictRecord] = []
        self._limits: dict[int, int] = {}

    def work_day_limit(self, resident_id: int) -> int:
        if resident_id not in self._limits:
            self._limits[resident_id] = self.resolver.effective_limit(resident_id, WORK_DAY_LIMIT_TYPE)
        return self._limits[resident_id]

    def run(self, start_date: date, end_date: date) -> ScheduleRunResult:
        for day in iter_dates(start_date, end_date):
            self.schedule_day(day)
        return ScheduleRunResult(
            assignments=list(self.assignments),
            conflicts=list(self.conflicts),
            work_distribution=self.work_distribution(),
        )

    def schedule_day(self, day: date) -> None:
        day_shifts = [shift for shift in self.catalog.shifts if shift.runs_on(day)]
        logger.debug("Processing %s: %d shifts", day.isoformat(), len(day_shifts))
        for shift in day_shifts:
            if shift.is_team_shift:
                self.form_delivery_team(shift, day)
                continue
            for role in shift.roles:
                for slot_index in range(role.required_count):
                    self.assign_role(shift, role, day, slot_index)

    def eligible_residents(
        self,
        shift: SchedulingShift,
        role: SchedulingRole,
        day: date,
        exclude: Iterable[int] = (),
    ) -> list[SchedulingResident]:
        excluded = set(exclude)
        used = self.tracker.daily_usage[day]
        eligible: list[SchedulingResident] = []
        for resident in self.catalog.residents:
            if resident.id in excluded:
                continue
            args = (
                resident,
                shift,
                role,
                day,
                used,
                self.tracker.work_days[resident.id],
                self.work_day_limit(resident.id),
            )
            if is_eligible(*args):
                eligible.append(resident)
            elif logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "%s ineligible for %s/%s on %s: %s",
                    resident.full_name,
                    shift.label,
                    role.title,
                    day.isoformat(),
                    "; ".join(explain_eligibility(*args)),
                )
        return eligible

    def assign_role(
        self, shift: SchedulingShift, role: SchedulingRole, day: date, slot_index: int
    ) -> ScheduledAssignment | None:
        selected = select_resident(self.eligible_residents(shift, role, day), self.tracker)
        if selected is None:
            conflict = ScheduleConflictRecord(
                conflict_date=day,
                conflict_type=NO_ELIGIBLE_RESIDENTS,
                description=(
                    f"No eligible residents for {shift.label} - {role.title} "
                    f"(slot {slot_index + 1}/{role.required_count}) on {day.isoformat()}. "
                    "May be due to work-day limits, qualifications, availability, or appointments."
                ),
                severity="warning",
            )
            self.conflicts.append(conflict)
            logger.info("Conflict: %s", conflict.description)
            return None

        self.tracker.mark(selected.id, day)
        assignment = ScheduledAssignment(
            shift_id=shift.id,
            resident_id=selected.id,
            assigned_date=day,
            role_title=role.title,
        )
        self.assignments.append(assignment)
        logger.debug(
            "Assigned %s to %s/%s on %s", selected.full_name, shift.label, role.title, day.isoformat()
        )
        return assignment

    def form_delivery_team(self, shift: SchedulingShift, day: date) -> list[ScheduledAssignment]:
        """Fill every role of a delivery shift for one date, or none of them."""
        journal = TrackingJournal()
        team: list[ScheduledAssignment] = []
        members: list[int] = []

        for role in shift.roles:
            for slot_index in range(role.required_count):
                candidates = self.eligible_residents(shift, role, day, exclude=members)
                selected = select_resident(candidates, self.tracker)
                if selected is None:
                    journal.rollback()
                    conflict = ScheduleConflictRecord(
                        conflict_date=day,
                        conflict_type=INCOMPLETE_DELIVERY_TEAM,
                        description=(
                            f"Incomplete delivery team for {shift.label} on {day.isoformat()}: "
                            f"no eligible resident for {role.title} "
                            f"(slot {slot_index + 1}/{role.required_count}). "
                            "No team members were assigned."
                        ),
                        severity="high",
                    )
                    self.conflicts.append(conflict)
                    logger.info("Conflict: %s", conflict.description)
                    return []
                self.tracker.mark(selected.id, day, journal)
                members.append(selected.id)
                team.append(
                    ScheduledAssignment(
                        shift_id=shift.id,
                        resident_id=selected.id,
                        assigned_date=day,
                        role_title=role.title,
                    )
                )

        self.assignments.extend(team)
        logger.debug("Formed delivery team for %s on %s: %s", shift.label, day.isoformat(), members)
        return team

    def work_distribution(self) -> dict[int, int]:
        """Number of residents per count of distinct assigned days, zero included."""
        counts = Counter(self.tracker.days_worked(resident.id) for resident in self.catalog.residents)
        return dict(sorted(counts.items(), reverse=True))


def generate_schedule_from_catalog(
    catalog: ScheduleCatalog, start_date: date, end_date: date
) -> ScheduleRunResult:
    return ScheduleEngine(catalog).run(start_date, end_date)
