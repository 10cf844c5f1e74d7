from datetime import date, datetime, time

from resident_scheduler.services.catalog import SchedulingRole, WorkLimitRule
from resident_scheduler.services.scheduler import (
    INCOMPLETE_DELIVERY_TEAM,
    NO_ELIGIBLE_RESIDENTS,
    AssignmentTracker,
    ScheduleEngine,
    TrackingJournal,
    generate_schedule_from_catalog,
    iter_dates,
    select_resident,
)

from .factories import (
    WEEKDAYS_ONLY,
    appointment,
    make_catalog,
    make_delivery_shift,
    make_resident,
    make_shift,
)

MONDAY = date(2026, 3, 2)
SUNDAY = date(2026, 3, 8)
DRIVING = 7


def test_iter_dates_is_inclusive() -> None:
    assert list(iter_dates(MONDAY, MONDAY)) == [MONDAY]
    assert len(list(iter_dates(MONDAY, SUNDAY))) == 7
    assert list(iter_dates(SUNDAY, MONDAY)) == []


def test_select_resident_prefers_fewest_days_and_keeps_input_order() -> None:
    tracker = AssignmentTracker()
    first, second, third = make_resident(1), make_resident(2), make_resident(3)
    tracker.mark(1, MONDAY)

    assert select_resident([first, second, third], tracker) is second
    assert select_resident([third, second], tracker) is third
    assert select_resident([], tracker) is None


def test_journal_rollback_restores_tracking_state() -> None:
    tracker = AssignmentTracker()
    tracker.mark(1, MONDAY)
    journal = TrackingJournal()

    tracker.mark(1, MONDAY, journal)
    tracker.mark(2, MONDAY, journal)
    journal.rollback()

    assert tracker.work_days[1] == {MONDAY}
    assert tracker.daily_usage[MONDAY] == {1}
    assert tracker.days_worked(2) == 0


def test_shifts_only_run_on_flagged_weekdays() -> None:
    catalog = make_catalog([make_shift(1, weekdays=WEEKDAYS_ONLY)], [make_resident(i) for i in range(1, 4)])

    result = generate_schedule_from_catalog(catalog, MONDAY, SUNDAY)

    assert {assignment.assigned_date.weekday() for assignment in result.assignments} == {0, 1, 2, 3, 4}
    assert result.conflicts == []


def test_resident_used_at_most_once_per_date() -> None:
    shifts = [
        make_shift(1, SchedulingRole(title="Cook", required_count=2)),
        make_shift(2, SchedulingRole(title="Cashier"), start_time=time(13, 0), end_time=time(17, 0)),
    ]
    residents = [make_resident(i) for i in range(1, 4)]

    result = generate_schedule_from_catalog(make_catalog(shifts, residents), MONDAY, MONDAY)

    assert len(result.assignments) == 3
    assert len({assignment.resident_id for assignment in result.assignments}) == 3

    result = generate_schedule_from_catalog(make_catalog(shifts, residents[:2]), MONDAY, MONDAY)
    assert len(result.assignments) == 2
    assert [conflict.conflict_type for conflict in result.conflicts] == [NO_ELIGIBLE_RESIDENTS]
    assert "Shift2" in result.conflicts[0].description


def test_load_balancing_alternates_between_residents() -> None:
    catalog = make_catalog([make_shift(1)], [make_resident(1), make_resident(2)])

    result = generate_schedule_from_catalog(catalog, MONDAY, date(2026, 3, 5))

    assert [assignment.resident_id for assignment in result.assignments] == [1, 2, 1, 2]
    assert result.work_distribution == {2: 2}


def test_work_day_limit_caps_distinct_days() -> None:
    catalog = make_catalog([make_shift(1)], [make_resident(1)])

    result = generate_schedule_from_catalog(catalog, MONDAY, SUNDAY)

    assert [assignment.assigned_date for assignment in result.assignments] == [
        MONDAY,
        date(2026, 3, 3),
        date(2026, 3, 4),
    ]
    assert len(result.conflicts) == 4
    assert all(conflict.severity == "warning" for conflict in result.conflicts)
    assert result.work_distribution == {3: 1}


def test_individual_limit_overrides_global_for_that_resident_only() -> None:
    limits = [
        WorkLimitRule(resident_id=None, limit_type="weekly_days", max_value=3),
        WorkLimitRule(resident_id=1, limit_type="weekly_days", max_value=2),
    ]
    shift = make_shift(1, SchedulingRole(title="Crew", required_count=2))
    catalog = make_catalog([shift], [make_resident(1), make_resident(2)], limits)

    result = generate_schedule_from_catalog(catalog, MONDAY, SUNDAY)

    days = {1: set(), 2: set()}
    for assignment in result.assignments:
        days[assignment.resident_id].add(assignment.assigned_date)
    assert len(days[1]) == 2
    assert len(days[2]) == 3
    assert result.work_distribution == {3: 1, 2: 1}


def test_missing_qualification_produces_conflict_with_role_and_date() -> None:
    shift = make_shift(1, SchedulingRole(title="Driver", qualification_id=DRIVING), name="Van")
    catalog = make_catalog([shift], [make_resident(1), make_resident(2)])

    result = generate_schedule_from_catalog(catalog, MONDAY, MONDAY)

    assert result.assignments == []
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.conflict_type == NO_ELIGIBLE_RESIDENTS
    assert conflict.severity == "warning"
    assert "Driver" in conflict.description
    assert "2026-03-02" in conflict.description
    assert "Kitchen - Van" in conflict.description
    assert result.work_distribution == {0: 2}


def test_delivery_team_is_filled_with_distinct_members() -> None:
    shift = make_delivery_shift(
        1,
        SchedulingRole(title="Lead Driver", qualification_id=DRIVING),
        SchedulingRole(title="Assistant", required_count=2),
    )
    residents = [
        make_resident(1),
        make_resident(2, qualification_ids=frozenset({DRIVING})),
        make_resident(3),
    ]

    result = generate_schedule_from_catalog(make_catalog([shift], residents), MONDAY, MONDAY)

    assert [(a.resident_id, a.role_title) for a in result.assignments] == [
        (2, "Lead Driver"),
        (1, "Assistant"),
        (3, "Assistant"),
    ]
    assert result.conflicts == []


def test_incomplete_delivery_team_rolls_back_and_frees_residents() -> None:
    delivery = make_delivery_shift(
        1,
        SchedulingRole(title="Lead Driver", qualification_id=DRIVING),
        SchedulingRole(title="Assistant", required_count=2),
    )
    kitchen = make_shift(2, SchedulingRole(title="Cook", required_count=2), start_time=time(16, 0), end_time=time(19, 0))
    residents = [make_resident(1, qualification_ids=frozenset({DRIVING})), make_resident(2)]

    engine = ScheduleEngine(make_catalog([delivery, kitchen], residents))
    result = engine.run(MONDAY, MONDAY)

    team_rows = [a for a in result.assignments if a.shift_id == 1]
    assert team_rows == []
    incomplete = [c for c in result.conflicts if c.conflict_type == INCOMPLETE_DELIVERY_TEAM]
    assert len(incomplete) == 1
    assert incomplete[0].severity == "high"
    assert "Assistant" in incomplete[0].description
    assert "(slot 2/2)" in incomplete[0].description

    # The rolled back members stay available for the later kitchen shift.
    assert sorted(a.resident_id for a in result.assignments if a.shift_id == 2) == [1, 2]
    assert engine.tracker.daily_usage[MONDAY] == {1, 2}
    assert len(result.conflicts) == 1


def test_delivery_failure_leaves_no_tracking_state() -> None:
    delivery = make_delivery_shift(
        1, SchedulingRole(title="Lead Driver"), SchedulingRole(title="Assistant", required_count=3)
    )
    engine = ScheduleEngine(make_catalog([delivery], [make_resident(1), make_resident(2)]))

    team = engine.form_delivery_team(delivery, MONDAY)

    assert team == []
    assert engine.assignments == []
    assert engine.tracker.daily_usage[MONDAY] == set()
    assert engine.tracker.days_worked(1) == 0
    assert engine.tracker.days_worked(2) == 0


def test_appointment_blocks_delivery_shift_for_the_day() -> None:
    delivery = make_delivery_shift(1, SchedulingRole(title="Driver"))
    busy = make_resident(
        1, appointments=[appointment(datetime(2026, 3, 2, 10, 0), datetime(2026, 3, 2, 11, 0))]
    )

    result = generate_schedule_from_catalog(make_catalog([delivery], [busy, make_resident(2)]), MONDAY, MONDAY)

    assert [a.resident_id for a in result.assignments] == [2]


def test_missing_weekday_availability_counts_as_available() -> None:
    tuesday = date(2026, 3, 3)
    shift = make_shift(1, weekdays=(False, True, False, False, False, False, False))
    resident = make_resident(1, availability=[])

    result = generate_schedule_from_catalog(make_catalog([shift], [resident]), MONDAY, tuesday)

    assert [(a.resident_id, a.assigned_date) for a in result.assignments] == [(1, tuesday)]


def test_generation_is_deterministic() -> None:
    shifts = [
        make_delivery_shift(
            1, SchedulingRole(title="Driver", qualification_id=DRIVING), SchedulingRole(title="Helper")
        ),
        make_shift(2, SchedulingRole(title="Cook", required_count=2)),
        make_shift(3, SchedulingRole(title="Cashier"), weekdays=WEEKDAYS_ONLY),
    ]
    residents = [
        make_resident(i, qualification_ids=frozenset({DRIVING}) if i % 2 else frozenset())
        for i in range(1, 7)
    ]

    first = generate_schedule_from_catalog(make_catalog(shifts, residents), MONDAY, SUNDAY)
    second = generate_schedule_from_catalog(make_catalog(shifts, residents), MONDAY, SUNDAY)

    assert first.assignments == second.assignments
    assert first.conflicts == second.conflicts

    per_day: dict[date, list[int]] = {}
    for assignment in first.assignments:
        per_day.setdefault(assignment.assigned_date, []).append(assignment.resident_id)
    assert all(len(ids) == len(set(ids)) for ids in per_day.values())

    worked: dict[int, set[date]] = {}
    for assignment in first.assignments:
        worked.setdefault(assignment.resident_id, set()).add(assignment.assigned_date)
    assert all(len(days) <= 3 for days in worked.values())
