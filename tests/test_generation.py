from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import schedule as schedule_repo
from resident_scheduler.repositories import shift as shift_repo
from resident_scheduler.repositories import work_limit as work_limit_repo
from resident_scheduler.schemas.work_limit import WorkLimitCreate
from resident_scheduler.services.generation import (
    SchedulePeriodNotFoundError,
    ScheduleRequestError,
    generate_schedule,
)

from .factories import (
    build_department_create,
    build_period_create,
    build_resident_create,
    build_shift_create,
)

MONDAY = date(2026, 3, 2)
SUNDAY = date(2026, 3, 8)


async def _seed(session: AsyncSession) -> int:
    department = await shift_repo.create_department(session, build_department_create())
    await shift_repo.create_shift(session, build_shift_create(department.id))
    for first_name in ("Alex", "Sam"):
        await resident_repo.create_resident(session, build_resident_create(first_name=first_name))
    period = await schedule_repo.create_period(session, build_period_create())
    await session.commit()
    return period.id


@pytest.mark.anyio("asyncio")
async def test_generate_schedule_persists_assignments_and_conflicts(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        period_id = await _seed(session)
        await work_limit_repo.create_work_limit(session, WorkLimitCreate(max_value=2))
        await session.commit()

        result = await generate_schedule(session, period_id, MONDAY, SUNDAY)
        await session.commit()

        # Five weekday slots, two residents capped at two days each.
        assert result.assignments_generated == 4
        assert result.assignments_created == 4
        assert result.conflicts_found == 1
        assert result.conflicts_created == 1
        assert result.work_distribution == {2: 2}
        assert len(result.period.assignments) == 4
        assert {item.shift.department.name for item in result.period.assignments} == {"Kitchen"}

        conflicts = await schedule_repo.list_conflicts(session, MONDAY, SUNDAY)
        assert [conflict.conflict_date for conflict in conflicts] == [date(2026, 3, 6)]


@pytest.mark.anyio("asyncio")
async def test_regenerating_replaces_previous_output(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        period_id = await _seed(session)

        first = await generate_schedule(session, period_id, MONDAY, SUNDAY)
        await session.commit()
        first_rows = [
            (item.shift_id, item.resident_id, item.assigned_date, item.role_title)
            for item in await schedule_repo.list_assignments(session, period_id)
        ]

        second = await generate_schedule(session, period_id, MONDAY, SUNDAY)
        await session.commit()
        second_rows = [
            (item.shift_id, item.resident_id, item.assigned_date, item.role_title)
            for item in await schedule_repo.list_assignments(session, period_id)
        ]

        assert first.assignments_created == second.assignments_created == 5
        assert first_rows == second_rows
        assert len(second_rows) == 5
        assert await schedule_repo.list_conflicts(session, MONDAY, SUNDAY) == []


@pytest.mark.anyio("asyncio")
async def test_invalid_requests_fail_before_any_write(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        period_id = await _seed(session)

        with pytest.raises(ScheduleRequestError):
            await generate_schedule(session, period_id, SUNDAY, MONDAY)
        with pytest.raises(ScheduleRequestError):
            await generate_schedule(session, 0, MONDAY, SUNDAY)
        with pytest.raises(SchedulePeriodNotFoundError):
            await generate_schedule(session, period_id + 100, MONDAY, SUNDAY)
