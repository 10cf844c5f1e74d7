import logging
from dataclasses import asdict
from datetime import date
from typing import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from resident_scheduler.db.models.schedule import ScheduleConflict, SchedulePeriod, ShiftAssignment
from resident_scheduler.db.models.shift import Shift
from resident_scheduler.schemas.schedule import SchedulePeriodCreate, ShiftAssignmentUpdate

logger = logging.getLogger(__name__)


async def list_periods(session: AsyncSession) -> list[SchedulePeriod]:
    result = await session.execute(select(SchedulePeriod).order_by(SchedulePeriod.start_date.desc()))
    return list(result.scalars().all())


async def create_period(session: AsyncSession, payload: SchedulePeriodCreate) -> SchedulePeriod:
    period = SchedulePeriod(**payload.model_dump())
    session.add(period)
    await session.flush()
    await session.refresh(period)
    return period


async def get_period(session: AsyncSession, period_id: int) -> SchedulePeriod | None:
    return await session.get(SchedulePeriod, period_id)


async def get_period_with_assignments(session: AsyncSession, period_id: int) -> SchedulePeriod | None:
    result = await session.execute(
        select(SchedulePeriod)
        .where(SchedulePeriod.id == period_id)
        .options(
            selectinload(SchedulePeriod.assignments).selectinload(ShiftAssignment.shift).selectinload(Shift.department),
            selectinload(SchedulePeriod.assignments).selectinload(ShiftAssignment.resident),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def list_assignments(session: AsyncSession, period_id: int) -> list[ShiftAssignment]:
    result = await session.execute(
        select(ShiftAssignment)
        .join(ShiftAssignment.shift)
        .where(ShiftAssignment.schedule_period_id == period_id)
        .options(
            selectinload(ShiftAssignment.shift).selectinload(Shift.department),
            selectinload(ShiftAssignment.resident),
        )
        .order_by(ShiftAssignment.assigned_date.asc(), Shift.start_time.asc(), ShiftAssignment.id.asc())
    )
    return list(result.scalars().all())


async def get_assignment(session: AsyncSession, assignment_id: int) -> ShiftAssignment | None:
    result = await session.execute(
        select(ShiftAssignment)
        .where(ShiftAssignment.id == assignment_id)
        .options(
            selectinload(ShiftAssignment.shift).selectinload(Shift.department),
            selectinload(ShiftAssignment.resident),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def update_assignment(
    session: AsyncSession, assignment: ShiftAssignment, payload: ShiftAssignmentUpdate
) -> ShiftAssignment:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(assignment, field, value)
    await session.flush()
    return await get_assignment(session, assignment.id)


async def delete_assignment(session: AsyncSession, assignment: ShiftAssignment) -> None:
    await session.delete(assignment)
    await session.flush()


async def list_conflicts(session: AsyncSession, start_date: date, end_date: date) -> list[ScheduleConflict]:
    result = await session.execute(
        select(ScheduleConflict)
        .where(ScheduleConflict.conflict_date >= start_date)
        .where(ScheduleConflict.conflict_date <= end_date)
        .order_by(ScheduleConflict.conflict_date.asc(), ScheduleConflict.id.asc())
    )
    return list(result.scalars().all())


async def clear_generated_schedule(
    session: AsyncSession, period_id: int, start_date: date, end_date: date
) -> None:
    await session.execute(delete(ShiftAssignment).where(ShiftAssignment.schedule_period_id == period_id))
    await session.execute(
        delete(ScheduleConflict)
        .where(ScheduleConflict.conflict_date >= start_date)
        .where(ScheduleConflict.conflict_date <= end_date)
    )


async def store_assignments(session: AsyncSession, period_id: int, assignments: Sequence) -> int:
    """Bulk insert assignments, retrying row by row if the batch fails."""
    rows = [{"schedule_period_id": period_id, **asdict(assignment)} for assignment in assignments]
    if not rows:
        return 0
    try:
        async with session.begin_nested():
            await session.execute(insert(ShiftAssignment), rows)
        return len(rows)
    except SQLAlchemyError:
        logger.exception("Bulk insert of %d assignments failed, retrying individually", len(rows))

    created = 0
    for row in rows:
        try:
            async with session.begin_nested():
                await session.execute(insert(ShiftAssignment), [row])
        except SQLAlchemyError as exc:
            logger.error("Assignment for resident %s on %s failed: %s", row.get("resident_id"), row.get("assigned_date"), exc)
        else:
            created += 1
    return created


async def store_conflicts(session: AsyncSession, conflicts: Sequence) -> int:
    rows = [asdict(conflict) for conflict in conflicts]
    if not rows:
        return 0
    try:
        async with session.begin_nested():
            await session.execute(insert(ScheduleConflict), rows)
    except SQLAlchemyError:
        logger.exception("Storing %d schedule conflicts failed; conflicts were not persisted", len(rows))
        return 0
    return len(rows)
