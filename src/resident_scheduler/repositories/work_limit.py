from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.models.work_limit import WorkLimit
from resident_scheduler.schemas.work_limit import WorkLimitCreate, WorkLimitUpdate


async def list_work_limits(session: AsyncSession) -> list[WorkLimit]:
    result = await session.execute(
        select(WorkLimit)
        .where(WorkLimit.is_active.is_(True))
        # Global limits (NULL resident) first
        .order_by(WorkLimit.resident_id.is_not(None), WorkLimit.resident_id, WorkLimit.limit_type, WorkLimit.id)
    )
    return list(result.scalars().all())


async def list_limits_for_resident(session: AsyncSession, resident_id: int | None) -> list[WorkLimit]:
    query = select(WorkLimit).where(WorkLimit.is_active.is_(True))
    if resident_id is None:
        query = query.where(WorkLimit.resident_id.is_(None))
    else:
        query = query.where(WorkLimit.resident_id == resident_id)
    result = await session.execute(query.order_by(WorkLimit.limit_type))
    return list(result.scalars().all())


async def get_active_limit(
    session: AsyncSession,
    *,
    resident_id: int | None,
    limit_type: str,
    exclude_id: int | None = None,
) -> WorkLimit | None:
    query = select(WorkLimit).where(WorkLimit.limit_type == limit_type).where(WorkLimit.is_active.is_(True))
    if resident_id is None:
        query = query.where(WorkLimit.resident_id.is_(None))
    else:
        query = query.where(WorkLimit.resident_id == resident_id)
    if exclude_id is not None:
        query = query.where(WorkLimit.id != exclude_id)
    result = await session.execute(query.order_by(WorkLimit.id))
    return result.scalars().first()


async def get_work_limit(session: AsyncSession, limit_id: int) -> WorkLimit | None:
    return await session.get(WorkLimit, limit_id)


async def create_work_limit(session: AsyncSession, payload: WorkLimitCreate) -> WorkLimit:
    limit = WorkLimit(**payload.model_dump())
    session.add(limit)
    await session.flush()
    await session.refresh(limit)
    return limit


async def update_work_limit(session: AsyncSession, limit: WorkLimit, payload: WorkLimitUpdate) -> WorkLimit:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(limit, field, value)
    await session.flush()
    await session.refresh(limit)
    return limit


async def deactivate_work_limit(session: AsyncSession, limit: WorkLimit) -> WorkLimit:
    limit.is_active = False
    await session.flush()
    await session.refresh(limit)
    return limit


async def count_limits_by_type(session: AsyncSession) -> dict[str, int]:
    result = await session.execute(
        select(WorkLimit.limit_type, func.count(WorkLimit.id))
        .where(WorkLimit.is_active.is_(True))
        .group_by(WorkLimit.limit_type)
    )
    return {limit_type: count for limit_type, count in result.all()}


async def count_limits(session: AsyncSession, *, scope: str = "all") -> int:
    query = select(func.count(WorkLimit.id)).where(WorkLimit.is_active.is_(True))
    if scope == "global":
        query = query.where(WorkLimit.resident_id.is_(None))
    elif scope == "individual":
        query = query.where(WorkLimit.resident_id.is_not(None))
    result = await session.execute(query)
    return result.scalar_one()
