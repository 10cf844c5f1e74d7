from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from resident_scheduler.db.models.shift import Department, Shift, ShiftRole
from resident_scheduler.schemas.shift import DepartmentCreate, DepartmentUpdate, ShiftCreate, ShiftUpdate


async def list_departments(session: AsyncSession) -> list[Department]:
    result = await session.execute(select(Department).order_by(Department.priority.desc(), Department.name))
    return list(result.scalars().all())


async def create_department(session: AsyncSession, payload: DepartmentCreate) -> Department:
    department = Department(**payload.model_dump())
    session.add(department)
    await session.flush()
    await session.refresh(department)
    return department


async def get_department(session: AsyncSession, department_id: int) -> Department | None:
    return await session.get(Department, department_id)


async def update_department(
    session: AsyncSession, department: Department, payload: DepartmentUpdate
) -> Department:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(department, field, value)
    await session.flush()
    await session.refresh(department)
    return department


async def department_has_shifts(session: AsyncSession, department_id: int) -> bool:
    """Inactive shifts count too; their assignments still reference the department."""
    result = await session.execute(select(exists().where(Shift.department_id == department_id)))
    return bool(result.scalar())


async def delete_department(session: AsyncSession, department_id: int) -> None:
    result = await session.execute(
        select(Department)
        .where(Department.id == department_id)
        .options(selectinload(Department.shifts))
        .execution_options(populate_existing=True)
    )
    department = result.scalars().one()
    await session.delete(department)
    await session.flush()


async def list_active_shifts(session: AsyncSession) -> list[Shift]:
    """Active shifts in scheduling order: department priority first, then start time."""
    result = await session.execute(
        select(Shift)
        .join(Shift.department)
        .where(Shift.is_active.is_(True))
        .options(selectinload(Shift.department), selectinload(Shift.roles))
        .order_by(Department.priority.desc(), Shift.start_time.asc(), Shift.id.asc())
    )
    return list(result.scalars().all())


async def create_shift(session: AsyncSession, payload: ShiftCreate) -> Shift:
    shift = Shift(**payload.model_dump(exclude={"roles"}))
    shift.roles = [ShiftRole(**role.model_dump()) for role in payload.roles]
    session.add(shift)
    await session.flush()
    return await get_shift(session, shift.id)


async def get_shift(session: AsyncSession, shift_id: int) -> Shift | None:
    result = await session.execute(
        select(Shift)
        .where(Shift.id == shift_id)
        .options(selectinload(Shift.department), selectinload(Shift.roles))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def deactivate_shift(session: AsyncSession, shift: Shift) -> None:
    shift.is_active = False
    await session.flush()


async def update_shift(session: AsyncSession, shift: Shift, payload: ShiftUpdate) -> Shift:
    """Apply a partial update; the shift must be loaded with its roles."""
    data = payload.model_dump(exclude_unset=True, exclude={"roles"})
    for field, value in data.items():
        setattr(shift, field, value)
    if payload.roles is not None:
        shift.roles = [ShiftRole(**role.model_dump()) for role in payload.roles]
    await session.flush()
    return await get_shift(session, shift.id)
