from datetime import date, datetime, time, timedelta

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from resident_scheduler.db.models.resident import (
    Appointment,
    Qualification,
    Resident,
    ResidentAvailability,
    ResidentQualification,
)
from resident_scheduler.db.models.shift import ShiftRole
from resident_scheduler.schemas.resident import (
    QualificationCreate,
    QualificationUpdate,
    ResidentCreate,
    ResidentQualificationCreate,
    ResidentUpdate,
)


async def list_residents(session: AsyncSession, *, include_inactive: bool = False) -> list[Resident]:
    query = select(Resident).options(
        selectinload(Resident.qualifications).selectinload(ResidentQualification.qualification),
        selectinload(Resident.availability),
        with_loader_criteria(ResidentQualification, ResidentQualification.is_active.is_(True)),
    )
    if not include_inactive:
        query = query.where(Resident.is_active.is_(True))
    result = await session.execute(
        query.order_by(Resident.last_name, Resident.first_name).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def list_residents_for_scheduling(
    session: AsyncSession, start_date: date, end_date: date
) -> list[Resident]:
    """Active residents with active grants, availability and appointments touching the range."""
    range_start = datetime.combine(start_date, time.min)
    range_end = datetime.combine(end_date + timedelta(days=1), time.min)
    result = await session.execute(
        select(Resident)
        .where(Resident.is_active.is_(True))
        .options(
            selectinload(Resident.qualifications),
            selectinload(Resident.availability),
            selectinload(Resident.appointments).selectinload(Appointment.appointment_type),
            with_loader_criteria(ResidentQualification, ResidentQualification.is_active.is_(True)),
            with_loader_criteria(ResidentAvailability, ResidentAvailability.is_active.is_(True)),
            with_loader_criteria(
                Appointment,
                (Appointment.is_active.is_(True))
                & (Appointment.start_datetime < range_end)
                & (Appointment.end_datetime >= range_start),
            ),
        )
        .order_by(Resident.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create_resident(session: AsyncSession, payload: ResidentCreate) -> Resident:
    data = payload.model_dump(exclude={"availability"})
    resident = Resident(**data)
    resident.availability = [ResidentAvailability(**window.model_dump()) for window in payload.availability]
    session.add(resident)
    await session.flush()
    return await get_resident(session, resident.id)


async def get_resident(session: AsyncSession, resident_id: int) -> Resident | None:
    result = await session.execute(
        select(Resident)
        .where(Resident.id == resident_id)
        .options(
            selectinload(Resident.qualifications).selectinload(ResidentQualification.qualification),
            selectinload(Resident.availability),
            with_loader_criteria(ResidentQualification, ResidentQualification.is_active.is_(True)),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def update_resident(session: AsyncSession, resident: Resident, payload: ResidentUpdate) -> Resident:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(resident, field, value)
    await session.flush()
    return await get_resident(session, resident.id)


async def deactivate_resident(session: AsyncSession, resident: Resident) -> Resident:
    resident.is_active = False
    await session.flush()
    return resident


async def list_qualifications(session: AsyncSession) -> list[Qualification]:
    result = await session.execute(select(Qualification).order_by(Qualification.category, Qualification.name))
    return list(result.scalars().all())


async def create_qualification(session: AsyncSession, payload: QualificationCreate) -> Qualification:
    qualification = Qualification(**payload.model_dump())
    session.add(qualification)
    await session.flush()
    await session.refresh(qualification)
    return qualification


async def get_qualification(session: AsyncSession, qualification_id: int) -> Qualification | None:
    return await session.get(Qualification, qualification_id)


async def update_qualification(
    session: AsyncSession, qualification: Qualification, payload: QualificationUpdate
) -> Qualification:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(qualification, field, value)
    await session.flush()
    await session.refresh(qualification)
    return qualification


async def qualification_in_use(session: AsyncSession, qualification_id: int) -> bool:
    """True when any grant, current or revoked, or any shift role still points at the qualification."""
    granted = exists().where(ResidentQualification.qualification_id == qualification_id)
    required = exists().where(ShiftRole.qualification_id == qualification_id)
    result = await session.execute(select(granted | required))
    return bool(result.scalar())


async def delete_qualification(session: AsyncSession, qualification: Qualification) -> None:
    await session.delete(qualification)
    await session.flush()


async def grant_qualification(
    session: AsyncSession, resident: Resident, payload: ResidentQualificationCreate
) -> ResidentQualification:
    result = await session.execute(
        select(ResidentQualification)
        .where(ResidentQualification.resident_id == resident.id)
        .where(ResidentQualification.qualification_id == payload.qualification_id)
    )
    grant = result.scalars().first()
    if grant:
        grant.is_active = True
        if payload.earned_date:
            grant.earned_date = payload.earned_date
    else:
        grant = ResidentQualification(
            resident_id=resident.id,
            qualification_id=payload.qualification_id,
            earned_date=payload.earned_date or date.today(),
        )
        session.add(grant)
    await session.flush()
    result = await session.execute(
        select(ResidentQualification)
        .where(ResidentQualification.id == grant.id)
        .options(selectinload(ResidentQualification.qualification))
        .execution_options(populate_existing=True)
    )
    return result.scalars().one()


async def revoke_qualification(session: AsyncSession, resident_id: int, qualification_id: int) -> bool:
    result = await session.execute(
        select(ResidentQualification)
        .where(ResidentQualification.resident_id == resident_id)
        .where(ResidentQualification.qualification_id == qualification_id)
        .where(ResidentQualification.is_active.is_(True))
    )
    grant = result.scalars().first()
    if not grant:
        return False
    grant.is_active = False
    await session.flush()
    return True


async def list_resident_qualifications(session: AsyncSession, resident_id: int) -> list[ResidentQualification]:
    result = await session.execute(
        select(ResidentQualification)
        .where(ResidentQualification.resident_id == resident_id)
        .where(ResidentQualification.is_active.is_(True))
        .options(selectinload(ResidentQualification.qualification))
        .order_by(ResidentQualification.earned_date.desc(), ResidentQualification.id)
    )
    return list(result.scalars().all())
