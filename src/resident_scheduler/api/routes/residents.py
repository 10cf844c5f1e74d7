from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.session import get_db_session
from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import work_limit as work_limit_repo
from resident_scheduler.schemas.resident import (
    ResidentCreate,
    ResidentQualificationCreate,
    ResidentQualificationRead,
    ResidentRead,
    ResidentUpdate,
)
from resident_scheduler.schemas.work_limit import EffectiveWorkLimits, WorkLimitRead
from resident_scheduler.services.work_limits import split_effective_limits

router = APIRouter()


@router.get("/", response_model=list[ResidentRead])
async def list_residents(
    session: Annotated[AsyncSession, Depends(get_db_session)], include_inactive: bool = False
) -> list[ResidentRead]:
    residents = await resident_repo.list_residents(session, include_inactive=include_inactive)
    return [ResidentRead.model_validate(resident) for resident in residents]


@router.post("/", response_model=ResidentRead, status_code=status.HTTP_201_CREATED)
async def create_resident(
    payload: ResidentCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> ResidentRead:
    resident = await resident_repo.create_resident(session, payload)
    await session.commit()
    return ResidentRead.model_validate(resident)


@router.get("/{resident_id}", response_model=ResidentRead)
async def read_resident(
    resident_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> ResidentRead:
    resident = await resident_repo.get_resident(session, resident_id)
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    return ResidentRead.model_validate(resident)


@router.put("/{resident_id}", response_model=ResidentRead)
async def update_resident(
    resident_id: int,
    payload: ResidentUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ResidentRead:
    resident = await resident_repo.get_resident(session, resident_id)
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    resident = await resident_repo.update_resident(session, resident, payload)
    await session.commit()
    return ResidentRead.model_validate(resident)


@router.delete("/{resident_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_resident(
    resident_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> None:
    resident = await resident_repo.get_resident(session, resident_id)
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    await resident_repo.deactivate_resident(session, resident)
    await session.commit()


@router.get("/{resident_id}/qualifications", response_model=list[ResidentQualificationRead])
async def list_resident_qualifications(
    resident_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[ResidentQualificationRead]:
    if not await resident_repo.get_resident(session, resident_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    grants = await resident_repo.list_resident_qualifications(session, resident_id)
    return [ResidentQualificationRead.model_validate(grant) for grant in grants]


@router.post(
    "/{resident_id}/qualifications",
    response_model=ResidentQualificationRead,
    status_code=status.HTTP_201_CREATED,
)
async def grant_qualification(
    resident_id: int,
    payload: ResidentQualificationCreate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ResidentQualificationRead:
    resident = await resident_repo.get_resident(session, resident_id)
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    if not await resident_repo.get_qualification(session, payload.qualification_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown qualification")
    grant = await resident_repo.grant_qualification(session, resident, payload)
    await session.commit()
    return ResidentQualificationRead.model_validate(grant)


@router.delete("/{resident_id}/qualifications/{qualification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_qualification(
    resident_id: int,
    qualification_id: int,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> None:
    revoked = await resident_repo.revoke_qualification(session, resident_id, qualification_id)
    if not revoked:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Qualification grant not found")
    await session.commit()


@router.get("/{resident_id}/work-limits", response_model=EffectiveWorkLimits)
async def read_effective_work_limits(
    resident_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> EffectiveWorkLimits:
    resident = await resident_repo.get_resident(session, resident_id)
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    individual = await work_limit_repo.list_limits_for_resident(session, resident_id)
    global_limits = await work_limit_repo.list_limits_for_resident(session, None)
    return EffectiveWorkLimits(
        resident_id=resident_id,
        individual_limits=[WorkLimitRead.model_validate(limit) for limit in individual],
        global_limits=[WorkLimitRead.model_validate(limit) for limit in global_limits],
        effective_limits=[
            WorkLimitRead.model_validate(limit) for limit in split_effective_limits(individual, global_limits)
        ],
    )
