from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.session import get_db_session
from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import work_limit as work_limit_repo
from resident_scheduler.schemas.work_limit import (
    WorkLimitCreate,
    WorkLimitRead,
    WorkLimitStats,
    WorkLimitUpdate,
    WorkLimitValidationRequest,
    WorkLimitValidationResponse,
)
from resident_scheduler.services.work_limits import resolve_effective_limit, validate_work_limit

router = APIRouter()


def _duplicate_detail(resident_id: int | None, limit_type: str) -> str:
    scope = "global" if resident_id is None else f"resident {resident_id}"
    return f"An active {limit_type} limit already exists for {scope}"


@router.get("/", response_model=list[WorkLimitRead])
async def list_work_limits(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[WorkLimitRead]:
    limits = await work_limit_repo.list_work_limits(session)
    return [WorkLimitRead.model_validate(limit) for limit in limits]


@router.get("/stats", response_model=WorkLimitStats)
async def read_work_limit_stats(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> WorkLimitStats:
    return WorkLimitStats(
        total_limits=await work_limit_repo.count_limits(session),
        global_limits=await work_limit_repo.count_limits(session, scope="global"),
        individual_limits=await work_limit_repo.count_limits(session, scope="individual"),
        limits_by_type=await work_limit_repo.count_limits_by_type(session),
    )


@router.post("/", response_model=WorkLimitRead, status_code=status.HTTP_201_CREATED)
async def create_work_limit(
    payload: WorkLimitCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> WorkLimitRead:
    if payload.resident_id is not None and not await resident_repo.get_resident(session, payload.resident_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    existing = await work_limit_repo.get_active_limit(
        session, resident_id=payload.resident_id, limit_type=payload.limit_type
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_duplicate_detail(payload.resident_id, payload.limit_type),
        )
    limit = await work_limit_repo.create_work_limit(session, payload)
    await session.commit()
    return WorkLimitRead.model_validate(limit)


@router.put("/{limit_id}", response_model=WorkLimitRead)
async def update_work_limit(
    limit_id: int,
    payload: WorkLimitUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> WorkLimitRead:
    limit = await work_limit_repo.get_work_limit(session, limit_id)
    if not limit or not limit.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work limit not found")
    if payload.limit_type and payload.limit_type != limit.limit_type:
        duplicate = await work_limit_repo.get_active_limit(
            session, resident_id=limit.resident_id, limit_type=payload.limit_type, exclude_id=limit.id
        )
        if duplicate:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=_duplicate_detail(limit.resident_id, payload.limit_type),
            )
    limit = await work_limit_repo.update_work_limit(session, limit, payload)
    await session.commit()
    return WorkLimitRead.model_validate(limit)


@router.delete("/{limit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work_limit(
    limit_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> None:
    limit = await work_limit_repo.get_work_limit(session, limit_id)
    if not limit or not limit.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work limit not found")
    await work_limit_repo.deactivate_work_limit(session, limit)
    await session.commit()


@router.post("/validate", response_model=WorkLimitValidationResponse)
async def validate_limit(
    payload: WorkLimitValidationRequest, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> WorkLimitValidationResponse:
    """Check whether a resident may take on one more unit of the given limit type."""
    max_value = await resolve_effective_limit(session, payload.resident_id, payload.limit_type)
    is_valid = await validate_work_limit(
        session, payload.resident_id, payload.limit_type, payload.current_value
    )
    return WorkLimitValidationResponse(
        resident_id=payload.resident_id,
        limit_type=payload.limit_type,
        current_value=payload.current_value,
        max_value=max_value,
        is_valid=is_valid,
    )
