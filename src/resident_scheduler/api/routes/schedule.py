from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.session import get_db_session
from resident_scheduler.repositories import schedule as schedule_repo
from resident_scheduler.schemas.schedule import (
    ScheduleConflictRead,
    ScheduleGenerationRequest,
    ScheduleGenerationResponse,
    ScheduleGenerationStats,
    SchedulePeriodCreate,
    SchedulePeriodDetail,
    SchedulePeriodRead,
    ShiftAssignmentRead,
)
from resident_scheduler.services.generation import (
    SchedulePeriodNotFoundError,
    ScheduleRequestError,
    generate_schedule,
)

router = APIRouter()


@router.get("/", response_model=list[SchedulePeriodRead])
async def list_schedule_periods(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[SchedulePeriodRead]:
    periods = await schedule_repo.list_periods(session)
    return [SchedulePeriodRead.model_validate(period) for period in periods]


@router.post("/", response_model=SchedulePeriodRead, status_code=status.HTTP_201_CREATED)
async def create_schedule_period(
    payload: SchedulePeriodCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> SchedulePeriodRead:
    period = await schedule_repo.create_period(session, payload)
    await session.commit()
    return SchedulePeriodRead.model_validate(period)


@router.post("/generate", response_model=ScheduleGenerationResponse)
async def generate_schedule_for_period(
    payload: ScheduleGenerationRequest, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> ScheduleGenerationResponse:
    try:
        result = await generate_schedule(
            session, payload.schedule_period_id, payload.start_date, payload.end_date
        )
    except ScheduleRequestError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SchedulePeriodNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    await session.commit()
    return ScheduleGenerationResponse(
        stats=ScheduleGenerationStats(
            assignments_generated=result.assignments_generated,
            assignments_created=result.assignments_created,
            conflicts_found=result.conflicts_found,
            conflicts_created=result.conflicts_created,
            work_distribution=result.work_distribution,
        ),
        period=SchedulePeriodDetail.model_validate(result.period),
    )


@router.get("/{period_id}/assignments", response_model=list[ShiftAssignmentRead])
async def list_period_assignments(
    period_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[ShiftAssignmentRead]:
    if not await schedule_repo.get_period(session, period_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule period not found")
    assignments = await schedule_repo.list_assignments(session, period_id)
    return [ShiftAssignmentRead.model_validate(item) for item in assignments]


@router.get("/{period_id}/conflicts", response_model=list[ScheduleConflictRead])
async def list_period_conflicts(
    period_id: int,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
) -> list[ScheduleConflictRead]:
    period = await schedule_repo.get_period(session, period_id)
    if not period:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule period not found")
    conflicts = await schedule_repo.list_conflicts(
        session, start_date or period.start_date, end_date or period.end_date
    )
    return [ScheduleConflictRead.model_validate(item) for item in conflicts]
