from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.session import get_db_session
from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import schedule as schedule_repo
from resident_scheduler.schemas.schedule import ShiftAssignmentRead, ShiftAssignmentUpdate

router = APIRouter()


@router.put("/{assignment_id}", response_model=ShiftAssignmentRead)
async def update_assignment(
    assignment_id: int,
    payload: ShiftAssignmentUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ShiftAssignmentRead:
    assignment = await schedule_repo.get_assignment(session, assignment_id)
    if not assignment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    if payload.resident_id is not None and not await resident_repo.get_resident(session, payload.resident_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown resident")
    assignment = await schedule_repo.update_assignment(session, assignment, payload)
    await session.commit()
    return ShiftAssignmentRead.model_validate(assignment)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> None:
    assignment = await schedule_repo.get_assignment(session, assignment_id)
    if not assignment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    await schedule_repo.delete_assignment(session, assignment)
    await session.commit()
