from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.session import get_db_session
from resident_scheduler.repositories import shift as shift_repo
from resident_scheduler.schemas.shift import ShiftCreate, ShiftRead, ShiftUpdate

router = APIRouter()


@router.get("/", response_model=list[ShiftRead])
async def list_shifts(session: Annotated[AsyncSession, Depends(get_db_session)]) -> list[ShiftRead]:
    shifts = await shift_repo.list_active_shifts(session)
    return [ShiftRead.model_validate(shift) for shift in shifts]


@router.post("/", response_model=ShiftRead, status_code=status.HTTP_201_CREATED)
async def create_shift(
    payload: ShiftCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> ShiftRead:
    if not await shift_repo.get_department(session, payload.department_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown department")
    shift = await shift_repo.create_shift(session, payload)
    await session.commit()
    return ShiftRead.model_validate(shift)


@router.get("/{shift_id}", response_model=ShiftRead)
async def read_shift(shift_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]) -> ShiftRead:
    shift = await shift_repo.get_shift(session, shift_id)
    if not shift:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift not found")
    return ShiftRead.model_validate(shift)


@router.put("/{shift_id}", response_model=ShiftRead)
async def update_shift(
    shift_id: int,
    payload: ShiftUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ShiftRead:
    shift = await shift_repo.get_shift(session, shift_id)
    if not shift:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift not found")
    if payload.department_id is not None and not await shift_repo.get_department(session, payload.department_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown department")
    shift = await shift_repo.update_shift(session, shift, payload)
    await session.commit()
    return ShiftRead.model_validate(shift)


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift(shift_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]) -> None:
    shift = await shift_repo.get_shift(session, shift_id)
    if not shift:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift not found")
    await shift_repo.deactivate_shift(session, shift)
    await session.commit()
