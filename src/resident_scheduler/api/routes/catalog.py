from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.session import get_db_session
from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import shift as shift_repo
from resident_scheduler.schemas.resident import QualificationCreate, QualificationRead, QualificationUpdate
from resident_scheduler.schemas.shift import DepartmentCreate, DepartmentRead, DepartmentUpdate

router = APIRouter()


@router.get("/qualifications", response_model=list[QualificationRead])
async def list_qualifications(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[QualificationRead]:
    qualifications = await resident_repo.list_qualifications(session)
    return [QualificationRead.model_validate(item) for item in qualifications]


@router.post("/qualifications", response_model=QualificationRead, status_code=status.HTTP_201_CREATED)
async def create_qualification(
    payload: QualificationCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> QualificationRead:
    try:
        qualification = await resident_repo.create_qualification(session, payload)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Qualification already exists") from exc
    return QualificationRead.model_validate(qualification)


@router.put("/qualifications/{qualification_id}", response_model=QualificationRead)
async def update_qualification(
    qualification_id: int,
    payload: QualificationUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> QualificationRead:
    qualification = await resident_repo.get_qualification(session, qualification_id)
    if not qualification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Qualification not found")
    try:
        qualification = await resident_repo.update_qualification(session, qualification, payload)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Qualification already exists") from exc
    return QualificationRead.model_validate(qualification)


@router.delete("/qualifications/{qualification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_qualification(
    qualification_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> None:
    qualification = await resident_repo.get_qualification(session, qualification_id)
    if not qualification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Qualification not found")
    if await resident_repo.qualification_in_use(session, qualification_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Qualification is still granted to residents or required by shift roles",
        )
    await resident_repo.delete_qualification(session, qualification)
    await session.commit()


@router.get("/departments", response_model=list[DepartmentRead])
async def list_departments(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[DepartmentRead]:
    departments = await shift_repo.list_departments(session)
    return [DepartmentRead.model_validate(item) for item in departments]


@router.post("/departments", response_model=DepartmentRead, status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: DepartmentCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> DepartmentRead:
    try:
        department = await shift_repo.create_department(session, payload)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department already exists") from exc
    return DepartmentRead.model_validate(department)


@router.put("/departments/{department_id}", response_model=DepartmentRead)
async def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> DepartmentRead:
    department = await shift_repo.get_department(session, department_id)
    if not department:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    try:
        department = await shift_repo.update_department(session, department, payload)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department already exists") from exc
    return DepartmentRead.model_validate(department)


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(
    department_id: int, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> None:
    if not await shift_repo.get_department(session, department_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    if await shift_repo.department_has_shifts(session, department_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department still has shifts")
    await shift_repo.delete_department(session, department_id)
    await session.commit()
