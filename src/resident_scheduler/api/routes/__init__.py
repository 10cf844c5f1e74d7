from fastapi import APIRouter

from . import assignments, catalog, residents, schedule, shifts, system, work_limits

api_router = APIRouter()

api_router.include_router(system.router, prefix="/system", tags=["system"])
api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(residents.router, prefix="/residents", tags=["residents"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
api_router.include_router(schedule.router, prefix="/schedule-periods", tags=["schedule"])
api_router.include_router(assignments.router, prefix="/shift-assignments", tags=["assignments"])
api_router.include_router(work_limits.router, prefix="/work-limits", tags=["work_limits"])
