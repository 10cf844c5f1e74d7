from typing import Annotated

from fastapi import APIRouter, Depends

from resident_scheduler.core.config import Settings, get_settings

router = APIRouter()


@router.get("/settings")
async def read_settings(
    settings: Annotated[Settings, Depends(get_settings)]
) -> dict[str, str]:
    """Expose basic runtime metadata for diagnostics."""
    return {
        "environment": settings.environment,
        "project": settings.project_name,
        "version": settings.version,
        "log_level": settings.log_level,
    }


@router.get("/default-work-limits")
async def read_default_work_limits(
    settings: Annotated[Settings, Depends(get_settings)]
) -> dict[str, int]:
    return dict(settings.default_work_limits)
