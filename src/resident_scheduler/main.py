from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resident_scheduler.api.routes import api_router
from resident_scheduler.core.config import get_settings
from resident_scheduler.core.logging_config import configure_logging


async def health_check() -> dict[str, str]:
    """Simple health endpoint for infrastructure monitoring."""
    return {"status": "ok"}


def create_application() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="API for scheduling residents of a residential work program onto shifts.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api")
    app.add_api_route("/health", health_check, methods=["GET"])
    return app


app = create_application()
