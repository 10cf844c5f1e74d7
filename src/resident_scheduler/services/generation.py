"""Generation run for one schedule period.

Clears the period's previous output, loads the catalog once, runs the
assignment engine and stores the results. The caller owns the transaction:
nothing is committed here, so a failure leaves the previous schedule intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.db.models.schedule import SchedulePeriod
from resident_scheduler.repositories import schedule as schedule_repo
from resident_scheduler.services.catalog import load_schedule_catalog
from resident_scheduler.services.scheduler import ScheduleEngine

logger = logging.getLogger(__name__)


class ScheduleRequestError(ValueError):
    """Raised for generation requests that are invalid before any work is done."""


class SchedulePeriodNotFoundError(LookupError):
    pass


@dataclass
class GenerationResult:
    period: SchedulePeriod
    assignments_generated: int
    assignments_created: int
    conflicts_found: int
    conflicts_created: int
    work_distribution: dict[int, int] = field(default_factory=dict)


def validate_generation_request(period_id: int, start_date: date, end_date: date) -> None:
    if period_id is None or period_id <= 0:
        raise ScheduleRequestError("A valid schedule period is required")
    if start_date is None or end_date is None:
        raise ScheduleRequestError("Both start_date and end_date are required")
    if end_date < start_date:
        raise ScheduleRequestError(
            f"end_date {end_date.isoformat()} is before start_date {start_date.isoformat()}"
        )


async def generate_schedule(
    session: AsyncSession, period_id: int, start_date: date, end_date: date
) -> GenerationResult:
    validate_generation_request(period_id, start_date, end_date)
    period = await schedule_repo.get_period(session, period_id)
    if period is None:
        raise SchedulePeriodNotFoundError(f"Schedule period {period_id} not found")

    logger.info(
        "Generating schedule for period %s (%s) from %s to %s",
        period.id,
        period.name,
        start_date.isoformat(),
        end_date.isoformat(),
    )
    await schedule_repo.clear_generated_schedule(session, period.id, start_date, end_date)

    catalog = await load_schedule_catalog(session, start_date, end_date)
    logger.info(
        "Loaded %d active shifts, %d active residents, %d work limits",
        len(catalog.shifts),
        len(catalog.residents),
        len(catalog.work_limits),
    )
    result = ScheduleEngine(catalog).run(start_date, end_date)

    assignments_created = await schedule_repo.store_assignments(session, period.id, result.assignments)
    conflicts_created = await schedule_repo.store_conflicts(session, result.conflicts)
    if assignments_created < len(result.assignments):
        logger.warning(
            "Stored %d of %d generated assignments", assignments_created, len(result.assignments)
        )

    logger.info(
        "Schedule generation finished: %d assignments, %d conflicts",
        assignments_created,
        len(result.conflicts),
    )
    for days, residents in result.work_distribution.items():
        logger.info("  %d residents assigned %d days", residents, days)

    reloaded = await schedule_repo.get_period_with_assignments(session, period.id)
    return GenerationResult(
        period=reloaded,
        assignments_generated=len(result.assignments),
        assignments_created=assignments_created,
        conflicts_found=len(result.conflicts),
        conflicts_created=conflicts_created,
        work_distribution=result.work_distribution,
    )
