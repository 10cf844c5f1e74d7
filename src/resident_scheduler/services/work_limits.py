"""Effective work-limit resolution.

Lookup order for a (resident, limit type) pair: the resident's own active
limit, then the active global limit (no resident), then the configured
default for that type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resident_scheduler.core.config import get_settings
from resident_scheduler.db.models.work_limit import WorkLimit
from resident_scheduler.repositories import work_limit as work_limit_repo
from resident_scheduler.services.catalog import WorkLimitRule

logger = logging.getLogger(__name__)

WORK_DAY_LIMIT_TYPE = "weekly_days"
LIMIT_TYPES = ("weekly_days", "daily_hours", "monthly_days")


def default_limit(limit_type: str, defaults: Optional[Mapping[str, int]] = None) -> int:
    settings = get_settings()
    defaults = settings.default_work_limits if defaults is None else defaults
    return defaults.get(limit_type, settings.fallback_work_limit)


@dataclass
class WorkLimitResolver:
    """In-memory resolver over the limits loaded for one generation run."""

    rules: list[WorkLimitRule] = field(default_factory=list)
    defaults: Optional[Mapping[str, int]] = None

    def __post_init__(self) -> None:
        self._individual: dict[tuple[int, str], int] = {}
        self._global: dict[str, int] = {}
        for rule in self.rules:
            if rule.resident_id is None:
                self._global.setdefault(rule.limit_type, rule.max_value)
            else:
                self._individual.setdefault((rule.resident_id, rule.limit_type), rule.max_value)

    def effective_limit(self, resident_id: int, limit_type: str = WORK_DAY_LIMIT_TYPE) -> int:
        individual = self._individual.get((resident_id, limit_type))
        if individual is not None:
            return individual
        global_limit = self._global.get(limit_type)
        if global_limit is not None:
            return global_limit
        return default_limit(limit_type, self.defaults)


def split_effective_limits(
    individual: Iterable[WorkLimit], global_limits: Iterable[WorkLimit]
) -> list[WorkLimit]:
    effective = list(individual)
    covered = {limit.limit_type for limit in effective}
    effective.extend(limit for limit in global_limits if limit.limit_type not in covered)
    return effective


async def resolve_effective_limit(session: AsyncSession, resident_id: int, limit_type: str) -> int:
    """Resolve a single limit from storage, never raising on storage errors."""
    try:
        individual = await work_limit_repo.get_active_limit(session, resident_id=resident_id, limit_type=limit_type)
        if individual:
            return individual.max_value
        global_limit = await work_limit_repo.get_active_limit(session, resident_id=None, limit_type=limit_type)
        if global_limit:
            return global_limit.max_value
    except SQLAlchemyError:
        logger.exception("Work limit lookup failed for resident %s (%s)", resident_id, limit_type)
        return get_settings().fallback_work_limit
    return default_limit(limit_type)


async def validate_work_limit(
    session: AsyncSession, resident_id: int, limit_type: str, current_value: int
) -> bool:
    return current_value < await resolve_effective_limit(session, resident_id, limit_type)
