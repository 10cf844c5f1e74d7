from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resident_scheduler.db.base import Base

if TYPE_CHECKING:
    from resident_scheduler.db.models.resident import Resident


class WorkLimit(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # NULL resident_id means the limit applies to every resident
    resident_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("resident.id", ondelete="CASCADE"), index=True
    )
    limit_type: Mapped[str] = mapped_column(String(32), nullable=False)  # weekly_days, daily_hours, monthly_days
    max_value: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=sa.func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False
    )

    resident: Mapped[Optional["Resident"]] = relationship(back_populates="work_limits")
