from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resident_scheduler.db.base import Base

if TYPE_CHECKING:
    from resident_scheduler.db.models.resident import Resident
    from resident_scheduler.db.models.shift import Shift


class SchedulePeriod(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=sa.func.now(), nullable=False)

    assignments: Mapped[list["ShiftAssignment"]] = relationship(
        back_populates="schedule_period", cascade="all, delete-orphan"
    )


class ShiftAssignment(Base):
    # No uniqueness on (shift, date, role): team roles with required_count > 1 produce one row each.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    schedule_period_id: Mapped[int] = mapped_column(
        ForeignKey("scheduleperiod.id", ondelete="CASCADE"), index=True
    )
    shift_id: Mapped[int] = mapped_column(ForeignKey("shift.id", ondelete="CASCADE"))
    resident_id: Mapped[int] = mapped_column(ForeignKey("resident.id", ondelete="CASCADE"), index=True)
    assigned_date: Mapped[date] = mapped_column(Date, index=True)
    role_title: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="scheduled", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    schedule_period: Mapped[SchedulePeriod] = relationship(back_populates="assignments")
    shift: Mapped["Shift"] = relationship()
    resident: Mapped["Resident"] = relationship(back_populates="assignments")


class ScheduleConflict(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resident_id: Mapped[Optional[int]] = mapped_column(ForeignKey("resident.id", ondelete="SET NULL"))
    conflict_date: Mapped[date] = mapped_column(Date, index=True)
    conflict_type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), default="warning", nullable=False)
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=sa.func.now(), nullable=False)
