from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resident_scheduler.db.base import Base
from resident_scheduler.db.models.resident import Qualification

WEEKDAY_COLUMNS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class Department(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    shifts: Mapped[list["Shift"]] = relationship(back_populates="department")


class Shift(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    department_id: Mapped[int] = mapped_column(ForeignKey("department.id"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)

    monday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tuesday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    wednesday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    thursday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    friday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    saturday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sunday: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    min_tenure_months: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    blocks_all_appointments: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    blocks_counseling_only: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    allows_temporary_leave: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    is_multi_period: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_delivery_shift: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delivery_runs: Mapped[Optional[str]] = mapped_column(Text)  # JSON list of {name, start_time, end_time}

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    department: Mapped[Department] = relationship(back_populates="shifts")
    roles: Mapped[list["ShiftRole"]] = relationship(
        back_populates="shift", cascade="all, delete-orphan", order_by="ShiftRole.id"
    )

    @property
    def weekdays(self) -> tuple[bool, ...]:
        return tuple(bool(getattr(self, column)) for column in WEEKDAY_COLUMNS)


class ShiftRole(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shift_id: Mapped[int] = mapped_column(ForeignKey("shift.id", ondelete="CASCADE"), index=True)
    qualification_id: Mapped[Optional[int]] = mapped_column(ForeignKey("qualification.id"))
    role_title: Mapped[str] = mapped_column(String(64), nullable=False)
    required_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    shift: Mapped[Shift] = relationship(back_populates="roles")
    qualification: Mapped[Optional[Qualification]] = relationship()
