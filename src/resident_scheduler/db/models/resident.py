from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resident_scheduler.db.base import Base

if TYPE_CHECKING:
    from resident_scheduler.db.models.schedule import ShiftAssignment
    from resident_scheduler.db.models.work_limit import WorkLimit


class Qualification(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(32), nullable=False)  # driving, management, kitchen, ...


class Resident(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(String(80), nullable=False)
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=sa.func.now(), nullable=False)

    qualifications: Mapped[list["ResidentQualification"]] = relationship(
        back_populates="resident", cascade="all, delete-orphan"
    )
    availability: Mapped[list["ResidentAvailability"]] = relationship(
        back_populates="resident", cascade="all, delete-orphan"
    )
    appointments: Mapped[list["Appointment"]] = relationship(
        back_populates="resident", cascade="all, delete-orphan"
    )
    assignments: Mapped[list["ShiftAssignment"]] = relationship(back_populates="resident")
    work_limits: Mapped[list["WorkLimit"]] = relationship(back_populates="resident")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ResidentQualification(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resident_id: Mapped[int] = mapped_column(ForeignKey("resident.id", ondelete="CASCADE"), index=True)
    qualification_id: Mapped[int] = mapped_column(ForeignKey("qualification.id", ondelete="CASCADE"))
    earned_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    resident: Mapped[Resident] = relationship(back_populates="qualifications")
    qualification: Mapped[Qualification] = relationship()


class ResidentAvailability(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resident_id: Mapped[int] = mapped_column(ForeignKey("resident.id", ondelete="CASCADE"), index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = Monday, as date.weekday()
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    resident: Mapped[Resident] = relationship(back_populates="availability")


class AppointmentType(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="general")


class Appointment(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resident_id: Mapped[int] = mapped_column(ForeignKey("resident.id", ondelete="CASCADE"), index=True)
    appointment_type_id: Mapped[Optional[int]] = mapped_column(ForeignKey("appointmenttype.id"))
    title: Mapped[str] = mapped_column(String(120), nullable=False, default="Appointment")
    start_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    resident: Mapped[Resident] = relationship(back_populates="appointments")
    appointment_type: Mapped[Optional[AppointmentType]] = relationship()
