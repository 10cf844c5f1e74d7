"""Initial schema for resident work program scheduling.

Revision ID: 20260914_0001
Revises:
Create Date: 2026-09-14 10:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260914_0001"
down_revision = None
branch_labels = None
depends_on = None

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _flag(name: str, default: bool = False) -> sa.Column:
    return sa.Column(
        name, sa.Boolean(), nullable=False, server_default=sa.text("true" if default else "false")
    )


def upgrade() -> None:
    op.create_table(
        "department",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=64), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )

    op.create_table(
        "qualification",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=32), nullable=False),
    )
    op.create_index("ix_qualification_id", "qualification", ["id"])

    op.create_table(
        "resident",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(length=80), nullable=False),
        sa.Column("last_name", sa.String(length=80), nullable=False),
        sa.Column("admission_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _flag("is_active", default=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_resident_id", "resident", ["id"])

    op.create_table(
        "residentqualification",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "resident_id", sa.Integer(), sa.ForeignKey("resident.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "qualification_id",
            sa.Integer(),
            sa.ForeignKey("qualification.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("earned_date", sa.Date(), nullable=False),
        _flag("is_active", default=True),
    )
    op.create_index("ix_residentqualification_resident_id", "residentqualification", ["resident_id"])

    op.create_table(
        "residentavailability",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "resident_id", sa.Integer(), sa.ForeignKey("resident.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        _flag("is_active", default=True),
    )
    op.create_index("ix_residentavailability_resident_id", "residentavailability", ["resident_id"])

    op.create_table(
        "appointmenttype",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("category", sa.String(length=32), nullable=False, server_default=sa.text("'general'")),
    )

    op.create_table(
        "appointment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "resident_id", sa.Integer(), sa.ForeignKey("resident.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("appointment_type_id", sa.Integer(), sa.ForeignKey("appointmenttype.id"), nullable=True),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("start_datetime", sa.DateTime(), nullable=False),
        sa.Column("end_datetime", sa.DateTime(), nullable=False),
        _flag("is_active", default=True),
    )
    op.create_index("ix_appointment_resident_id", "appointment", ["resident_id"])
    op.create_index("ix_appointment_start_datetime", "appointment", ["start_datetime"])

    op.create_table(
        "shift",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("department.id"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        *(_flag(day) for day in WEEKDAYS),
        sa.Column("min_tenure_months", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _flag("blocks_all_appointments"),
        _flag("blocks_counseling_only"),
        _flag("allows_temporary_leave"),
        _flag("is_multi_period"),
        _flag("is_delivery_shift"),
        sa.Column("delivery_runs", sa.Text(), nullable=True),
        _flag("is_active", default=True),
    )
    op.create_index("ix_shift_id", "shift", ["id"])
    op.create_index("ix_shift_department_id", "shift", ["department_id"])

    op.create_table(
        "shiftrole",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("shift_id", sa.Integer(), sa.ForeignKey("shift.id", ondelete="CASCADE"), nullable=False),
        sa.Column("qualification_id", sa.Integer(), sa.ForeignKey("qualification.id"), nullable=True),
        sa.Column("role_title", sa.String(length=64), nullable=False),
        sa.Column("required_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )
    op.create_index("ix_shiftrole_shift_id", "shiftrole", ["shift_id"])

    op.create_table(
        "scheduleperiod",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    # Team roles with required_count > 1 produce several rows per (shift, date, role).
    op.create_table(
        "shiftassignment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "schedule_period_id",
            sa.Integer(),
            sa.ForeignKey("scheduleperiod.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shift_id", sa.Integer(), sa.ForeignKey("shift.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "resident_id", sa.Integer(), sa.ForeignKey("resident.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("assigned_date", sa.Date(), nullable=False),
        sa.Column("role_title", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_shiftassignment_id", "shiftassignment", ["id"])
    op.create_index("ix_shiftassignment_schedule_period_id", "shiftassignment", ["schedule_period_id"])
    op.create_index("ix_shiftassignment_resident_id", "shiftassignment", ["resident_id"])
    op.create_index("ix_shiftassignment_assigned_date", "shiftassignment", ["assigned_date"])

    op.create_table(
        "scheduleconflict",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("resident_id", sa.Integer(), sa.ForeignKey("resident.id", ondelete="SET NULL"), nullable=True),
        sa.Column("conflict_date", sa.Date(), nullable=False),
        sa.Column("conflict_type", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False, server_default=sa.text("'warning'")),
        _flag("is_resolved"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_scheduleconflict_conflict_date", "scheduleconflict", ["conflict_date"])

    op.create_table(
        "worklimit",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("resident_id", sa.Integer(), sa.ForeignKey("resident.id", ondelete="CASCADE"), nullable=True),
        sa.Column("limit_type", sa.String(length=32), nullable=False),
        sa.Column("max_value", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        _flag("is_active", default=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_worklimit_resident_id", "worklimit", ["resident_id"])


def downgrade() -> None:
    op.drop_index("ix_worklimit_resident_id", table_name="worklimit")
    op.drop_table("worklimit")
    op.drop_index("ix_scheduleconflict_conflict_date", table_name="scheduleconflict")
    op.drop_table("scheduleconflict")
    op.drop_index("ix_shiftassignment_assigned_date", table_name="shiftassignment")
    op.drop_index("ix_shiftassignment_resident_id", table_name="shiftassignment")
    op.drop_index("ix_shiftassignment_schedule_period_id", table_name="shiftassignment")
    op.drop_index("ix_shiftassignment_id", table_name="shiftassignment")
    op.drop_table("shiftassignment")
    op.drop_table("scheduleperiod")
    op.drop_index("ix_shiftrole_shift_id", table_name="shiftrole")
    op.drop_table("shiftrole")
    op.drop_index("ix_shift_department_id", table_name="shift")
    op.drop_index("ix_shift_id", table_name="shift")
    op.drop_table("shift")
    op.drop_index("ix_appointment_start_datetime", table_name="appointment")
    op.drop_index("ix_appointment_resident_id", table_name="appointment")
    op.drop_table("appointment")
    op.drop_table("appointmenttype")
    op.drop_index("ix_residentavailability_resident_id", table_name="residentavailability")
    op.drop_table("residentavailability")
    op.drop_index("ix_residentqualification_resident_id", table_name="residentqualification")
    op.drop_table("residentqualification")
    op.drop_index("ix_resident_id", table_name="resident")
    op.drop_table("resident")
    op.drop_index("ix_qualification_id", table_name="qualification")
    op.drop_table("qualification")
    op.drop_table("department")
