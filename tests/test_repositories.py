import logging
from datetime import date, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resident_scheduler.db.models.resident import Appointment, AppointmentType, ResidentAvailability
from resident_scheduler.repositories import resident as resident_repo
from resident_scheduler.repositories import schedule as schedule_repo
from resident_scheduler.repositories import shift as shift_repo
from resident_scheduler.schemas.resident import ResidentQualificationCreate
from resident_scheduler.services.catalog import load_schedule_catalog
from resident_scheduler.services.scheduler import ScheduleConflictRecord, ScheduledAssignment

from .factories import (
    build_department_create,
    build_period_create,
    build_qualification_create,
    build_resident_create,
    build_shift_create,
)

MONDAY = date(2026, 3, 2)


@pytest.mark.anyio("asyncio")
async def test_resident_qualification_grant_and_revoke(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        qualification = await resident_repo.create_qualification(session, build_qualification_create())
        resident = await resident_repo.create_resident(
            session,
            build_resident_create(
                availability=[{"day_of_week": 0, "start_time": "08:00", "end_time": "16:00"}]
            ),
        )
        await session.commit()

        grant = await resident_repo.grant_qualification(
            session, resident, ResidentQualificationCreate(qualification_id=qualification.id)
        )
        await session.commit()
        assert grant.is_active
        assert grant.qualification.name == "Class B License"

        assert await resident_repo.revoke_qualification(session, resident.id, qualification.id)
        assert not await resident_repo.revoke_qualification(session, resident.id, qualification.id)
        await session.commit()

        regranted = await resident_repo.grant_qualification(
            session, resident, ResidentQualificationCreate(qualification_id=qualification.id)
        )
        await session.commit()
        assert regranted.id == grant.id
        assert regranted.is_active

        loaded = await resident_repo.get_resident(session, resident.id)
        assert loaded.full_name == "Alex Rivera"
        assert [window.start_time for window in loaded.availability] == ["08:00"]


@pytest.mark.anyio("asyncio")
async def test_deactivated_records_are_hidden(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        department = await shift_repo.create_department(session, build_department_create())
        shift = await shift_repo.create_shift(session, build_shift_create(department.id))
        resident = await resident_repo.create_resident(session, build_resident_create())
        await session.commit()

        await shift_repo.deactivate_shift(session, shift)
        await resident_repo.deactivate_resident(session, resident)
        await session.commit()

        assert await shift_repo.list_active_shifts(session) == []
        assert await resident_repo.list_residents(session) == []
        assert len(await resident_repo.list_residents(session, include_inactive=True)) == 1


@pytest.mark.anyio("asyncio")
async def test_catalog_loads_active_snapshots_in_priority_order(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        kitchen = await shift_repo.create_department(session, build_department_create(priority=1))
        transport = await shift_repo.create_department(
            session, build_department_create(name="Transport", priority=5)
        )
        await shift_repo.create_shift(session, build_shift_create(kitchen.id, name="Early", start_time="05:00"))
        await shift_repo.create_shift(
            session, build_shift_create(transport.id, name="Late Pickup", start_time="09:00", end_time="12:00")
        )
        await shift_repo.create_shift(
            session, build_shift_create(transport.id, name="Pickup", start_time="07:00", end_time="09:00")
        )
        qualification = await resident_repo.create_qualification(session, build_qualification_create())
        resident = await resident_repo.create_resident(session, build_resident_create())
        inactive = await resident_repo.create_resident(session, build_resident_create(first_name="Gone"))
        await resident_repo.deactivate_resident(session, inactive)
        await resident_repo.grant_qualification(
            session, resident, ResidentQualificationCreate(qualification_id=qualification.id)
        )
        counseling = AppointmentType(name="Counseling", category="counseling")
        session.add_all(
            [
                counseling,
                ResidentAvailability(resident_id=resident.id, day_of_week=0, start_time="06:00", end_time="14:00"),
                ResidentAvailability(
                    resident_id=resident.id, day_of_week=1, start_time="06:00", end_time="14:00", is_active=False
                ),
                Appointment(
                    resident_id=resident.id,
                    appointment_type=counseling,
                    title="Session",
                    start_datetime=datetime(2026, 3, 3, 10, 0),
                    end_datetime=datetime(2026, 3, 3, 11, 0),
                ),
                Appointment(
                    resident_id=resident.id,
                    title="Outside range",
                    start_datetime=datetime(2026, 4, 1, 10, 0),
                    end_datetime=datetime(2026, 4, 1, 11, 0),
                ),
            ]
        )
        await session.commit()

        catalog = await load_schedule_catalog(session, MONDAY, date(2026, 3, 8))

    assert [shift.name for shift in catalog.shifts] == ["Pickup", "Late Pickup", "Early"]
    assert catalog.shifts[0].label == "Transport - Pickup"
    assert catalog.shifts[0].weekdays == (True, True, True, True, True, False, False)
    assert catalog.shifts[0].roles[0].title == "Cook"

    assert [snapshot.id for snapshot in catalog.residents] == [resident.id]
    snapshot = catalog.residents[0]
    assert snapshot.qualification_ids == frozenset({qualification.id})
    assert [window.day_of_week for window in snapshot.availability] == [0]
    assert [item.category for item in snapshot.appointments] == ["counseling"]


@pytest.mark.anyio("asyncio")
async def test_assignment_bulk_insert_falls_back_to_single_rows(
    session_factory: async_sessionmaker[AsyncSession], caplog: pytest.LogCaptureFixture
) -> None:
    async with session_factory() as session:
        department = await shift_repo.create_department(session, build_department_create())
        shift = await shift_repo.create_shift(session, build_shift_create(department.id))
        resident = await resident_repo.create_resident(session, build_resident_create())
        period = await schedule_repo.create_period(session, build_period_create())
        await session.commit()

        await schedule_repo.clear_generated_schedule(session, period.id, MONDAY, date(2026, 3, 8))
        rows = [
            ScheduledAssignment(shift_id=shift.id, resident_id=resident.id, assigned_date=MONDAY, role_title="Cook"),
            ScheduledAssignment(
                shift_id=shift.id, resident_id=resident.id, assigned_date=date(2026, 3, 3), role_title=None
            ),
            ScheduledAssignment(
                shift_id=shift.id, resident_id=resident.id, assigned_date=date(2026, 3, 4), role_title="Cook"
            ),
        ]
        with caplog.at_level(logging.ERROR, logger="resident_scheduler.repositories.schedule"):
            created = await schedule_repo.store_assignments(session, period.id, rows)
        await session.commit()

        assert created == 2
        assert "retrying individually" in caplog.text
        stored = await schedule_repo.list_assignments(session, period.id)
        assert [item.assigned_date for item in stored] == [MONDAY, date(2026, 3, 4)]
        assert all(item.status == "scheduled" for item in stored)


@pytest.mark.anyio("asyncio")
async def test_clear_generated_schedule_scopes_by_period_and_range(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as session:
        department = await shift_repo.create_department(session, build_department_create())
        shift = await shift_repo.create_shift(session, build_shift_create(department.id))
        resident = await resident_repo.create_resident(session, build_resident_create())
        first = await schedule_repo.create_period(session, build_period_create())
        second = await schedule_repo.create_period(session, build_period_create(name="Week 2"))
        await session.commit()

        await schedule_repo.clear_generated_schedule(session, first.id, MONDAY, MONDAY)
        assignment = ScheduledAssignment(
            shift_id=shift.id, resident_id=resident.id, assigned_date=MONDAY, role_title="Cook"
        )
        await schedule_repo.store_assignments(session, first.id, [assignment])
        await schedule_repo.store_assignments(session, second.id, [assignment])
        stored = await schedule_repo.store_conflicts(
            session,
            [
                ScheduleConflictRecord(conflict_date=MONDAY, conflict_type="no_eligible_residents", description="a"),
                ScheduleConflictRecord(
                    conflict_date=date(2026, 3, 20), conflict_type="no_eligible_residents", description="b"
                ),
            ],
        )
        await session.commit()
        assert stored == 2

        await schedule_repo.clear_generated_schedule(session, first.id, MONDAY, date(2026, 3, 8))
        await session.commit()

        assert await schedule_repo.list_assignments(session, first.id) == []
        assert len(await schedule_repo.list_assignments(session, second.id)) == 1
        remaining = await schedule_repo.list_conflicts(session, MONDAY, date(2026, 3, 31))
        assert [conflict.description for conflict in remaining] == ["b"]
        assert remaining[0].is_resolved is False


@pytest.mark.anyio("asyncio")
async def test_failed_conflict_insert_is_logged_and_skipped(
    session_factory: async_sessionmaker[AsyncSession], caplog: pytest.LogCaptureFixture
) -> None:
    async with session_factory() as session:
        period = await schedule_repo.create_period(session, build_period_create())
        await session.commit()

        await schedule_repo.clear_generated_schedule(session, period.id, MONDAY, date(2026, 3, 8))
        broken = [
            ScheduleConflictRecord(conflict_date=MONDAY, conflict_type="no_eligible_residents", description="a"),
            ScheduleConflictRecord(conflict_date=MONDAY, conflict_type=None, description="b"),
        ]
        with caplog.at_level(logging.ERROR, logger="resident_scheduler.repositories.schedule"):
            assert await schedule_repo.store_conflicts(session, broken) == 0
        assert "Storing 2 schedule conflicts failed" in caplog.text

        valid = [
            ScheduleConflictRecord(
                conflict_date=date(2026, 3, 3), conflict_type="no_eligible_residents", description="c"
            )
        ]
        assert await schedule_repo.store_conflicts(session, valid) == 1
        await session.commit()

        stored = await schedule_repo.list_conflicts(session, MONDAY, date(2026, 3, 8))
        assert [conflict.description for conflict in stored] == ["c"]


@pytest.mark.anyio("asyncio")
async def test_resident_loaders_skip_revoked_grants(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        license_ = await resident_repo.create_qualification(session, build_qualification_create())
        forklift = await resident_repo.create_qualification(
            session, build_qualification_create(name="Forklift", category="warehouse")
        )
        resident = await resident_repo.create_resident(session, build_resident_create())
        await session.commit()

        for qualification in (license_, forklift):
            await resident_repo.grant_qualification(
                session, resident, ResidentQualificationCreate(qualification_id=qualification.id)
            )
        await session.commit()
        assert await resident_repo.revoke_qualification(session, resident.id, forklift.id)
        await session.commit()

        loaded = await resident_repo.get_resident(session, resident.id)
        assert [grant.qualification.name for grant in loaded.qualifications] == ["Class B License"]
        listed = await resident_repo.list_residents(session)
        assert [grant.qualification_id for grant in listed[0].qualifications] == [license_.id]
        granted = await resident_repo.list_resident_qualifications(session, resident.id)
        assert [grant.qualification_id for grant in granted] == [license_.id]
