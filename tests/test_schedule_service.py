"""Tests for cleaning_scheduler.core.schedule_service - the service facade."""

import asyncio
from datetime import timedelta

import pytest

from cleaning_scheduler.adapters.service_factory import create_schedule_service
from cleaning_scheduler.config import Settings
from cleaning_scheduler.core.errors import NotFoundError, ValidationError
from cleaning_scheduler.data.db import RoomStatusDB, ScheduleConfigDB, StaffDB
from cleaning_scheduler.data.models import CleaningCategory, ScheduleStatus


@pytest.fixture
def service(tmp_db_path, clock):
    return create_schedule_service(Settings(DATABASE_PATH=tmp_db_path), clock=clock)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestServiceFactory:
    def test_seeds_default_configs(self, service, tmp_db_path):
        assert ScheduleConfigDB(db_path=tmp_db_path).count() == len(CleaningCategory)

    def test_seeding_can_be_disabled(self, tmp_db_path, clock):
        create_schedule_service(
            Settings(DATABASE_PATH=tmp_db_path, SEED_DEFAULT_CONFIGS=False), clock=clock,
        )
        assert ScheduleConfigDB(db_path=tmp_db_path).count() == 0

    def test_db_path_argument_overrides_settings(self, tmp_path, clock):
        path = str(tmp_path / "override.db")
        create_schedule_service(Settings(DATABASE_PATH=":memory:"), db_path=path, clock=clock)
        assert ScheduleConfigDB(db_path=path).count() == len(CleaningCategory)


# ---------------------------------------------------------------------------
# Lifecycle transitions
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_then_complete(self, service, make_draft, clock):
        schedule = await service.create_schedule(make_draft())

        started = await service.start_schedule(schedule.id)
        assert started.status is ScheduleStatus.IN_PROGRESS
        assert (await service.start_schedule(schedule.id)).status is ScheduleStatus.IN_PROGRESS

        clock.advance(hours=2)
        done = await service.complete_schedule(schedule.id, notes="all good")
        assert done.status is ScheduleStatus.COMPLETED
        assert done.completed_at == clock.now
        assert done.completed_by == "Dana"
        assert done.notes == "all good"

    @pytest.mark.asyncio
    async def test_complete_records_explicit_finisher(self, service, make_draft):
        schedule = await service.create_schedule(make_draft())
        done = await service.complete_schedule(schedule.id, completed_by="Amit")
        assert done.completed_by == "Amit"

    @pytest.mark.asyncio
    async def test_terminal_schedules_reject_transitions(self, service, make_draft):
        schedule = await service.create_schedule(make_draft())
        await service.complete_schedule(schedule.id)

        with pytest.raises(ValidationError):
            await service.complete_schedule(schedule.id)
        with pytest.raises(ValidationError):
            await service.cancel_schedule(schedule.id)
        with pytest.raises(ValidationError):
            await service.assign_schedule(schedule.id, "s2", "Amit")

    @pytest.mark.asyncio
    async def test_concurrent_completions_only_one_wins(self, service, make_draft):
        schedule = await service.create_schedule(make_draft())

        results = await asyncio.gather(
            service.complete_schedule(schedule.id, completed_by="Dana"),
            service.complete_schedule(schedule.id, completed_by="Amit"),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, ValidationError)]
        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(errors) == 1
        assert len(winners) == 1
        stored = await service.get_schedule_by_id(schedule.id)
        assert stored.completed_by == winners[0].completed_by

    @pytest.mark.asyncio
    async def test_concurrent_complete_and_cancel(self, service, make_draft):
        schedule = await service.create_schedule(make_draft())

        results = await asyncio.gather(
            service.complete_schedule(schedule.id),
            service.cancel_schedule(schedule.id, reason="room closed"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, ValidationError) for r in results) == 1
        stored = await service.get_schedule_by_id(schedule.id)
        assert stored.status in (ScheduleStatus.COMPLETED, ScheduleStatus.CANCELLED)

    @pytest.mark.asyncio
    async def test_cancel_records_reason(self, service, make_draft):
        schedule = await service.create_schedule(make_draft())
        cancelled = await service.cancel_schedule(schedule.id, reason="room closed")
        assert cancelled.status is ScheduleStatus.CANCELLED
        assert cancelled.notes == "room closed"
        with pytest.raises(ValidationError):
            await service.start_schedule(schedule.id)

    @pytest.mark.asyncio
    async def test_assign_open_schedule(self, service, make_draft):
        schedule = await service.create_schedule(make_draft())
        assigned = await service.assign_schedule(schedule.id, "s2", "Amit")
        assert (assigned.assigned_to_id, assigned.assigned_to) == ("s2", "Amit")

    @pytest.mark.asyncio
    async def test_missing_schedule_raises_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.start_schedule(404)
        with pytest.raises(NotFoundError):
            await service.delete_schedule(404)
        assert await service.get_schedule_by_id(404) is None


# ---------------------------------------------------------------------------
# Convenience reads
# ---------------------------------------------------------------------------


class TestConvenienceReads:
    @pytest.mark.asyncio
    async def test_todays_schedules(self, service, make_draft, clock):
        today = await service.create_schedule(make_draft())
        await service.create_schedule(make_draft(due_date=clock.now + timedelta(days=1)))
        assert [s.id for s in await service.get_todays_schedules()] == [today.id]

    @pytest.mark.asyncio
    async def test_overdue_schedules(self, service, make_draft, clock):
        late = await service.create_schedule(make_draft(due_date=clock.now + timedelta(hours=1)))
        await service.create_schedule(make_draft(due_date=clock.now + timedelta(hours=5)))
        done = await service.create_schedule(make_draft(due_date=clock.now + timedelta(hours=1)))
        await service.complete_schedule(done.id)

        clock.advance(hours=2)
        assert [s.id for s in await service.get_overdue_schedules()] == [late.id]

    @pytest.mark.asyncio
    async def test_upcoming_schedules(self, service, make_draft, clock):
        soon = await service.create_schedule(make_draft(due_date=clock.now + timedelta(days=2)))
        await service.create_schedule(make_draft(due_date=clock.now + timedelta(days=10)))
        assert [s.id for s in await service.get_upcoming_schedules()] == [soon.id]
        assert len(await service.get_upcoming_schedules(days=14)) == 2

    @pytest.mark.asyncio
    async def test_by_staff_and_status(self, service, make_draft):
        mine = await service.create_schedule(make_draft(assigned_to_id="s1"))
        other = await service.create_schedule(make_draft(assigned_to_id="s2"))
        await service.cancel_schedule(other.id)

        assert [s.id for s in await service.get_schedules_by_staff("s1")] == [mine.id]
        cancelled = await service.get_schedules_by_status(ScheduleStatus.CANCELLED)
        assert [s.id for s in cancelled] == [other.id]


# ---------------------------------------------------------------------------
# Generation, stats and task conversion through the facade
# ---------------------------------------------------------------------------


class TestDailyRun:
    @pytest.mark.asyncio
    async def test_generate_then_report(self, service, tmp_db_path, clock):
        StaffDB(db_path=tmp_db_path).add_staff("s1", "Dana", "cleaning_staff", ["monday"])
        RoomStatusDB(db_path=tmp_db_path).set_status("r1", "dirty", room_name="Room 1")

        created = await service.generate_daily_schedules()
        assert {s.category for s in created} == {
            CleaningCategory.SETUP_TAKE_DOWN, CleaningCategory.PER_PATIENT,
        }

        stats = await service.get_cleaning_stats()
        assert stats.pending_today == 2
        assert stats.total_schedules == 2

        task = service.convert_schedule_to_task(created[0])
        assert task.source_schedule_id == created[0].id
        assert task.status == "pending"

    @pytest.mark.asyncio
    async def test_trends_after_completion(self, service, make_draft, clock):
        schedule = await service.create_schedule(make_draft())
        await service.complete_schedule(schedule.id)
        trends = await service.get_completion_trends(days=7)
        assert [(t.date, t.completed) for t in trends] == [(clock.now.date().isoformat(), 1)]
