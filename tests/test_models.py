"""Tests for cleaning_scheduler.data.models - schedule dataclasses and filters."""

from dataclasses import asdict
from datetime import datetime, time

from cleaning_scheduler.data.models import (
    CleaningCategory,
    CleaningFrequency,
    Priority,
    Schedule,
    ScheduleFilters,
    ScheduleStatus,
    StaffSchedule,
)


def test_schedule_defaults():
    schedule = Schedule(
        id=1, name="Weekly Cleaning", category=CleaningCategory.WEEKLY,
        frequency=CleaningFrequency.WEEKLY, priority=Priority.MEDIUM,
        duration_minutes=120, points=150, due_date=datetime(2026, 10, 23, 14, 0),
    )
    assert schedule.status is ScheduleStatus.PENDING
    assert schedule.assigned_to is None
    assert schedule.completed_at is None
    assert schedule.room_id is None


def test_schedule_serializable():
    schedule = Schedule(
        id=1, name="Test", category=CleaningCategory.DEEP_CLEAN,
        frequency=CleaningFrequency.MONTHLY, priority=Priority.HIGH,
        duration_minutes=10, points=1, due_date=datetime(2026, 1, 1, 8, 0),
    )
    d = asdict(schedule)
    assert d["name"] == "Test"
    assert d["category"] == "deep_clean"


def test_staff_defaults_and_work_days():
    staff = StaffSchedule(id="s1", name="Dana", role="cleaning_staff", work_days=("monday",))
    assert staff.start_time == time(9, 0)
    assert staff.end_time == time(17, 0)
    assert staff.works_on("Monday") is True
    assert staff.works_on("tuesday") is False


def test_filter_cache_key_is_stable():
    a = ScheduleFilters(category=CleaningCategory.WEEKLY, status=ScheduleStatus.PENDING)
    b = ScheduleFilters(status=ScheduleStatus.PENDING, category=CleaningCategory.WEEKLY)
    assert a.cache_key() == b.cache_key()


def test_filter_cache_key_distinguishes_filters():
    assert ScheduleFilters().cache_key() != ScheduleFilters(assigned_to_id="s1").cache_key()
    assert (
        ScheduleFilters(due_from=datetime(2026, 10, 19)).cache_key()
        != ScheduleFilters(due_to=datetime(2026, 10, 19)).cache_key()
    )
