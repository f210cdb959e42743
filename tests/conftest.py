"""Shared test fixtures and configuration.

Sets environment variables before any cleaning_scheduler imports, and
provides temp SQLite databases, a controllable clock and a repository.
"""

import os

# Patch env vars BEFORE any cleaning_scheduler imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SEED_DEFAULT_CONFIGS", "false")

import pytest
from datetime import datetime, timedelta

# Monday. Friday is 2026-10-23, Wednesday 2026-10-21, Saturday 2026-10-24.
MONDAY_7AM = datetime(2026, 10, 19, 7, 0)


class FixedClock:
    """Callable clock frozen at `now` until advanced."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(MONDAY_7AM)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_cleaning.db")


@pytest.fixture
def schedule_db(tmp_db_path):
    from cleaning_scheduler.data.db import ScheduleDB
    return ScheduleDB(db_path=tmp_db_path)


@pytest.fixture
def config_db(tmp_db_path):
    from cleaning_scheduler.data.db import ScheduleConfigDB
    return ScheduleConfigDB(db_path=tmp_db_path)


@pytest.fixture
def staff_db(tmp_db_path):
    from cleaning_scheduler.data.db import StaffDB
    return StaffDB(db_path=tmp_db_path)


@pytest.fixture
def room_db(tmp_db_path):
    from cleaning_scheduler.data.db import RoomStatusDB
    return RoomStatusDB(db_path=tmp_db_path)


@pytest.fixture
def repository(schedule_db, clock):
    """ScheduleRepository over a temp SQLite store with the fixed clock."""
    from cleaning_scheduler.adapters.sqlite_store import SQLiteScheduleStore
    from cleaning_scheduler.core.repository import ScheduleRepository
    from cleaning_scheduler.data.cache import TTLCache
    return ScheduleRepository(SQLiteScheduleStore(schedule_db), TTLCache(), clock=clock)


@pytest.fixture
def make_draft(clock):
    """Factory for valid schedule drafts due later on the clock's day."""

    def _make(**overrides):
        draft = {
            "name": "Weekly Cleaning",
            "category": "weekly",
            "frequency": "weekly",
            "priority": "medium",
            "duration_minutes": 60,
            "points": 100,
            "due_date": clock.now + timedelta(hours=3),
            "assigned_to": "Dana",
            "assigned_to_id": "staff-1",
        }
        draft.update(overrides)
        return draft

    return _make
