"""Service factory - wires the schedule service to SQLite adapters from config."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from cleaning_scheduler.adapters.sqlite_feeds import (
    SQLiteRoomStatusFeed,
    SQLiteScheduleConfigFeed,
    SQLiteStaffRosterFeed,
)
from cleaning_scheduler.adapters.sqlite_store import SQLiteScheduleStore
from cleaning_scheduler.config import Settings, settings as default_settings
from cleaning_scheduler.core.analytics import CleaningAnalytics
from cleaning_scheduler.core.defaults import seed_default_configs
from cleaning_scheduler.core.generator import ScheduleGenerator
from cleaning_scheduler.core.repository import ScheduleRepository
from cleaning_scheduler.core.schedule_service import CleaningScheduleService
from cleaning_scheduler.core.staff_scorer import StaffScorer
from cleaning_scheduler.data.cache import TTLCache
from cleaning_scheduler.data.db import RoomStatusDB, ScheduleConfigDB, ScheduleDB, StaffDB


def create_schedule_service(
    settings: Settings | None = None,
    db_path: str | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> CleaningScheduleService:
    """Build a fully wired CleaningScheduleService.

    Args:
        settings: Defaults to the module-level settings.
        db_path: Overrides settings.DATABASE_PATH.
        clock: Source of "now" for every component.
    """
    settings = settings or default_settings
    path = db_path or settings.DATABASE_PATH

    config_db = ScheduleConfigDB(db_path=path)
    if settings.SEED_DEFAULT_CONFIGS:
        seed_default_configs(config_db)

    cache = TTLCache(ttl_seconds=settings.CACHE_TTL_SECONDS)
    repository = ScheduleRepository(
        SQLiteScheduleStore(ScheduleDB(db_path=path)), cache, clock=clock,
    )
    scorer = StaffScorer(
        repository,
        clock=clock,
        performance_window_days=settings.PERFORMANCE_WINDOW_DAYS,
    )
    generator = ScheduleGenerator(
        repository,
        scorer,
        config_feed=SQLiteScheduleConfigFeed(config_db),
        staff_feed=SQLiteStaffRosterFeed(StaffDB(db_path=path)),
        room_feed=SQLiteRoomStatusFeed(RoomStatusDB(db_path=path)),
        clock=clock,
        dedupe=settings.GENERATION_DEDUPE,
    )
    analytics = CleaningAnalytics(
        repository,
        clock=clock,
        window_days=settings.PERFORMANCE_WINDOW_DAYS,
        top_limit=settings.TOP_PERFORMERS_LIMIT,
    )
    return CleaningScheduleService(repository, generator, analytics, clock=clock)
