"""Feed ports - read-only external inputs to schedule generation.

Implementations raise DependencyError when the source is unreachable or
returns rows that can't be parsed.
"""

from __future__ import annotations

from typing import Protocol

from cleaning_scheduler.data.models import (
    CleaningCategory,
    RoomState,
    RoomStatus,
    ScheduleConfig,
    StaffSchedule,
)


class ScheduleConfigFeed(Protocol):
    async def get_schedule_configs(self) -> list[ScheduleConfig]: ...


class StaffRosterFeed(Protocol):
    async def get_active_staff(self) -> list[StaffSchedule]:
        """Return staff with is_active = true."""
        ...


class RoomStatusFeed(Protocol):
    async def get_rooms_by_status(self, state: RoomState) -> list[RoomStatus]: ...


class SkillMatchProvider(Protocol):
    """Category affinity of a staff member, 0-100."""

    def skill_match(self, staff: StaffSchedule, category: CleaningCategory) -> float: ...


class PreferenceProvider(Protocol):
    """How much a staff member prefers a category, 0-100."""

    def preference(self, staff: StaffSchedule, category: CleaningCategory) -> float: ...
