"""Schedule store port - abstract persistence boundary for schedules.

The repository depends on this protocol, never on a specific database.
"""

from __future__ import annotations

from typing import Any, Protocol

from cleaning_scheduler.data.models import Schedule, ScheduleFilters


class ScheduleStore(Protocol):
    """Persistence operations the schedule repository needs."""

    async def insert(self, fields: dict[str, Any]) -> Schedule: ...

    async def update(self, schedule_id: int, fields: dict[str, Any]) -> Schedule | None: ...

    async def delete(self, schedule_id: int) -> bool: ...

    async def get(self, schedule_id: int) -> Schedule | None: ...

    async def select(self, filters: ScheduleFilters) -> list[Schedule]:
        """Return matching schedules ordered by due date ascending."""
        ...
