"""
Cleaning Scheduler - Schedule Service.

The operation set the outer application calls: schedule CRUD, lifecycle
transitions, convenience reads, daily generation, statistics and task
conversion. Collaborators are passed in; nothing here is global.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable

from cleaning_scheduler.core.errors import NotFoundError
from cleaning_scheduler.core.task_adapter import to_task
from cleaning_scheduler.data.models import (
    CleaningStats,
    DailyTrend,
    Schedule,
    ScheduleFilters,
    ScheduleStatus,
    Task,
)

if TYPE_CHECKING:
    from cleaning_scheduler.core.analytics import CleaningAnalytics
    from cleaning_scheduler.core.generator import ScheduleGenerator
    from cleaning_scheduler.core.repository import ScheduleRepository

logger = logging.getLogger(__name__)


class CleaningScheduleService:
    """Facade over repository, generator and analytics."""

    def __init__(
        self,
        repository: ScheduleRepository,
        generator: ScheduleGenerator,
        analytics: CleaningAnalytics,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._repository = repository
        self._generator = generator
        self._analytics = analytics
        self._clock = clock

    # -- CRUD ----------------------------------------------------------------

    async def create_schedule(self, draft: Mapping[str, Any]) -> Schedule:
        return await self._repository.create(draft)

    async def update_schedule(self, schedule_id: int, patch: Mapping[str, Any]) -> Schedule:
        return await self._repository.update(schedule_id, patch)

    async def get_schedules(self, filters: ScheduleFilters | None = None) -> list[Schedule]:
        return await self._repository.query(filters)

    async def get_schedule_by_id(self, schedule_id: int) -> Schedule | None:
        return await self._repository.get_by_id(schedule_id)

    async def delete_schedule(self, schedule_id: int) -> None:
        await self._repository.delete(schedule_id)

    # -- lifecycle -----------------------------------------------------------
    # Transitions go through update(open_action=...), which refuses terminal
    # schedules under the repository's per-id lock.

    async def _require(self, schedule_id: int) -> Schedule:
        schedule = await self._repository.get_by_id(schedule_id)
        if schedule is None:
            raise NotFoundError(schedule_id)
        return schedule

    async def assign_schedule(
        self, schedule_id: int, staff_id: str, staff_name: str,
    ) -> Schedule:
        return await self._repository.update(schedule_id, {
            "assigned_to_id": staff_id,
            "assigned_to": staff_name,
        }, open_action="assign")

    async def start_schedule(self, schedule_id: int) -> Schedule:
        schedule = await self._require(schedule_id)
        if schedule.status is ScheduleStatus.IN_PROGRESS:
            return schedule
        return await self._repository.update(
            schedule_id, {"status": ScheduleStatus.IN_PROGRESS}, open_action="start",
        )

    async def complete_schedule(
        self,
        schedule_id: int,
        completed_by: str | None = None,
        notes: str | None = None,
    ) -> Schedule:
        schedule = await self._require(schedule_id)
        patch: dict[str, Any] = {
            "status": ScheduleStatus.COMPLETED,
            "completed_at": self._clock(),
            "completed_by": completed_by or schedule.assigned_to,
        }
        if notes is not None:
            patch["notes"] = notes
        done = await self._repository.update(schedule_id, patch, open_action="complete")
        logger.info("Completed schedule #%d by %s", schedule_id, done.completed_by)
        return done

    async def cancel_schedule(self, schedule_id: int, reason: str | None = None) -> Schedule:
        patch: dict[str, Any] = {"status": ScheduleStatus.CANCELLED}
        if reason is not None:
            patch["notes"] = reason
        cancelled = await self._repository.update(schedule_id, patch, open_action="cancel")
        logger.info("Cancelled schedule #%d", schedule_id)
        return cancelled

    # -- convenience reads ---------------------------------------------------

    async def get_todays_schedules(self) -> list[Schedule]:
        today = self._clock().date()
        return await self._repository.query(ScheduleFilters(
            due_from=datetime.combine(today, datetime.min.time()),
            due_to=datetime.combine(today, datetime.max.time()),
        ))

    async def get_overdue_schedules(self) -> list[Schedule]:
        now = self._clock()
        pending = await self._repository.query(ScheduleFilters(
            status=ScheduleStatus.PENDING, due_to=now,
        ))
        return [s for s in pending if s.due_date < now]

    async def get_upcoming_schedules(self, days: int = 7) -> list[Schedule]:
        now = self._clock()
        return await self._repository.query(ScheduleFilters(
            status=ScheduleStatus.PENDING,
            due_from=now,
            due_to=now + timedelta(days=days),
        ))

    async def get_schedules_by_staff(self, staff_id: str) -> list[Schedule]:
        return await self._repository.query(ScheduleFilters(assigned_to_id=staff_id))

    async def get_schedules_by_status(self, status: ScheduleStatus) -> list[Schedule]:
        return await self._repository.query(ScheduleFilters(status=status))

    # -- generation / analytics ----------------------------------------------

    async def generate_daily_schedules(self) -> list[Schedule]:
        return await self._generator.generate_daily_schedules()

    async def get_cleaning_stats(self) -> CleaningStats:
        return await self._analytics.get_cleaning_stats()

    async def get_completion_trends(self, days: int = 30) -> list[DailyTrend]:
        return await self._analytics.get_completion_trends(days)

    @staticmethod
    def convert_schedule_to_task(schedule: Schedule) -> Task:
        return to_task(schedule)
