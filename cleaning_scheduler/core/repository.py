"""
Cleaning Scheduler - Schedule Repository.

CRUD and filtered queries over persisted schedules, with a time-boxed cache
in front of the store. Every write is validated and sanitized first, and a
successful write drops the whole "schedule" and "stats" cache namespaces
before returning, so no later read can observe a pre-write snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable

from cleaning_scheduler.core.errors import NotFoundError, ValidationError
from cleaning_scheduler.core.validation import validate_draft, validate_patch
from cleaning_scheduler.data.models import Schedule, ScheduleFilters, ScheduleStatus

if TYPE_CHECKING:
    from pydantic import BaseModel

    from cleaning_scheduler.data.cache import TTLCache
    from cleaning_scheduler.ports.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

SCHEDULE_NAMESPACE = "schedule"
STATS_NAMESPACE = "stats"

TERMINAL_STATUSES = (ScheduleStatus.COMPLETED, ScheduleStatus.CANCELLED)


def query_cache_key(filters: ScheduleFilters) -> str:
    return f"{SCHEDULE_NAMESPACE}:query:{filters.cache_key()}"


def id_cache_key(schedule_id: int) -> str:
    return f"{SCHEDULE_NAMESPACE}:id:{schedule_id}"


class ScheduleRepository:
    """Validated, cached access to the schedule store."""

    def __init__(
        self,
        store: ScheduleStore,
        cache: TTLCache,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._cache = cache
        self._clock = clock
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        # Bumped on every write; a read that overlapped a write must not
        # repopulate the cache with what it fetched.
        self._generation = 0

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def _invalidate(self) -> None:
        self._generation += 1
        self._cache.invalidate_namespace(SCHEDULE_NAMESPACE, STATS_NAMESPACE)

    def cache_if_current(self, key: str, value: Any, generation: int) -> None:
        """Cache `value` unless a write happened since `generation` was read."""
        if generation == self._generation:
            self._cache.set(key, value)

    @property
    def generation(self) -> int:
        return self._generation

    # -- writes --------------------------------------------------------------

    async def create(self, draft: Mapping[str, Any] | BaseModel) -> Schedule:
        """Validate and persist a new schedule.

        Raises ValidationError (with every violation) and persists nothing
        when the draft is invalid.
        """
        now = self._clock()
        fields = validate_draft(draft, now)
        if fields["status"] is ScheduleStatus.COMPLETED and fields.get("completed_at") is None:
            fields["completed_at"] = now
        fields["created_at"] = now
        fields["updated_at"] = now

        schedule = await self._store.insert(fields)
        self._invalidate()
        logger.info("Created schedule #%d '%s'", schedule.id, schedule.name)
        return schedule

    async def update(
        self,
        schedule_id: int,
        patch: Mapping[str, Any] | BaseModel,
        open_action: str | None = None,
    ) -> Schedule:
        """Apply a partial update.

        With `open_action` set, the update is a lifecycle transition and is
        refused when the stored schedule is already completed or cancelled.
        The check runs under the per-id lock against the stored row.

        Raises ValidationError for invalid fields or a refused transition,
        NotFoundError when the id doesn't exist.
        """
        fields = validate_patch(patch)
        async with self._locks[schedule_id]:
            existing = await self._store.get(schedule_id)
            if existing is None:
                raise NotFoundError(schedule_id)
            if open_action is not None and existing.status in TERMINAL_STATUSES:
                raise ValidationError([
                    f"status: cannot {open_action} a {existing.status.value} schedule"
                ])

            now = self._clock()
            status = fields.get("status", existing.status)
            completed_at = fields.get("completed_at", existing.completed_at)
            if status is ScheduleStatus.COMPLETED and completed_at is None:
                fields["completed_at"] = now
            fields["updated_at"] = now

            updated = await self._store.update(schedule_id, fields)
            self._invalidate()
        if updated is None:
            raise NotFoundError(schedule_id)
        return updated

    async def delete(self, schedule_id: int) -> None:
        """Permanently delete a schedule regardless of its status."""
        async with self._locks[schedule_id]:
            deleted = await self._store.delete(schedule_id)
            if not deleted:
                raise NotFoundError(schedule_id)
            self._invalidate()
        self._locks.pop(schedule_id, None)

    # -- reads ---------------------------------------------------------------

    async def get_by_id(self, schedule_id: int) -> Schedule | None:
        key = id_cache_key(schedule_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        generation = self._generation
        schedule = await self._store.get(schedule_id)
        if schedule is not None:
            self.cache_if_current(key, schedule, generation)
        return schedule

    async def query(self, filters: ScheduleFilters | None = None) -> list[Schedule]:
        """Schedules matching all filters, earliest due first."""
        filters = filters or ScheduleFilters()
        key = query_cache_key(filters)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        generation = self._generation
        schedules = await self._store.select(filters)
        self.cache_if_current(key, schedules, generation)
        return schedules
