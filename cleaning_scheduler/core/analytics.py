"""
Cleaning Scheduler - Analytics.

Completion and performance statistics derived from the schedule repository.
Results are cached in the "stats" namespace, which every schedule write
invalidates.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Callable

from cleaning_scheduler.data.models import (
    CleaningStats,
    DailyTrend,
    Schedule,
    ScheduleFilters,
    ScheduleStatus,
    StaffPerformance,
)

if TYPE_CHECKING:
    from cleaning_scheduler.core.repository import ScheduleRepository

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "stats:cleaning"


def compute_stats(
    schedules: list[Schedule],
    now: datetime,
    window_days: int = 30,
    top_limit: int = 5,
) -> CleaningStats:
    """Aggregate statistics over `schedules` as of `now`."""
    today = now.date()
    total = len(schedules)

    completed_today = sum(
        1 for s in schedules
        if s.status is ScheduleStatus.COMPLETED
        and s.completed_at is not None
        and s.completed_at.date() == today
    )
    pending_today = sum(
        1 for s in schedules
        if s.status is ScheduleStatus.PENDING and s.due_date.date() == today
    )
    overdue = sum(
        1 for s in schedules
        if s.status is ScheduleStatus.PENDING and s.due_date < now
    )

    # Positive when finished early, negative when late; not clamped.
    deltas = [
        (s.due_date - s.completed_at).total_seconds() / 60
        for s in schedules
        if s.status is ScheduleStatus.COMPLETED and s.completed_at is not None
    ]
    average = sum(deltas) / len(deltas) if deltas else 0.0

    return CleaningStats(
        completed_today=completed_today,
        pending_today=pending_today,
        overdue=overdue,
        total_schedules=total,
        completion_rate=completed_today / total if total else 0.0,
        average_completion_time=average,
        top_performers=top_performers(schedules, now, window_days, top_limit),
    )


def top_performers(
    schedules: list[Schedule],
    now: datetime,
    window_days: int = 30,
    limit: int = 5,
) -> list[StaffPerformance]:
    """Staff ranked by completions in the trailing window, most first."""
    window_start = now - timedelta(days=window_days)
    counts: Counter[str] = Counter()
    names: dict[str, str] = {}
    for s in schedules:
        if (
            s.status is ScheduleStatus.COMPLETED
            and s.completed_at is not None
            and s.completed_at >= window_start
            and s.assigned_to_id
        ):
            counts[s.assigned_to_id] += 1
            names.setdefault(s.assigned_to_id, s.assigned_to or s.assigned_to_id)
    return [
        StaffPerformance(staff_id=staff_id, staff_name=names[staff_id], completed_count=n)
        for staff_id, n in counts.most_common(limit)
    ]


def completion_trends(
    schedules: list[Schedule], now: datetime, days: int = 30,
) -> list[DailyTrend]:
    """Per-day completed/cancelled counts over the trailing `days`, oldest first.

    Completions are bucketed by completion date; cancellations by last update.
    """
    first_day = now.date() - timedelta(days=days - 1)
    buckets: dict[date, DailyTrend] = {}
    durations: dict[date, list[float]] = {}

    def bucket(day: date) -> DailyTrend | None:
        if day < first_day or day > now.date():
            return None
        if day not in buckets:
            buckets[day] = DailyTrend(date=day.isoformat())
        return buckets[day]

    for s in schedules:
        if s.status is ScheduleStatus.COMPLETED and s.completed_at is not None:
            trend = bucket(s.completed_at.date())
            if trend is not None:
                trend.completed += 1
                durations.setdefault(s.completed_at.date(), []).append(s.duration_minutes)
        elif s.status is ScheduleStatus.CANCELLED and s.updated_at is not None:
            trend = bucket(s.updated_at.date())
            if trend is not None:
                trend.cancelled += 1

    for day, values in durations.items():
        buckets[day].average_duration_minutes = sum(values) / len(values)

    return [buckets[d] for d in sorted(buckets)]


class CleaningAnalytics:
    """Statistics read path over the repository."""

    def __init__(
        self,
        repository: ScheduleRepository,
        clock: Callable[[], datetime] = datetime.now,
        window_days: int = 30,
        top_limit: int = 5,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._window_days = window_days
        self._top_limit = top_limit

    async def get_cleaning_stats(self) -> CleaningStats:
        cache = self._repository.cache
        cached = cache.get(STATS_CACHE_KEY)
        if cached is not None:
            return cached

        generation = self._repository.generation
        schedules = await self._repository.query(ScheduleFilters())
        stats = compute_stats(
            schedules, self._clock(), self._window_days, self._top_limit,
        )
        self._repository.cache_if_current(STATS_CACHE_KEY, stats, generation)
        logger.debug(
            "Stats computed over %d schedule(s): %d completed today",
            stats.total_schedules, stats.completed_today,
        )
        return stats

    async def get_completion_trends(self, days: int = 30) -> list[DailyTrend]:
        schedules = await self._repository.query(ScheduleFilters())
        return completion_trends(schedules, self._clock(), days)
