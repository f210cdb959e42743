"""
Cleaning Scheduler - Daily Schedule Generator.

For each enabled, auto-generating category configuration, decides whether
today calls for work and creates the schedules through the repository,
assigning each one to the best available staff member.

Category passes run concurrently. A failure in one pass is logged and never
cancels or aborts the others.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any, Callable

from cleaning_scheduler.core.triggers import (
    find_trigger,
    is_satisfied,
    parse_time,
    scheduled_day,
    weekday_name,
)
from cleaning_scheduler.data.models import (
    AdminDecisionTrigger,
    CleaningCategory,
    Priority,
    RoomState,
    RoomStatusTrigger,
    Schedule,
    ScheduleConfig,
    ScheduleFilters,
    ScheduleStatus,
    StaffSchedule,
    TimeBasedTrigger,
)

if TYPE_CHECKING:
    from cleaning_scheduler.core.repository import ScheduleRepository
    from cleaning_scheduler.core.staff_scorer import StaffScorer
    from cleaning_scheduler.ports.feed_port import (
        RoomStatusFeed,
        ScheduleConfigFeed,
        StaffRosterFeed,
    )

logger = logging.getLogger(__name__)

SETUP_DUE = time(9, 0)
PER_PATIENT_DUE = time(17, 0)
WEEKLY_DUE = time(14, 0)
PUBLIC_SPACES_DUE = time(10, 0)
DEEP_CLEAN_DUE = time(8, 0)

WEEKLY_DEFAULT_DAY = "friday"
PUBLIC_SPACES_DEFAULT_DAY = "wednesday"
DEEP_CLEAN_DEFAULT_DAY = "saturday"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _trigger_time(trigger: Any, default: time) -> time:
    return parse_time(getattr(trigger, "time", None), default)


class ScheduleGenerator:
    """Creates today's cleaning schedules from the category configurations."""

    def __init__(
        self,
        repository: ScheduleRepository,
        scorer: StaffScorer,
        config_feed: ScheduleConfigFeed,
        staff_feed: StaffRosterFeed,
        room_feed: RoomStatusFeed,
        clock: Callable[[], datetime] = datetime.now,
        dedupe: bool = True,
    ) -> None:
        self._repository = repository
        self._scorer = scorer
        self._config_feed = config_feed
        self._staff_feed = staff_feed
        self._room_feed = room_feed
        self._clock = clock
        self._dedupe = dedupe
        self.last_errors: dict[CleaningCategory, Exception] = {}
        self._passes = {
            CleaningCategory.SETUP_TAKE_DOWN: self._generate_setup_take_down,
            CleaningCategory.PER_PATIENT: self._generate_per_patient,
            CleaningCategory.WEEKLY: self._generate_weekly,
            CleaningCategory.PUBLIC_SPACES: self._generate_public_spaces,
            CleaningCategory.DEEP_CLEAN: self._generate_deep_clean,
        }

    async def generate_daily_schedules(self) -> list[Schedule]:
        """Run every active category pass for today and return what was created.

        A configuration feed failure propagates; failures inside a category
        pass are logged and recorded in `last_errors`.
        """
        today = self._clock().date()
        configs = await self._config_feed.get_schedule_configs()
        active = [c for c in configs if c.enabled and c.auto_generate]
        logger.info(
            "Generating schedules for %s: %d of %d config(s) active",
            today.isoformat(), len(active), len(configs),
        )

        results = await asyncio.gather(
            *(self._passes[c.category](c, today) for c in active),
            return_exceptions=True,
        )

        created: list[Schedule] = []
        errors: dict[CleaningCategory, Exception] = {}
        for config, result in zip(active, results):
            if isinstance(result, Exception):
                errors[config.category] = result
                logger.error(
                    "Schedule generation failed for %s: %s",
                    config.category.value, result,
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                created.extend(result)
        self.last_errors = errors

        logger.info(
            "Generated %d schedule(s) for %s (%d category failure(s))",
            len(created), today.isoformat(), len(errors),
        )
        return created

    # -- category passes -----------------------------------------------------

    async def _generate_setup_take_down(
        self, config: ScheduleConfig, today: date,
    ) -> list[Schedule]:
        # Generated every day; an enabled trigger only moves the due time.
        trigger = find_trigger(config, TimeBasedTrigger)
        if trigger is not None and not trigger.enabled:
            trigger = None
        due = datetime.combine(today, _trigger_time(trigger, SETUP_DUE))
        pool = await self._candidate_pool(config, today)
        schedule = await self._create(config, pool, {
            "name": "Daily Setup/Take Down",
            "description": "Daily clinic setup and closing procedures",
            "due_date": due,
        })
        return [schedule] if schedule else []

    async def _generate_per_patient(
        self, config: ScheduleConfig, today: date,
    ) -> list[Schedule]:
        trigger = find_trigger(config, RoomStatusTrigger)
        if trigger is not None and not is_satisfied(trigger, today):
            return []
        rooms = await self._room_feed.get_rooms_by_status(RoomState.DIRTY)
        if not rooms:
            return []
        pool = await self._candidate_pool(config, today)
        due = datetime.combine(today, PER_PATIENT_DUE)
        created = []
        for room in rooms:
            label = room.room_name or room.room_id
            schedule = await self._create(config, pool, {
                "name": f"Patient Room Turnover - {label}",
                "description": "Cleaning required after patient visit",
                "due_date": due,
                # Turnover cleaning is always urgent work.
                "priority": Priority.HIGH,
                "room_id": room.room_id,
                "patient_id": room.patient_id,
            })
            if schedule:
                created.append(schedule)
        return created

    async def _generate_weekly(
        self, config: ScheduleConfig, today: date,
    ) -> list[Schedule]:
        day = scheduled_day(config, TimeBasedTrigger, WEEKLY_DEFAULT_DAY)
        if day != weekday_name(today):
            return []
        trigger = find_trigger(config, TimeBasedTrigger)
        pool = await self._candidate_pool(config, today)
        schedule = await self._create(config, pool, {
            "name": "Weekly Cleaning",
            "description": "Weekly deep cleaning and maintenance",
            "due_date": datetime.combine(today, _trigger_time(trigger, WEEKLY_DUE)),
            "duration_minutes": config.default_duration * 2,
            "points": _round_half_up(config.default_points * 1.5),
        })
        return [schedule] if schedule else []

    async def _generate_public_spaces(
        self, config: ScheduleConfig, today: date,
    ) -> list[Schedule]:
        day = scheduled_day(config, AdminDecisionTrigger, PUBLIC_SPACES_DEFAULT_DAY)
        if day != weekday_name(today):
            return []
        trigger = find_trigger(config, AdminDecisionTrigger)
        pool = await self._candidate_pool(config, today)
        schedule = await self._create(config, pool, {
            "name": "Public Spaces Cleaning",
            "description": "Cleaning of waiting areas and common spaces",
            "due_date": datetime.combine(today, _trigger_time(trigger, PUBLIC_SPACES_DUE)),
        })
        return [schedule] if schedule else []

    async def _generate_deep_clean(
        self, config: ScheduleConfig, today: date,
    ) -> list[Schedule]:
        day = scheduled_day(config, AdminDecisionTrigger, DEEP_CLEAN_DEFAULT_DAY)
        if day != weekday_name(today):
            return []
        trigger = find_trigger(config, AdminDecisionTrigger)
        pool = await self._candidate_pool(config, today)
        schedule = await self._create(config, pool, {
            "name": "Deep Clean",
            "description": "Intensive cleaning procedures",
            "due_date": datetime.combine(today, _trigger_time(trigger, DEEP_CLEAN_DUE)),
            "duration_minutes": config.default_duration * 3,
            "points": config.default_points * 2,
        })
        return [schedule] if schedule else []

    # -- helpers -------------------------------------------------------------

    async def _candidate_pool(
        self, config: ScheduleConfig, today: date,
    ) -> list[StaffSchedule]:
        """Active staff working today, limited to the config's roles if any."""
        weekday = weekday_name(today)
        staff = await self._staff_feed.get_active_staff()
        pool = [s for s in staff if s.is_active and s.works_on(weekday)]
        if config.assigned_roles:
            pool = [s for s in pool if s.role in config.assigned_roles]
        if not pool:
            logger.info("No staff available for %s on %s", config.category.value, weekday)
        return pool

    async def _already_generated(
        self, category: CleaningCategory, due: datetime, room_id: str | None,
    ) -> bool:
        existing = await self._repository.query(ScheduleFilters(
            category=category, due_from=due, due_to=due,
        ))
        return any(
            s.room_id == room_id and s.status is not ScheduleStatus.CANCELLED
            for s in existing
        )

    async def _create(
        self,
        config: ScheduleConfig,
        pool: list[StaffSchedule],
        overrides: dict[str, Any],
    ) -> Schedule | None:
        if not pool:
            return None
        if self._dedupe and await self._already_generated(
            config.category, overrides["due_date"], overrides.get("room_id"),
        ):
            logger.info(
                "Skipping %s due %s: already generated",
                config.category.value, overrides["due_date"].isoformat(),
            )
            return None

        staff = await self._scorer.select_best_staff(pool, config)
        draft = {
            "category": config.category,
            "frequency": config.frequency,
            "priority": config.default_priority,
            "duration_minutes": config.default_duration,
            "points": config.default_points,
            "status": ScheduleStatus.PENDING,
            "assigned_to": staff.name,
            "assigned_to_id": staff.id,
        }
        draft.update(overrides)
        return await self._repository.create(draft)
