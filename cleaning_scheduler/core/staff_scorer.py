"""
Cleaning Scheduler - Staff Assignment Scorer.

Picks the staff member best suited for a generated schedule using a weighted
score over five factors:

    workload      30%   fewer pending tasks today is better
    performance   25%   on-time completion ratio, trailing window
    skill match   20%   category affinity (pluggable provider)
    availability  15%   on shift now > shift later today > otherwise
    preference    10%   category preference (pluggable provider)

The scoring math below is pure; only fact gathering touches the repository.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

from cleaning_scheduler.core.errors import AssignmentError
from cleaning_scheduler.core.neutral_providers import (
    NEUTRAL_SCORE,
    NeutralPreferenceProvider,
    NeutralSkillMatchProvider,
)
from cleaning_scheduler.core.triggers import weekday_name
from cleaning_scheduler.data.models import (
    ScheduleConfig,
    ScheduleFilters,
    ScheduleStatus,
    StaffSchedule,
)

if TYPE_CHECKING:
    from cleaning_scheduler.core.repository import ScheduleRepository
    from cleaning_scheduler.ports.feed_port import PreferenceProvider, SkillMatchProvider

logger = logging.getLogger(__name__)

WORKLOAD_WEIGHT = 0.30
PERFORMANCE_WEIGHT = 0.25
SKILL_WEIGHT = 0.20
AVAILABILITY_WEIGHT = 0.15
PREFERENCE_WEIGHT = 0.10

DEFAULT_PERFORMANCE_WINDOW_DAYS = 30


@dataclass
class CandidateFacts:
    """Inputs to the scoring math for one staff member."""

    pending_today: int = 0
    completions: int = 0
    on_time_completions: int = 0


@dataclass
class StaffScore:
    staff: StaffSchedule
    workload: float
    performance: float
    skill: float
    availability: float
    preference: float

    @property
    def total(self) -> float:
        return (
            self.workload * WORKLOAD_WEIGHT
            + self.performance * PERFORMANCE_WEIGHT
            + self.skill * SKILL_WEIGHT
            + self.availability * AVAILABILITY_WEIGHT
            + self.preference * PREFERENCE_WEIGHT
        )


def workload_score(task_count: int) -> float:
    """100 with no pending tasks, minus 10 per task, floored at 0."""
    return float(max(0, 100 - task_count * 10))


def performance_score(on_time: int, completions: int) -> float:
    """On-time share of completions scaled to 0-100; neutral with no history."""
    if completions <= 0:
        return NEUTRAL_SCORE
    return on_time / completions * 100


def availability_score(staff: StaffSchedule, now: datetime) -> float:
    if staff.works_on(weekday_name(now.date())):
        current = now.time()
        if staff.start_time <= current <= staff.end_time:
            return 100.0
        if current < staff.start_time:
            return 80.0
    return 60.0


def select_highest(scores: list[StaffScore]) -> StaffScore:
    """Strictly highest total wins; ties keep the earliest candidate."""
    best = scores[0]
    for score in scores[1:]:
        if score.total > best.total:
            best = score
    return best


class StaffScorer:
    """Scores candidates and selects the best one for a configuration."""

    def __init__(
        self,
        repository: ScheduleRepository,
        skill_provider: SkillMatchProvider | None = None,
        preference_provider: PreferenceProvider | None = None,
        clock: Callable[[], datetime] = datetime.now,
        performance_window_days: int = DEFAULT_PERFORMANCE_WINDOW_DAYS,
    ) -> None:
        self._repository = repository
        self._skill = skill_provider or NeutralSkillMatchProvider()
        self._preference = preference_provider or NeutralPreferenceProvider()
        self._clock = clock
        self._window = timedelta(days=performance_window_days)

    async def gather_facts(self, staff: StaffSchedule, now: datetime) -> CandidateFacts:
        day_start = datetime.combine(now.date(), datetime.min.time())
        day_end = datetime.combine(now.date(), datetime.max.time())
        pending = await self._repository.query(ScheduleFilters(
            assigned_to_id=staff.id,
            status=ScheduleStatus.PENDING,
            due_from=day_start,
            due_to=day_end,
        ))
        completed = await self._repository.query(ScheduleFilters(
            assigned_to_id=staff.id,
            status=ScheduleStatus.COMPLETED,
        ))
        window_start = now - self._window
        recent = [
            s for s in completed
            if s.completed_at is not None and s.completed_at >= window_start
        ]
        on_time = sum(1 for s in recent if s.completed_at <= s.due_date)
        return CandidateFacts(
            pending_today=len(pending),
            completions=len(recent),
            on_time_completions=on_time,
        )

    def score(
        self,
        staff: StaffSchedule,
        config: ScheduleConfig,
        facts: CandidateFacts,
        now: datetime,
    ) -> StaffScore:
        return StaffScore(
            staff=staff,
            workload=workload_score(facts.pending_today),
            performance=performance_score(facts.on_time_completions, facts.completions),
            skill=float(self._skill.skill_match(staff, config.category)),
            availability=availability_score(staff, now),
            preference=float(self._preference.preference(staff, config.category)),
        )

    async def score_candidates(
        self, candidates: list[StaffSchedule], config: ScheduleConfig,
    ) -> list[StaffScore]:
        now = self._clock()
        scores = []
        for staff in candidates:
            facts = await self.gather_facts(staff, now)
            scores.append(self.score(staff, config, facts, now))
        return scores

    async def select_best_staff(
        self, candidates: list[StaffSchedule], config: ScheduleConfig,
    ) -> StaffSchedule:
        """Return the highest-scoring candidate.

        Raises AssignmentError when `candidates` is empty; callers must check
        the pool first.
        """
        if not candidates:
            raise AssignmentError(
                f"No candidates to assign for {config.category.value}"
            )
        scores = await self.score_candidates(candidates, config)
        best = select_highest(scores)
        logger.info(
            "Assigned %s to '%s' (score %.1f of %d candidate(s))",
            config.category.value, best.staff.name, best.total, len(scores),
        )
        return best.staff
