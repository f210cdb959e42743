"""Neutral skill/preference providers.

No skill or preference data source is wired yet, so every staff member gets
the same middle score and these factors never decide an assignment.
"""

from __future__ import annotations

from cleaning_scheduler.data.models import CleaningCategory, StaffSchedule

NEUTRAL_SCORE = 50.0


class NeutralSkillMatchProvider:
    """SkillMatchProvider that rates everyone equally."""

    def skill_match(self, staff: StaffSchedule, category: CleaningCategory) -> float:
        return NEUTRAL_SCORE


class NeutralPreferenceProvider:
    """PreferenceProvider that rates everyone equally."""

    def preference(self, staff: StaffSchedule, category: CleaningCategory) -> float:
        return NEUTRAL_SCORE
