"""Domain errors raised by the cleaning scheduler core.

All errors are structured values for the outer application to render or log.
"""

from __future__ import annotations


class CleaningScheduleError(Exception):
    """Base class for every cleaning scheduler error."""


class ValidationError(CleaningScheduleError):
    """Schedule fields violate one or more invariants.

    Carries every violation found, not just the first.
    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "Invalid schedule")


class NotFoundError(CleaningScheduleError):
    """An operation targeted a schedule id that does not exist."""

    def __init__(self, schedule_id: int) -> None:
        self.schedule_id = schedule_id
        super().__init__(f"Schedule {schedule_id} not found")


class DependencyError(CleaningScheduleError):
    """An external feed is unreachable or returned malformed data."""


class AssignmentError(CleaningScheduleError):
    """The staff scorer was called with an empty candidate pool."""
