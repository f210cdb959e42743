"""
Cleaning Scheduler - Data Models.

Schedules are the generated cleaning work items; configurations, staff
rosters and room states are read-only inputs owned by the outer application.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum


class CleaningCategory(str, Enum):
    SETUP_TAKE_DOWN = "setup_take_down"
    PER_PATIENT = "per_patient"
    WEEKLY = "weekly"
    PUBLIC_SPACES = "public_spaces"
    DEEP_CLEAN = "deep_clean"


class CleaningFrequency(str, Enum):
    DAILY = "daily"
    PER_PATIENT = "per_patient"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi_weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ScheduleStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class RoomState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    QUARANTINE = "quarantine"


# ---------------------------------------------------------------------------
# Trigger conditions (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeBasedTrigger:
    """Fires on a weekday (weekly_on/monthly_on) or every day (daily_at)."""

    id: str
    condition: str             # "daily_at" | "weekly_on" | "monthly_on"
    day: str | None = None     # lowercase weekday, e.g. "friday"
    time: str | None = None    # HH:MM
    enabled: bool = True


@dataclass(frozen=True)
class RoomStatusTrigger:
    id: str
    condition: str             # e.g. "room_status_changed"
    status: RoomState = RoomState.DIRTY
    enabled: bool = True


@dataclass(frozen=True)
class PatientVisitTrigger:
    id: str
    condition: str
    enabled: bool = True


@dataclass(frozen=True)
class StaffScheduleTrigger:
    id: str
    condition: str
    enabled: bool = True


@dataclass(frozen=True)
class AdminDecisionTrigger:
    """An administrator-chosen day, e.g. public spaces every Wednesday."""

    id: str
    condition: str
    day: str | None = None
    time: str | None = None
    enabled: bool = True


TriggerCondition = (
    TimeBasedTrigger
    | RoomStatusTrigger
    | PatientVisitTrigger
    | StaffScheduleTrigger
    | AdminDecisionTrigger
)


@dataclass
class ScheduleConfig:
    """Administrator-defined generation policy for one cleaning category."""

    id: str
    category: CleaningCategory
    frequency: CleaningFrequency
    enabled: bool
    auto_generate: bool
    default_points: int
    default_duration: int              # minutes
    default_priority: Priority
    trigger_conditions: tuple[TriggerCondition, ...] = ()
    assigned_roles: tuple[str, ...] = ()
    created_at: str = ""
    updated_at: str = ""


@dataclass
class StaffSchedule:
    """A staff member's working profile."""

    id: str
    name: str
    role: str
    work_days: tuple[str, ...]          # lowercase weekdays
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    is_active: bool = True

    def works_on(self, weekday: str) -> bool:
        return weekday.lower() in self.work_days


@dataclass
class RoomStatus:
    room_id: str
    state: RoomState
    room_name: str = ""
    last_updated: str = ""
    patient_id: str | None = None
    notes: str = ""


@dataclass
class Schedule:
    """A single generated cleaning work item."""

    id: int
    name: str
    category: CleaningCategory
    frequency: CleaningFrequency
    priority: Priority
    duration_minutes: int
    points: int
    due_date: datetime
    status: ScheduleStatus = ScheduleStatus.PENDING
    assigned_to: str | None = None        # staff display name
    assigned_to_id: str | None = None
    description: str = ""
    completed_at: datetime | None = None
    completed_by: str | None = None
    notes: str | None = None
    room_id: str | None = None
    patient_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ScheduleFilters:
    """Query filters combined with AND semantics. None means "any"."""

    category: CleaningCategory | None = None
    status: ScheduleStatus | None = None
    assigned_to_id: str | None = None
    due_from: datetime | None = None
    due_to: datetime | None = None
    priority: Priority | None = None

    def cache_key(self) -> str:
        """Stable serialization of the filter set, used as a cache key."""
        payload = {
            "category": self.category.value if self.category else None,
            "status": self.status.value if self.status else None,
            "assigned_to_id": self.assigned_to_id,
            "due_from": self.due_from.isoformat() if self.due_from else None,
            "due_to": self.due_to.isoformat() if self.due_to else None,
            "priority": self.priority.value if self.priority else None,
        }
        return json.dumps(payload, sort_keys=True)


# ---------------------------------------------------------------------------
# Analytics / integration output
# ---------------------------------------------------------------------------


@dataclass
class StaffPerformance:
    staff_id: str
    staff_name: str
    completed_count: int


@dataclass
class CleaningStats:
    completed_today: int = 0
    pending_today: int = 0
    overdue: int = 0
    total_schedules: int = 0
    completion_rate: float = 0.0
    average_completion_time: float = 0.0     # minutes, (due - completed)
    top_performers: list[StaffPerformance] = field(default_factory=list)


@dataclass
class DailyTrend:
    date: str                                # ISO date YYYY-MM-DD
    completed: int = 0
    cancelled: int = 0
    average_duration_minutes: float = 0.0


@dataclass
class Task:
    """Generic task record consumed by the outer application."""

    id: str
    title: str
    description: str
    category: str
    points: int
    priority: str
    due_date: str                            # ISO datetime
    completed: bool
    status: str                              # "completed" | "pending"
    source_schedule_id: int
