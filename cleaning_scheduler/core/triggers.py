"""Trigger conditions - parsing and evaluation.

Stored trigger conditions are opaque maps of the form
``{"id", "type", "condition", "value", "enabled"}``. They are parsed into the
typed variants in cleaning_scheduler.data.models and evaluated against a
calendar day.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any

from cleaning_scheduler.core.errors import DependencyError
from cleaning_scheduler.data.models import (
    AdminDecisionTrigger,
    PatientVisitTrigger,
    RoomState,
    RoomStatusTrigger,
    ScheduleConfig,
    StaffScheduleTrigger,
    TimeBasedTrigger,
    TriggerCondition,
)

logger = logging.getLogger(__name__)

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def weekday_name(day: date) -> str:
    """Lowercase English weekday name, e.g. "friday"."""
    return WEEKDAYS[day.weekday()]


def parse_time(value: str | None, default: time) -> time:
    """Parse "HH:MM"; fall back to `default` when empty or malformed."""
    if not value:
        return default
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (ValueError, AttributeError):
        logger.warning("Ignoring malformed trigger time %r", value)
        return default


def _normalize_day(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    day = value.strip().lower()
    if day not in WEEKDAYS:
        raise DependencyError(f"Unknown weekday in trigger condition: {value!r}")
    return day


def parse_trigger(raw: dict[str, Any]) -> TriggerCondition:
    """Build a typed trigger condition from its stored map.

    Raises DependencyError when the kind is unknown or the value is malformed.
    """
    if not isinstance(raw, dict):
        raise DependencyError(f"Trigger condition must be an object, got {type(raw).__name__}")

    kind = raw.get("type")
    trigger_id = str(raw.get("id", ""))
    condition = str(raw.get("condition", ""))
    enabled = bool(raw.get("enabled", True))
    value = raw.get("value") or {}
    if not isinstance(value, dict):
        raise DependencyError(f"Trigger {trigger_id!r} value must be an object")

    if kind == "time_based":
        return TimeBasedTrigger(
            id=trigger_id,
            condition=condition,
            day=_normalize_day(value.get("day")),
            time=value.get("time"),
            enabled=enabled,
        )
    if kind == "room_status":
        try:
            status = RoomState(value.get("status", RoomState.DIRTY.value))
        except ValueError as exc:
            raise DependencyError(f"Trigger {trigger_id!r}: {exc}") from exc
        return RoomStatusTrigger(
            id=trigger_id, condition=condition, status=status, enabled=enabled,
        )
    if kind == "patient_visit":
        return PatientVisitTrigger(id=trigger_id, condition=condition, enabled=enabled)
    if kind == "staff_schedule":
        return StaffScheduleTrigger(id=trigger_id, condition=condition, enabled=enabled)
    if kind == "admin_decision":
        return AdminDecisionTrigger(
            id=trigger_id,
            condition=condition,
            day=_normalize_day(value.get("day")),
            time=value.get("time"),
            enabled=enabled,
        )
    raise DependencyError(f"Unknown trigger condition type: {kind!r}")


def trigger_to_dict(trigger: TriggerCondition) -> dict[str, Any]:
    """Inverse of parse_trigger, used when seeding configurations."""
    if isinstance(trigger, (TimeBasedTrigger, AdminDecisionTrigger)):
        kind = "time_based" if isinstance(trigger, TimeBasedTrigger) else "admin_decision"
        value = {k: v for k, v in (("day", trigger.day), ("time", trigger.time)) if v}
    elif isinstance(trigger, RoomStatusTrigger):
        kind, value = "room_status", {"status": trigger.status.value}
    elif isinstance(trigger, PatientVisitTrigger):
        kind, value = "patient_visit", {}
    elif isinstance(trigger, StaffScheduleTrigger):
        kind, value = "staff_schedule", {}
    else:
        raise TypeError(f"Not a trigger condition: {trigger!r}")
    return {
        "id": trigger.id,
        "type": kind,
        "condition": trigger.condition,
        "value": value,
        "enabled": trigger.enabled,
    }


def is_satisfied(trigger: TriggerCondition, today: date) -> bool:
    """Whether `trigger` fires on `today`. Disabled triggers never fire.

    Room-status, patient-visit and staff-schedule triggers are event driven:
    they are satisfied on any day, and the generator decides what work they
    imply from the matching feed.
    """
    if not trigger.enabled:
        return False
    if isinstance(trigger, (TimeBasedTrigger, AdminDecisionTrigger)):
        if trigger.condition == "daily_at" or trigger.day is None:
            return True
        return trigger.day == weekday_name(today)
    if isinstance(trigger, (RoomStatusTrigger, PatientVisitTrigger, StaffScheduleTrigger)):
        return True
    raise TypeError(f"Not a trigger condition: {trigger!r}")


def find_trigger(config: ScheduleConfig, kind: type) -> TriggerCondition | None:
    """First trigger of the given variant in the config, enabled or not."""
    for trigger in config.trigger_conditions:
        if isinstance(trigger, kind):
            return trigger
    return None


def scheduled_day(config: ScheduleConfig, kind: type, default_day: str) -> str | None:
    """Day on which a day-based category runs.

    Uses the first trigger of `kind`; `default_day` when the config has none
    or the trigger carries no day. None when that trigger is disabled.
    """
    trigger = find_trigger(config, kind)
    if trigger is None:
        return default_day
    if not trigger.enabled:
        return None
    return getattr(trigger, "day", None) or default_day
