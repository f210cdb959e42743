"""Default category configurations.

Used to seed an empty configuration table so a fresh install generates work
out of the box. Administrators edit the rows afterwards.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from cleaning_scheduler.data.models import CleaningCategory

if TYPE_CHECKING:
    from cleaning_scheduler.data.db import ScheduleConfigDB

logger = logging.getLogger(__name__)

DEFAULT_ROLES = ["cleaning_staff", "maintenance"]

# category -> (frequency, points, duration minutes, priority)
_CATEGORY_DEFAULTS: dict[CleaningCategory, tuple[str, int, int, str]] = {
    CleaningCategory.SETUP_TAKE_DOWN: ("daily", 50, 30, "medium"),
    CleaningCategory.PER_PATIENT: ("per_patient", 75, 45, "high"),
    CleaningCategory.WEEKLY: ("weekly", 100, 120, "medium"),
    CleaningCategory.PUBLIC_SPACES: ("weekly", 60, 60, "low"),
    CleaningCategory.DEEP_CLEAN: ("monthly", 150, 240, "high"),
}

_DEFAULT_TRIGGERS: dict[CleaningCategory, list[dict[str, Any]]] = {
    CleaningCategory.SETUP_TAKE_DOWN: [
        {"id": "setup-time", "type": "time_based", "condition": "daily_at",
         "value": {"time": "09:00"}, "enabled": True},
    ],
    CleaningCategory.PER_PATIENT: [
        {"id": "patient-room-dirty", "type": "room_status",
         "condition": "room_status_changed", "value": {"status": "dirty"},
         "enabled": True},
    ],
    CleaningCategory.WEEKLY: [
        {"id": "weekly-friday", "type": "time_based", "condition": "weekly_on",
         "value": {"day": "friday", "time": "14:00"}, "enabled": True},
    ],
    CleaningCategory.PUBLIC_SPACES: [
        {"id": "public-wednesday", "type": "admin_decision",
         "condition": "weekly_on", "value": {"day": "wednesday", "time": "10:00"},
         "enabled": True},
    ],
    CleaningCategory.DEEP_CLEAN: [
        {"id": "deep-clean-saturday", "type": "admin_decision",
         "condition": "monthly_on", "value": {"day": "saturday", "time": "08:00"},
         "enabled": True},
    ],
}


def default_config_rows() -> list[dict[str, Any]]:
    """One raw configuration row per cleaning category."""
    rows = []
    for category, (frequency, points, duration, priority) in _CATEGORY_DEFAULTS.items():
        rows.append({
            "id": f"config-{category.value}",
            "type": category.value,
            "frequency": frequency,
            "auto_generate": True,
            "enabled": True,
            "default_points": points,
            "default_duration": duration,
            "default_priority": priority,
            "trigger_conditions": [dict(t) for t in _DEFAULT_TRIGGERS[category]],
            "assigned_roles": list(DEFAULT_ROLES),
        })
    return rows


def seed_default_configs(config_db: ScheduleConfigDB) -> int:
    """Write the default configurations into an empty table.

    Returns the number of rows written (0 if the table already had rows).
    """
    if config_db.count() > 0:
        return 0
    rows = default_config_rows()
    for row in rows:
        config_db.upsert_config(row)
    logger.info("Seeded %d default schedule configs", len(rows))
    return len(rows)
