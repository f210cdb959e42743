"""
Cleaning Scheduler - SQLite storage.

Schedules persist in SQLite alongside the read-only inputs the generator
consumes: category configurations, staff rosters and room status. These
classes are synchronous; the async adapters in cleaning_scheduler.adapters
wrap them for the core.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from cleaning_scheduler.data.models import (
    CleaningCategory,
    CleaningFrequency,
    Priority,
    Schedule,
    ScheduleFilters,
    ScheduleStatus,
)

logger = logging.getLogger(__name__)

_SCHEDULE_COLUMNS = (
    "name",
    "description",
    "category",
    "frequency",
    "priority",
    "duration_minutes",
    "points",
    "status",
    "due_date",
    "assigned_to",
    "assigned_to_id",
    "completed_at",
    "completed_by",
    "notes",
    "room_id",
    "patient_id",
    "created_at",
    "updated_at",
)


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


class _SQLiteDB:
    """Shared connection handling for the tables below."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from cleaning_scheduler.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        raise NotImplementedError


class ScheduleDB(_SQLiteDB):
    """SQLite-backed storage for generated cleaning schedules."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cleaning_schedules (
                    id                INTEGER PRIMARY KEY AUTOINCREMENT,
                    name              TEXT    NOT NULL,
                    description       TEXT    NOT NULL DEFAULT '',
                    category          TEXT    NOT NULL,
                    frequency         TEXT    NOT NULL,
                    priority          TEXT    NOT NULL DEFAULT 'medium',
                    duration_minutes  INTEGER NOT NULL,
                    points            INTEGER NOT NULL DEFAULT 0,
                    status            TEXT    NOT NULL DEFAULT 'pending',
                    due_date          TEXT    NOT NULL,
                    assigned_to       TEXT,
                    assigned_to_id    TEXT,
                    completed_at      TEXT,
                    completed_by      TEXT,
                    notes             TEXT,
                    room_id           TEXT,
                    patient_id        TEXT,
                    created_at        TEXT    NOT NULL,
                    updated_at        TEXT    NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_cleaning_schedules_due "
                "ON cleaning_schedules (due_date)"
            )
        logger.debug("Schedules table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_schedule(row: sqlite3.Row) -> Schedule:
        return Schedule(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            category=CleaningCategory(row["category"]),
            frequency=CleaningFrequency(row["frequency"]),
            priority=Priority(row["priority"]),
            duration_minutes=row["duration_minutes"],
            points=row["points"],
            status=ScheduleStatus(row["status"]),
            due_date=datetime.fromisoformat(row["due_date"]),
            assigned_to=row["assigned_to"],
            assigned_to_id=row["assigned_to_id"],
            completed_at=_parse_dt(row["completed_at"]),
            completed_by=row["completed_by"],
            notes=row["notes"],
            room_id=row["room_id"],
            patient_id=row["patient_id"],
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def insert(self, fields: dict[str, Any]) -> Schedule:
        """Insert a schedule row. `fields` uses Schedule attribute names."""
        columns = [c for c in _SCHEDULE_COLUMNS if c in fields]
        placeholders = ", ".join("?" for _ in columns)
        with self._connect() as conn:
            cursor = conn.execute(
                f"INSERT INTO cleaning_schedules ({', '.join(columns)}) "
                f"VALUES ({placeholders})",
                [_to_db(fields[c]) for c in columns],
            )
            schedule_id = cursor.lastrowid
            row = conn.execute(
                "SELECT * FROM cleaning_schedules WHERE id = ?", (schedule_id,)
            ).fetchone()
        schedule = self._row_to_schedule(row)
        logger.info(
            "Schedule added: #%d '%s' (%s) due %s",
            schedule.id, schedule.name, schedule.category.value,
            schedule.due_date.isoformat(),
        )
        return schedule

    def update(self, schedule_id: int, fields: dict[str, Any]) -> Schedule | None:
        """Update the given columns. Returns None if the id doesn't exist."""
        columns = [c for c in _SCHEDULE_COLUMNS if c in fields]
        with self._connect() as conn:
            if columns:
                assignments = ", ".join(f"{c} = ?" for c in columns)
                conn.execute(
                    f"UPDATE cleaning_schedules SET {assignments} WHERE id = ?",
                    [_to_db(fields[c]) for c in columns] + [schedule_id],
                )
            row = conn.execute(
                "SELECT * FROM cleaning_schedules WHERE id = ?", (schedule_id,)
            ).fetchone()
        if row is None:
            return None
        logger.info("Schedule #%d updated: %s", schedule_id, ", ".join(columns))
        return self._row_to_schedule(row)

    def delete(self, schedule_id: int) -> bool:
        """Permanently delete a schedule by ID."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM cleaning_schedules WHERE id = ?", (schedule_id,),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Schedule #%d deleted", schedule_id)
        return deleted

    def get(self, schedule_id: int) -> Schedule | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM cleaning_schedules WHERE id = ?", (schedule_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_schedule(row)

    def select(self, filters: ScheduleFilters) -> list[Schedule]:
        """Return schedules matching every given filter, earliest due first."""
        conditions: list[str] = []
        params: list = []
        if filters.category is not None:
            conditions.append("category = ?")
            params.append(filters.category.value)
        if filters.status is not None:
            conditions.append("status = ?")
            params.append(filters.status.value)
        if filters.assigned_to_id is not None:
            conditions.append("assigned_to_id = ?")
            params.append(filters.assigned_to_id)
        if filters.due_from is not None:
            conditions.append("due_date >= ?")
            params.append(filters.due_from.isoformat())
        if filters.due_to is not None:
            conditions.append("due_date <= ?")
            params.append(filters.due_to.isoformat())
        if filters.priority is not None:
            conditions.append("priority = ?")
            params.append(filters.priority.value)

        query = "SELECT * FROM cleaning_schedules"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY due_date, id"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()

        return [self._row_to_schedule(r) for r in rows]


class ScheduleConfigDB(_SQLiteDB):
    """Category configurations. Trigger conditions are stored as JSON."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cleaning_schedule_configs (
                    id                 TEXT    PRIMARY KEY,
                    type               TEXT    NOT NULL UNIQUE,
                    frequency          TEXT    NOT NULL,
                    auto_generate      INTEGER NOT NULL DEFAULT 1,
                    enabled            INTEGER NOT NULL DEFAULT 1,
                    default_points     INTEGER NOT NULL DEFAULT 0,
                    default_duration   INTEGER NOT NULL DEFAULT 30,
                    default_priority   TEXT    NOT NULL DEFAULT 'medium',
                    trigger_conditions TEXT    NOT NULL DEFAULT '[]',
                    assigned_roles     TEXT    NOT NULL DEFAULT '[]',
                    created_at         TEXT    NOT NULL,
                    updated_at         TEXT    NOT NULL
                )
            """)
        logger.debug("Schedule configs table initialized at %s", self._db_path)

    def upsert_config(self, row: dict[str, Any]) -> None:
        """Insert or replace the config for row["type"]."""
        now = datetime.now().isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO cleaning_schedule_configs
                    (id, type, frequency, auto_generate, enabled,
                     default_points, default_duration, default_priority,
                     trigger_conditions, assigned_roles, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(type) DO UPDATE SET
                    frequency = excluded.frequency,
                    auto_generate = excluded.auto_generate,
                    enabled = excluded.enabled,
                    default_points = excluded.default_points,
                    default_duration = excluded.default_duration,
                    default_priority = excluded.default_priority,
                    trigger_conditions = excluded.trigger_conditions,
                    assigned_roles = excluded.assigned_roles,
                    updated_at = excluded.updated_at
                """,
                (
                    row["id"], row["type"], row["frequency"],
                    int(row.get("auto_generate", True)),
                    int(row.get("enabled", True)),
                    row.get("default_points", 0),
                    row.get("default_duration", 30),
                    row.get("default_priority", "medium"),
                    json.dumps(row.get("trigger_conditions", [])),
                    json.dumps(row.get("assigned_roles", [])),
                    now, now,
                ),
            )
        logger.info("Schedule config '%s' saved", row["type"])

    def count(self) -> int:
        with self._connect() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM cleaning_schedule_configs"
            ).fetchone()[0]

    def list_rows(self) -> list[dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM cleaning_schedule_configs ORDER BY type"
            ).fetchall()
        result = []
        for r in rows:
            row = dict(r)
            row["trigger_conditions"] = json.loads(row["trigger_conditions"] or "[]")
            row["assigned_roles"] = json.loads(row["assigned_roles"] or "[]")
            result.append(row)
        return result


class StaffDB(_SQLiteDB):
    """Staff rosters: working days and daily hours per staff member."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS staff_schedules (
                    staff_id    TEXT    PRIMARY KEY,
                    staff_name  TEXT    NOT NULL,
                    role        TEXT    NOT NULL,
                    work_days   TEXT    NOT NULL DEFAULT '[]',
                    work_hours  TEXT    NOT NULL DEFAULT '{}',
                    is_active   INTEGER NOT NULL DEFAULT 1,
                    updated_at  TEXT    NOT NULL
                )
            """)
        logger.debug("Staff schedules table initialized at %s", self._db_path)

    def add_staff(
        self,
        staff_id: str,
        staff_name: str,
        role: str,
        work_days: list[str],
        start: str = "09:00",
        end: str = "17:00",
        is_active: bool = True,
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO staff_schedules
                    (staff_id, staff_name, role, work_days, work_hours, is_active, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    staff_id, staff_name, role,
                    json.dumps([d.lower() for d in work_days]),
                    json.dumps({"start": start, "end": end}),
                    int(is_active),
                    datetime.now().isoformat(),
                ),
            )
        logger.info("Staff saved: %s '%s' (%s)", staff_id, staff_name, role)

    def list_active_rows(self) -> list[dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM staff_schedules WHERE is_active = 1 ORDER BY staff_id"
            ).fetchall()
        result = []
        for r in rows:
            row = dict(r)
            row["work_days"] = json.loads(row["work_days"] or "[]")
            row["work_hours"] = json.loads(row["work_hours"] or "{}")
            result.append(row)
        return result


class RoomStatusDB(_SQLiteDB):
    """Current state of each treatment room."""

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS room_status (
                    room_id     TEXT PRIMARY KEY,
                    room_name   TEXT NOT NULL DEFAULT '',
                    status      TEXT NOT NULL DEFAULT 'clean',
                    patient_id  TEXT,
                    notes       TEXT NOT NULL DEFAULT '',
                    updated_at  TEXT NOT NULL
                )
            """)
        logger.debug("Room status table initialized at %s", self._db_path)

    def set_status(
        self,
        room_id: str,
        status: str,
        room_name: str = "",
        patient_id: str | None = None,
        notes: str = "",
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO room_status
                    (room_id, room_name, status, patient_id, notes, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (room_id, room_name, status, patient_id, notes,
                 datetime.now().isoformat()),
            )
        logger.info("Room %s status set to %s", room_id, status)

    def list_rows_by_status(self, status: str) -> list[dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM room_status WHERE status = ? ORDER BY room_id",
                (status,),
            ).fetchall()
        return [dict(r) for r in rows]
