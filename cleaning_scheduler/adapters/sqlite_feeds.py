"""SQLite feed adapters - implement the read-only feed ports.

Raw rows are validated with pydantic before they become domain models; a
row that doesn't validate, or a database error, surfaces as DependencyError.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from cleaning_scheduler.core.errors import DependencyError
from cleaning_scheduler.core.triggers import WEEKDAYS, parse_time, parse_trigger
from cleaning_scheduler.data.db import RoomStatusDB, ScheduleConfigDB, StaffDB
from cleaning_scheduler.data.models import (
    CleaningCategory,
    CleaningFrequency,
    Priority,
    RoomState,
    RoomStatus,
    ScheduleConfig,
    StaffSchedule,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row contracts
# ---------------------------------------------------------------------------


class ConfigRow(BaseModel):
    id: str
    type: CleaningCategory
    frequency: CleaningFrequency
    auto_generate: bool = False
    enabled: bool = False
    default_points: int = 0
    default_duration: int = 30
    default_priority: Priority = Priority.MEDIUM
    trigger_conditions: list[dict[str, Any]] = []
    assigned_roles: list[str] = []
    created_at: str = ""
    updated_at: str = ""

    @field_validator("default_priority", mode="before")
    @classmethod
    def default_medium(cls, v: Any) -> Any:
        return v or Priority.MEDIUM.value


class WorkHours(BaseModel):
    start: str = "09:00"
    end: str = "17:00"


class StaffRow(BaseModel):
    staff_id: str
    staff_name: str
    role: str
    work_days: list[str] = []
    work_hours: WorkHours = WorkHours()
    is_active: bool = False

    @field_validator("work_days")
    @classmethod
    def known_weekdays(cls, v: list[str]) -> list[str]:
        days = [d.strip().lower() for d in v]
        unknown = [d for d in days if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"unknown weekday(s): {', '.join(unknown)}")
        return days


class RoomRow(BaseModel):
    room_id: str
    room_name: str = ""
    status: RoomState = RoomState.CLEAN
    patient_id: str | None = None
    notes: str = ""
    updated_at: str = ""


async def _fetch(source: str, func, *args) -> list[dict[str, Any]]:
    try:
        return await asyncio.to_thread(func, *args)
    except sqlite3.Error as exc:
        logger.error("Failed to fetch %s: %s", source, exc)
        raise DependencyError(f"Failed to fetch {source}: {exc}") from exc


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


class SQLiteScheduleConfigFeed:
    """SQLite implementation of ScheduleConfigFeed."""

    def __init__(self, db: ScheduleConfigDB | None = None, db_path: str | None = None) -> None:
        self._db = db if db is not None else ScheduleConfigDB(db_path=db_path)

    async def get_schedule_configs(self) -> list[ScheduleConfig]:
        rows = await _fetch("schedule configs", self._db.list_rows)
        configs = []
        for raw in rows:
            try:
                row = ConfigRow.model_validate(raw)
            except ValidationError as exc:
                raise DependencyError(
                    f"Malformed schedule config {raw.get('id')!r}: {exc}"
                ) from exc
            configs.append(ScheduleConfig(
                id=row.id,
                category=row.type,
                frequency=row.frequency,
                enabled=row.enabled,
                auto_generate=row.auto_generate,
                default_points=row.default_points,
                default_duration=row.default_duration,
                default_priority=row.default_priority,
                trigger_conditions=tuple(parse_trigger(t) for t in row.trigger_conditions),
                assigned_roles=tuple(row.assigned_roles),
                created_at=row.created_at,
                updated_at=row.updated_at,
            ))
        logger.debug("Loaded %d schedule config(s)", len(configs))
        return configs


class SQLiteStaffRosterFeed:
    """SQLite implementation of StaffRosterFeed."""

    def __init__(self, db: StaffDB | None = None, db_path: str | None = None) -> None:
        self._db = db if db is not None else StaffDB(db_path=db_path)

    async def get_active_staff(self) -> list[StaffSchedule]:
        rows = await _fetch("staff schedules", self._db.list_active_rows)
        staff = []
        for raw in rows:
            try:
                row = StaffRow.model_validate(raw)
            except ValidationError as exc:
                raise DependencyError(
                    f"Malformed staff schedule {raw.get('staff_id')!r}: {exc}"
                ) from exc
            start = parse_time(row.work_hours.start, StaffSchedule.start_time)
            end = parse_time(row.work_hours.end, StaffSchedule.end_time)
            staff.append(StaffSchedule(
                id=row.staff_id,
                name=row.staff_name,
                role=row.role,
                work_days=tuple(row.work_days),
                start_time=start,
                end_time=end,
                is_active=row.is_active,
            ))
        return [s for s in staff if s.is_active]


class SQLiteRoomStatusFeed:
    """SQLite implementation of RoomStatusFeed."""

    def __init__(self, db: RoomStatusDB | None = None, db_path: str | None = None) -> None:
        self._db = db if db is not None else RoomStatusDB(db_path=db_path)

    async def get_rooms_by_status(self, state: RoomState) -> list[RoomStatus]:
        rows = await _fetch("room status", self._db.list_rows_by_status, state.value)
        rooms = []
        for raw in rows:
            try:
                row = RoomRow.model_validate(raw)
            except ValidationError as exc:
                raise DependencyError(
                    f"Malformed room status {raw.get('room_id')!r}: {exc}"
                ) from exc
            rooms.append(RoomStatus(
                room_id=row.room_id,
                state=row.status,
                room_name=row.room_name,
                last_updated=row.updated_at,
                patient_id=row.patient_id,
                notes=row.notes,
            ))
        return rooms
