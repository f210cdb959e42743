"""SQLite schedule store adapter - implements ScheduleStore.

Uses the synchronous ScheduleDB wrapped with asyncio.to_thread so the
repository can await persistence I/O.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any

from cleaning_scheduler.core.errors import DependencyError
from cleaning_scheduler.data.db import ScheduleDB
from cleaning_scheduler.data.models import Schedule, ScheduleFilters

logger = logging.getLogger(__name__)


class SQLiteScheduleStore:
    """SQLite implementation of ScheduleStore."""

    def __init__(self, db: ScheduleDB | None = None, db_path: str | None = None) -> None:
        self._db = db if db is not None else ScheduleDB(db_path=db_path)

    async def _run(self, op: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            logger.error("SQLite error (%s): %s", op, exc)
            raise DependencyError(f"Schedule store failed during {op}: {exc}") from exc

    async def insert(self, fields: dict[str, Any]) -> Schedule:
        return await self._run("insert", self._db.insert, fields)

    async def update(self, schedule_id: int, fields: dict[str, Any]) -> Schedule | None:
        return await self._run("update", self._db.update, schedule_id, fields)

    async def delete(self, schedule_id: int) -> bool:
        return await self._run("delete", self._db.delete, schedule_id)

    async def get(self, schedule_id: int) -> Schedule | None:
        return await self._run("get", self._db.get, schedule_id)

    async def select(self, filters: ScheduleFilters) -> list[Schedule]:
        return await self._run("select", self._db.select, filters)
