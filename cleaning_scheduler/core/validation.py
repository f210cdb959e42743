"""Schedule input contracts - validation and sanitization before writes.

Drafts and patches are pydantic models so every violated rule is collected
in one pass. Free-text fields are trimmed on the way in.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from cleaning_scheduler.core.errors import ValidationError
from cleaning_scheduler.data.models import (
    CleaningCategory,
    CleaningFrequency,
    Priority,
    ScheduleStatus,
)


def _naive_local(value: datetime | None) -> datetime | None:
    """Schedules are stored in naive local time."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class ScheduleDraft(BaseModel):
    """Fields accepted when creating a schedule."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str = Field(min_length=1)
    category: CleaningCategory
    frequency: CleaningFrequency
    priority: Priority = Priority.MEDIUM
    duration_minutes: int = Field(gt=0)
    points: int = Field(ge=0)
    due_date: datetime
    status: ScheduleStatus = ScheduleStatus.PENDING
    assigned_to: Optional[str] = None
    assigned_to_id: Optional[str] = None
    description: str = ""
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    notes: Optional[str] = None
    room_id: Optional[str] = None
    patient_id: Optional[str] = None

    @field_validator("due_date", "completed_at")
    @classmethod
    def to_local_time(cls, v: datetime | None) -> datetime | None:
        return _naive_local(v)

    @field_validator("due_date")
    @classmethod
    def not_in_past(cls, v: datetime, info: ValidationInfo) -> datetime:
        now = (info.context or {}).get("now")
        if now is not None and v < now:
            raise ValueError("due date must not be in the past")
        return v


_NON_NULLABLE = (
    "name",
    "category",
    "frequency",
    "priority",
    "duration_minutes",
    "points",
    "due_date",
    "status",
    "description",
)


class SchedulePatch(BaseModel):
    """Fields accepted when updating a schedule. Only set fields are applied."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[CleaningCategory] = None
    frequency: Optional[CleaningFrequency] = None
    priority: Optional[Priority] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    points: Optional[int] = Field(default=None, ge=0)
    due_date: Optional[datetime] = None
    status: Optional[ScheduleStatus] = None
    assigned_to: Optional[str] = None
    assigned_to_id: Optional[str] = None
    description: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    notes: Optional[str] = None
    room_id: Optional[str] = None
    patient_id: Optional[str] = None

    @field_validator(*_NON_NULLABLE)
    @classmethod
    def not_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"{info.field_name} may not be cleared")
        return v

    @field_validator("due_date", "completed_at")
    @classmethod
    def to_local_time(cls, v: datetime | None) -> datetime | None:
        return _naive_local(v)


def _violations(exc: PydanticValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "schedule"
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{loc}: {msg}")
    return messages


def _as_mapping(data: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


def validate_draft(data: Mapping[str, Any] | BaseModel, now: datetime) -> dict[str, Any]:
    """Validate and sanitize a new schedule. Returns storable fields.

    Raises ValidationError listing every violation.
    """
    try:
        draft = ScheduleDraft.model_validate(_as_mapping(data), context={"now": now})
    except PydanticValidationError as exc:
        raise ValidationError(_violations(exc)) from exc
    return draft.model_dump()


def validate_patch(data: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    """Validate and sanitize an update. Returns only the fields being changed."""
    try:
        patch = SchedulePatch.model_validate(_as_mapping(data))
    except PydanticValidationError as exc:
        raise ValidationError(_violations(exc)) from exc
    return patch.model_dump(exclude_unset=True)
