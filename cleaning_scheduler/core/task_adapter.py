"""Schedule -> generic task mapping for the outer application.

Pure and total: every schedule maps to a task, nothing is written.
"""

from __future__ import annotations

from cleaning_scheduler.data.models import Schedule, ScheduleStatus, Task

TASK_CATEGORY = "Environmental Cleaning"


def to_task(schedule: Schedule) -> Task:
    completed = schedule.status is ScheduleStatus.COMPLETED
    return Task(
        id=str(schedule.id),
        title=schedule.name,
        description=schedule.description,
        category=TASK_CATEGORY,
        points=schedule.points,
        priority=schedule.priority.value,
        due_date=schedule.due_date.isoformat(),
        completed=completed,
        status="completed" if completed else "pending",
        source_schedule_id=schedule.id,
    )
