"""
Cleaning Scheduler - Entry Point.

`python main.py` runs one daily generation pass. Schedule it from cron
(e.g. early every morning, before the first due time).
"""

import asyncio
import logging

from cleaning_scheduler.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from cleaning_scheduler.adapters.service_factory import create_schedule_service

logger = logging.getLogger(__name__)


async def run_daily() -> None:
    service = create_schedule_service()
    created = await service.generate_daily_schedules()
    stats = await service.get_cleaning_stats()
    logger.info(
        "Daily run done: %d created, %d pending today, %d overdue",
        len(created), stats.pending_today, stats.overdue,
    )


if __name__ == "__main__":
    asyncio.run(run_daily())
