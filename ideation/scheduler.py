"""Fixed-interval job runner started from the application lifespan."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


def seconds_until(hour: int, now: datetime) -> float:
    """Seconds from ``now`` to the next ``hour``:00 on the same clock (strictly later)."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


async def run_every(
    interval: timedelta,
    job: Callable[[], Awaitable[object]],
    name: str,
    first_delay: Optional[float] = None,
) -> None:
    """
    Run ``job`` after ``first_delay`` seconds (one ``interval`` by default),
    then once per ``interval`` until cancelled. Runs keep to the schedule
    whatever their duration; a failed run is logged.
    """
    loop = asyncio.get_running_loop()
    seconds = interval.total_seconds()
    next_run = loop.time() + (seconds if first_delay is None else first_delay)
    while True:
        await asyncio.sleep(max(0.0, next_run - loop.time()))
        try:
            await job()
        except Exception:
            logger.exception(f"Scheduled job {name} failed")
        next_run += seconds


def start_periodic(
    interval: timedelta,
    job: Callable[[], Awaitable[object]],
    name: str,
    first_delay: Optional[float] = None,
) -> asyncio.Task:
    if first_delay is None:
        logger.info(f"Scheduling {name} every {interval}")
    else:
        logger.info(f"Scheduling {name} every {interval}, first run in {timedelta(seconds=first_delay)}")
    return asyncio.create_task(run_every(interval, job, name, first_delay), name=name)
