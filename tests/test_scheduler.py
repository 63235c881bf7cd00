import asyncio
from datetime import datetime, timedelta

import pytest

from ideation.main import app
from ideation.scheduler import seconds_until, start_periodic


async def test_periodic_job_survives_failures():
    runs = []

    async def job():
        runs.append(len(runs))
        if len(runs) == 1:
            raise RuntimeError("first run fails")

    task = start_periodic(timedelta(milliseconds=10), job, "test-job")
    for _ in range(100):
        if len(runs) >= 3:
            break
        await asyncio.sleep(0.01)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(runs) >= 3


async def test_first_run_waits_for_first_delay():
    runs = []

    async def job():
        runs.append(1)

    task = start_periodic(timedelta(hours=24), job, "test-job", first_delay=0)
    for _ in range(50):
        if runs:
            break
        await asyncio.sleep(0.01)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert runs == [1]


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2024, 5, 6, 5, 30), timedelta(minutes=30)),
        (datetime(2024, 5, 6, 7, 0), timedelta(hours=23)),
        (datetime(2024, 5, 6, 6, 0), timedelta(hours=24)),
        (datetime(2024, 5, 6, 23, 59, 30), timedelta(hours=6, seconds=30)),
    ],
)
def test_seconds_until_next_wall_clock_hour(now, expected):
    assert seconds_until(6, now) == expected.total_seconds()


async def test_shutdown_stops_recap_task(engine, monkeypatch):
    monkeypatch.setattr("ideation.main.engine", engine)
    monkeypatch.setattr("ideation.main.settings.RECAP_ENABLED", True)

    async with app.router.lifespan_context(app):
        [running] = [t for t in asyncio.all_tasks() if t.get_name() == "daily-recap"]
        assert not running.done()

    assert running.cancelled()
