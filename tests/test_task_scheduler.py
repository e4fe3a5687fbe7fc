import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from guildcord.scheduler.task_scheduler import TaskScheduler


@pytest.mark.asyncio
async def test_schedule_once_runs_callback_after_delay() -> None:
    scheduler = TaskScheduler()
    callback = MagicMock()

    job_id = scheduler.schedule_once(20, callback)

    assert job_id == 1
    callback.assert_not_called()
    await asyncio.sleep(0.1)
    callback.assert_called_once_with()
    assert scheduler.pending_count == 0
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_schedule_once_awaits_coroutine_callbacks() -> None:
    scheduler = TaskScheduler()
    callback = AsyncMock()

    scheduler.schedule_once(0, callback)
    await asyncio.sleep(0.05)

    callback.assert_awaited_once()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_jobs_run_in_due_order() -> None:
    scheduler = TaskScheduler()
    order: list[str] = []

    scheduler.schedule_once(60, lambda: order.append("late"))
    scheduler.schedule_once(10, lambda: order.append("early"))
    await asyncio.sleep(0.2)

    assert order == ["early", "late"]
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_cancel_pending_job() -> None:
    scheduler = TaskScheduler()
    callback = MagicMock()

    job_id = scheduler.schedule_once(30, callback)
    assert scheduler.cancel(job_id) is True
    assert scheduler.cancel(job_id) is False
    await asyncio.sleep(0.1)

    callback.assert_not_called()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_failing_callback_does_not_stop_runner() -> None:
    scheduler = TaskScheduler()
    survivor = MagicMock()

    scheduler.schedule_once(0, MagicMock(side_effect=RuntimeError("boom")))
    scheduler.schedule_once(20, survivor)
    await asyncio.sleep(0.1)

    survivor.assert_called_once()
    assert scheduler.runner_task is not None and not scheduler.runner_task.done()
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_shutdown_drops_pending_jobs() -> None:
    scheduler = TaskScheduler()
    callback = MagicMock()
    scheduler.schedule_once(50, callback)

    await scheduler.shutdown()
    await scheduler.shutdown()
    await asyncio.sleep(0.1)

    callback.assert_not_called()
    assert scheduler.runner_task is None
    assert scheduler.heap == []


def test_condition_exists_before_any_loop_runs() -> None:
    scheduler = TaskScheduler()
    assert isinstance(scheduler.condition, asyncio.Condition)
    assert scheduler.runner_task is None


@pytest.mark.asyncio
async def test_runner_restarts_after_shutdown() -> None:
    scheduler = TaskScheduler()
    first = MagicMock()
    scheduler.schedule_once(0, first)
    await asyncio.sleep(0.02)
    await scheduler.shutdown()

    second = MagicMock()
    scheduler.schedule_once(0, second)
    await asyncio.sleep(0.02)

    first.assert_called_once_with()
    second.assert_called_once_with()
    await scheduler.shutdown()
