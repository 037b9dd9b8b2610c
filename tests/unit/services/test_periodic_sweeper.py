import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.security_services import PeriodicSweeper, SecurityServices


def stores(rate_limit_removed=1, csrf_removed=2):
    rate_limiter = MagicMock()
    rate_limiter.sweep.return_value = rate_limit_removed
    csrf_store = MagicMock()
    csrf_store.sweep.return_value = csrf_removed
    return rate_limiter, csrf_store


@pytest.mark.asyncio
async def test_sweep_once_counts_memory_entries_and_purged_sessions():
    rate_limiter, csrf_store = stores()
    purger = AsyncMock(return_value=4)

    removed = await PeriodicSweeper(rate_limiter, csrf_store, 300, purger).sweep_once()

    assert removed == 7
    purger.assert_awaited_once()


@pytest.mark.asyncio
async def test_sweep_once_without_purger():
    rate_limiter, csrf_store = stores()

    assert await PeriodicSweeper(rate_limiter, csrf_store, 300).sweep_once() == 3


@pytest.mark.asyncio
async def test_runs_on_interval_until_stopped():
    rate_limiter, csrf_store = stores()
    purger = AsyncMock(return_value=0)
    sweeper = PeriodicSweeper(rate_limiter, csrf_store, 0.01, purger)

    await sweeper.start()
    assert sweeper.running
    await asyncio.sleep(0.1)
    await sweeper.stop()

    assert not sweeper.running
    assert rate_limiter.sweep.call_count >= 2
    assert purger.await_count >= 2

    calls = rate_limiter.sweep.call_count
    await asyncio.sleep(0.05)
    assert rate_limiter.sweep.call_count == calls


@pytest.mark.asyncio
async def test_failing_sweep_does_not_stop_the_loop():
    rate_limiter, csrf_store = stores()
    calls = []

    async def flaky_purger():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("database unavailable")
        return 0

    sweeper = PeriodicSweeper(rate_limiter, csrf_store, 0.01, flaky_purger)

    await sweeper.start()
    await asyncio.sleep(0.08)
    assert sweeper.running
    await sweeper.stop()

    assert len(calls) >= 2


@pytest.mark.asyncio
async def test_start_twice_keeps_one_task_and_stop_is_idempotent():
    rate_limiter, csrf_store = stores()
    sweeper = PeriodicSweeper(rate_limiter, csrf_store, 60)

    await sweeper.start()
    task = sweeper._task
    await sweeper.start()
    assert sweeper._task is task

    await sweeper.stop()
    await sweeper.stop()
    assert task.cancelled()


@pytest.mark.asyncio
async def test_services_start_and_stop_the_sweeper(security_config):
    services = SecurityServices(security_config, reset_notifier=AsyncMock())

    await services.start()
    assert services.sweeper.running
    await services.stop()
    assert not services.sweeper.running
