"""Unit tests for the background retention scheduler."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from datapoint_memory.config import RetentionPolicy
from datapoint_memory.models import PruneResult
from datapoint_memory.retention.scheduler import RetentionScheduler


@pytest.fixture
def mock_manager():
    manager = Mock()
    manager.prune_all = AsyncMock(return_value=PruneResult(processed=2, removed=5))
    return manager


@pytest.mark.asyncio
async def test_run_once_uses_current_enabled_set(mock_manager):
    enabled = {"hm.0.A"}
    policy = RetentionPolicy(max_entries=10)
    scheduler = RetentionScheduler(mock_manager, lambda: enabled, policy)

    enabled.add("hm.0.B")
    result = await scheduler.run_once()

    assert result.removed == 5
    assert scheduler.last_result is result
    assert scheduler.last_run is not None
    args = mock_manager.prune_all.call_args.args
    assert sorted(args[0]) == ["hm.0.A", "hm.0.B"]
    assert args[1] is policy


@pytest.mark.asyncio
async def test_start_runs_after_initial_delay_and_stop(mock_manager):
    policy = RetentionPolicy(initial_delay_seconds=0, interval_hours=1)
    scheduler = RetentionScheduler(mock_manager, lambda: ["hm.0.A"], policy)

    await scheduler.start()
    assert scheduler.running

    for _ in range(10):
        await asyncio.sleep(0)
        if mock_manager.prune_all.await_count:
            break

    assert mock_manager.prune_all.await_count == 1

    await scheduler.stop()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_failed_cycle_keeps_loop_alive(mock_manager):
    mock_manager.prune_all.side_effect = RuntimeError("boom")
    policy = RetentionPolicy(initial_delay_seconds=0, interval_hours=1)
    scheduler = RetentionScheduler(mock_manager, lambda: ["hm.0.A"], policy)

    await scheduler.start()
    for _ in range(10):
        await asyncio.sleep(0)

    assert scheduler.running
    assert scheduler.last_result is None

    await scheduler.stop()


@pytest.mark.asyncio
async def test_disabled_policy_does_not_start(mock_manager):
    scheduler = RetentionScheduler(
        mock_manager, lambda: ["hm.0.A"], RetentionPolicy(enabled=False)
    )

    await scheduler.start()

    assert not scheduler.running
    await scheduler.stop()
