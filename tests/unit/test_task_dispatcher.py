"""Unit tests for the task dispatcher."""

import asyncio

import pytest

from agent_relay.execution import TaskDispatcher


class TestTaskDispatcher:
    """Tests for TaskDispatcher."""

    def test_invalid_worker_count(self):
        """Test that at least one worker is required."""
        with pytest.raises(ValueError):
            TaskDispatcher(max_workers=0)

    @pytest.mark.asyncio
    async def test_concurrency_limit(self):
        """Test that no more than max_workers units run at once."""
        tasks = TaskDispatcher(max_workers=2)
        peak = 0

        async def unit():
            nonlocal peak
            peak = max(peak, tasks.running)
            await asyncio.sleep(0.01)

        for _ in range(6):
            tasks.submit(unit)
        await tasks.join()

        assert peak == 2
        assert tasks.pending == 0

    @pytest.mark.asyncio
    async def test_join_waits_for_chained_units(self):
        """Test that units submitted by running units are awaited too."""
        tasks = TaskDispatcher(max_workers=1)
        order = []

        async def chain(depth: int):
            order.append(depth)
            if depth < 50:
                tasks.submit(lambda: chain(depth + 1))

        tasks.submit(lambda: chain(0))
        await tasks.join()
        assert order == list(range(51))

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self):
        """Test that a failing unit is reported and others still finish."""
        tasks = TaskDispatcher(max_workers=2)
        failures = []
        done = []
        tasks.add_error_handler(lambda name, error: failures.append((name, str(error))))

        async def boom():
            raise RuntimeError("boom")

        async def ok():
            done.append(True)

        tasks.submit(boom, name="bad")
        tasks.submit(ok, name="good")
        await tasks.join()

        assert failures == [("bad", "boom")]
        assert done == [True]

    @pytest.mark.asyncio
    async def test_shutdown_cancels(self):
        """Test that shutdown cancels pending units."""
        tasks = TaskDispatcher(max_workers=1)
        task = tasks.submit(lambda: asyncio.sleep(10))
        await asyncio.sleep(0)
        await tasks.shutdown()
        assert task.cancelled()
        assert tasks.pending == 0
