"""Tests for the fixed-interval reconnection policy."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from soundtouch_client.errors import SoundTouchConnectionError
from soundtouch_client.reconnect import ReconnectPolicy


class FakeSleep:
    """Records requested delays and returns immediately."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


class TestReconnectPolicyInit:
    def test_defaults(self):
        policy = ReconnectPolicy()
        assert policy.interval == 5.0
        assert policy.max_attempts == 0
        assert policy.unlimited

    def test_rejects_negative_values(self):
        with pytest.raises(ValueError):
            ReconnectPolicy(interval=-1)
        with pytest.raises(ValueError):
            ReconnectPolicy(max_attempts=-1)


class TestReconnectPolicyRun:
    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self):
        sleep = FakeSleep()
        attempt = AsyncMock()
        policy = ReconnectPolicy(5.0, 3, sleep=sleep)

        assert await policy.run(attempt, asyncio.Event()) is True
        attempt.assert_awaited_once()
        assert sleep.delays == [5.0]

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        sleep = FakeSleep()
        attempt = AsyncMock(
            side_effect=[SoundTouchConnectionError("refused"), SoundTouchConnectionError("refused"), None]
        )
        policy = ReconnectPolicy(2.0, 0, sleep=sleep)

        assert await policy.run(attempt, asyncio.Event()) is True
        assert attempt.await_count == 3
        assert sleep.delays == [2.0, 2.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, caplog):
        sleep = FakeSleep()
        attempt = AsyncMock(side_effect=SoundTouchConnectionError("refused"))
        policy = ReconnectPolicy(1.0, 3, sleep=sleep)

        assert await policy.run(attempt, asyncio.Event()) is False
        assert attempt.await_count == 3
        assert "Max reconnection attempts (3) reached" in caplog.text

    @pytest.mark.asyncio
    async def test_stop_before_start(self):
        stop = asyncio.Event()
        stop.set()
        attempt = AsyncMock()
        policy = ReconnectPolicy(1.0, 0, sleep=FakeSleep())

        assert await policy.run(attempt, stop) is False
        attempt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stop_interrupts_wait(self):
        stop = asyncio.Event()
        attempt = AsyncMock()
        policy = ReconnectPolicy(60.0, 0)  # real sleep; stop must cut it short

        task = asyncio.create_task(policy.run(attempt, stop))
        await asyncio.sleep(0.01)
        stop.set()

        assert await asyncio.wait_for(task, timeout=1.0) is False
        attempt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self):
        attempt = AsyncMock(side_effect=RuntimeError("bug"))
        policy = ReconnectPolicy(1.0, 0, sleep=FakeSleep())

        with pytest.raises(RuntimeError):
            await policy.run(attempt, asyncio.Event())
