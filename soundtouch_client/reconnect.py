# =============================================================================
# SoundTouch Client -- Reconnection Policy
# =============================================================================
#
# Fixed-interval retry loop used after the read-loop loses the socket.  The
# sleep function and the stop signal are injected so the loop can be driven
# by a fake clock in tests.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Protocol

from ._logging import LogSink, logger
from .constants import RECONNECT_INTERVAL, RECONNECT_MAX_ATTEMPTS
from .errors import SoundTouchError


class StopSignal(Protocol):
    def is_set(self) -> bool: ...

    async def wait(self) -> Any: ...


class ReconnectPolicy:
    """Retry ``attempt()`` every *interval* seconds until it succeeds.

    Args:
        interval: Delay before each attempt, in seconds.
        max_attempts: Give up after this many failures; ``0`` retries forever.
        sleep: Awaitable sleep, ``asyncio.sleep`` by default.
        log: Log sink for attempt progress.
    """

    def __init__(
        self,
        interval: float = RECONNECT_INTERVAL,
        max_attempts: int = RECONNECT_MAX_ATTEMPTS,
        *,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        log: LogSink | None = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0 (0 = unlimited)")
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep or asyncio.sleep
        self._log = log or logger

    @property
    def unlimited(self) -> bool:
        return self.max_attempts == 0

    async def run(
        self,
        attempt: Callable[[], Awaitable[Any]],
        stop: StopSignal,
    ) -> bool:
        """Run the retry loop.

        Returns:
            True once an attempt succeeds, False if *stop* was set or the
            attempt cap was reached.  Only ``SoundTouchError`` failures are
            retried; anything else propagates.
        """
        attempts = 0
        while self.unlimited or attempts < self.max_attempts:
            if stop.is_set():
                return False
            if await self._wait(stop):
                return False

            attempts += 1
            self._log.info("Reconnection attempt %d", attempts)
            try:
                await attempt()
            except SoundTouchError as exc:
                self._log.warning("Reconnection attempt %d failed: %s", attempts, exc)
                continue

            self._log.info("Reconnected successfully")
            return True

        self._log.warning("Max reconnection attempts (%d) reached", self.max_attempts)
        return False

    async def _wait(self, stop: StopSignal) -> bool:
        """Sleep for one interval; return True if *stop* fired first."""
        sleeper = asyncio.ensure_future(self._sleep(self.interval))
        stopper = asyncio.ensure_future(stop.wait())
        try:
            await asyncio.wait({sleeper, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, stopper):
                if not task.done():
                    task.cancel()
            await asyncio.gather(sleeper, stopper, return_exceptions=True)
        return stop.is_set()
