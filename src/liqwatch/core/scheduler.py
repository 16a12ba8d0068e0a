"""Periodic scheduler that can be rebound to a new period at runtime."""
import asyncio
import math
from typing import Awaitable, Callable, Optional, Set
from loguru import logger


class PollingScheduler:
    """Owns a single periodic timer that launches one cycle per tick."""

    def __init__(self, action: Callable[[], Awaitable], name: str = "monitor"):
        """
        Initialise scheduler.

        Args:
            action: Coroutine function run once per tick
            name: Scheduler name for logging
        """
        self.action = action
        self.name = name
        self.period: Optional[float] = None
        self.tick_count = 0
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> int:
        """Number of cycles still running."""
        return len(self._in_flight)

    def reschedule(self, period: float):
        """
        Cancel the active timer (if any) and start a new one at ``period``.

        Cycles already in flight are left to finish.
        """
        if period <= 0:
            raise ValueError(f"period must be > 0, got {period}")

        if self._timer and not self._timer.done():
            self._timer.cancel()

        self.period = period
        self._timer = asyncio.get_running_loop().create_task(
            self._timer_loop(period), name=f"{self.name}-timer"
        )
        logger.info(f"Polling scheduled every {period:.1f} seconds.")

    async def _timer_loop(self, period: float):
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + period

        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            self.trigger()
            next_tick += period

            # after a stall, skip the missed slots instead of firing them all
            now = loop.time()
            if next_tick <= now:
                skipped = math.floor((now - next_tick) / period) + 1
                next_tick += skipped * period
                logger.warning(f"Scheduler '{self.name}' fell behind, skipped {skipped} ticks")

    def trigger(self) -> asyncio.Task:
        """Launch one cycle without waiting for it."""
        self.tick_count += 1
        task = asyncio.get_running_loop().create_task(
            self._run_action(), name=f"{self.name}-cycle-{self.tick_count}"
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run_action(self):
        try:
            await self.action()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # one bad cycle must not stop the schedule
            logger.exception(f"Unhandled error in {self.name} cycle: {e}")

    async def stop(self, timeout: Optional[float] = None):
        """Cancel the timer and wait for in-flight cycles to finish."""
        if self._timer:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None

        if self._in_flight:
            pending = set(self._in_flight)
            done, still_running = await asyncio.wait(pending, timeout=timeout)
            for task in still_running:
                task.cancel()
            if still_running:
                logger.warning(f"Cancelled {len(still_running)} unfinished {self.name} cycles")

        logger.info(f"Scheduler '{self.name}' stopped")
