"""Monitor cycle: fetch, evaluate each side, dispatch, remember."""
import asyncio
from typing import Dict, Optional
from loguru import logger
from liqwatch.core.edge_detector import evaluate
from liqwatch.core.fetcher import LiquidationFetcher
from liqwatch.models import MonitorState, Side
from liqwatch.monitoring.alerts import TelegramDispatcher


class LiquidationEngine:
    """Runs one fetch -> evaluate -> dispatch pass against shared state."""

    def __init__(
        self,
        state: MonitorState,
        fetcher: LiquidationFetcher,
        dispatcher: TelegramDispatcher,
        health_monitor=None,
    ):
        """Initialise engine."""
        self.state = state
        self.fetcher = fetcher
        self.dispatcher = dispatcher
        self.health_monitor = health_monitor

    async def initialize(self):
        """Open HTTP sessions for both collaborators."""
        await self.fetcher.initialize()
        await self.dispatcher.initialize()

    async def cleanup(self):
        await self.fetcher.cleanup()
        await self.dispatcher.cleanup()

    async def run_cycle(self, retry_attempt: int = 0) -> Optional[Dict[Side, bool]]:
        """
        Run one monitor cycle.

        Returns a mapping of side to whether an alert was delivered, or None
        when no sample could be fetched.
        """
        if self.health_monitor:
            self.health_monitor.record_tick()

        sample = await self.fetcher.fetch(retry_attempt)
        if sample is None:
            if self.health_monitor:
                self.health_monitor.record_fetch_failure()
            return None

        # dashboard shows the latest sample before any alerting happens
        self.state.sample.update(sample)
        if self.health_monitor:
            self.health_monitor.record_fetch_success()

        thresholds = self.state.thresholds.snapshot()
        sides = list(Side)
        results = await asyncio.gather(*(
            self._check_side(side, sample.value_for(side), thresholds.threshold_for(side))
            for side in sides
        ))
        return dict(zip(sides, results))

    async def _check_side(self, side: Side, value: float, threshold: float) -> bool:
        """Evaluate one side and alert on a new above-threshold value."""
        async with self.state.side_lock(side):
            decision = evaluate(side, value, threshold, self.state.alerts.get(side))
            if not decision.should_alert:
                return False

            delivered = await self.dispatcher.dispatch_alert(side, value)

            if delivered:
                self.state.alerts.remember(side, value)
            else:
                logger.warning(
                    f"{side.label} alert for {value} not delivered, "
                    f"will retry on the next tick"
                )

            if self.health_monitor:
                self.health_monitor.record_dispatch(delivered)

            return delivered
