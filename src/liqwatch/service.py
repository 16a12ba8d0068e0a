#!/usr/bin/env python3
"""Service entry point: wires the monitor, scheduler and control server."""
import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional
from loguru import logger
from liqwatch.config import Config, config
from liqwatch.core.engine import LiquidationEngine
from liqwatch.core.fetcher import LiquidationFetcher
from liqwatch.core.scheduler import PollingScheduler
from liqwatch.infrastructure.control_server import ControlServer
from liqwatch.models import MonitorState, ThresholdConfig
from liqwatch.monitoring.alerts import TelegramDispatcher


def build_state(cfg: Config) -> MonitorState:
    """Initial monitor state from configuration."""
    return MonitorState(
        thresholds=ThresholdConfig(
            long_threshold=cfg.monitor.long_threshold,
            short_threshold=cfg.monitor.short_threshold,
            polling_period=cfg.monitor.poll_interval_seconds,
        )
    )


class LiquidationService:
    """Runs the liquidation monitor until asked to stop."""

    def __init__(self, cfg: Config = config, log_to_file: bool = True):
        """Initialise service."""
        self.config = cfg
        self.running = False
        self._stop_event: Optional[asyncio.Event] = None

        if log_to_file:
            log_path = Path(cfg.log_dir)
            log_path.mkdir(parents=True, exist_ok=True)

            logger.add(
                str(log_path / "liqwatch_{time}.log"),
                rotation="1 day",
                retention="14 days",
                level=cfg.log_level,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
            )

        self.state = build_state(cfg)
        self.fetcher = LiquidationFetcher(cfg.coinglass)
        self.dispatcher = TelegramDispatcher(cfg.telegram)
        self.engine = LiquidationEngine(self.state, self.fetcher, self.dispatcher)
        self.scheduler = PollingScheduler(self.engine.run_cycle, name="liquidations")
        self.control_server = ControlServer(
            self.state,
            self.scheduler,
            host=cfg.server.host,
            port=cfg.server.port,
            title=f"{cfg.coinglass.symbol} Liquidations Dashboard",
            degraded_after_failures=cfg.server.degraded_after_failures,
            fetcher=self.fetcher,
        )
        # engine reports cycle outcomes to the control server's counters
        self.engine.health_monitor = self.control_server

        logger.info("liqwatch service initialised")

    def _handle_shutdown(self, signum, frame=None):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        self.stop()

    def stop(self):
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._handle_shutdown, sig)
            except (NotImplementedError, RuntimeError):
                # not available on this platform / thread
                signal.signal(sig, self._handle_shutdown)

    async def start(self):
        """Open sessions, start the control server and install the schedule."""
        self._stop_event = asyncio.Event()
        self.running = True

        await self.engine.initialize()
        await self.control_server.start()

        thresholds = self.state.thresholds
        logger.info(f"Long Threshold: ${thresholds.long_threshold:,.0f}")
        logger.info(f"Short Threshold: ${thresholds.short_threshold:,.0f}")
        self.scheduler.reschedule(thresholds.polling_period)

    async def shutdown(self):
        """Stop ticking, let in-flight cycles finish, release resources."""
        # leave room for one full retry chain
        grace = (
            self.config.coinglass.timeout_seconds + self.config.coinglass.retry_delay_seconds
        ) * (self.config.coinglass.max_retries + 1)

        try:
            await self.scheduler.stop(timeout=grace)
        except Exception as e:
            logger.error(f"Error stopping scheduler: {e}")

        try:
            await self.control_server.cleanup()
        except Exception as e:
            logger.error(f"Error during control server cleanup: {e}")

        try:
            await self.engine.cleanup()
        except Exception as e:
            logger.error(f"Error closing HTTP sessions: {e}")

        logger.info("liqwatch service stopped")

    async def run(self):
        """Run until a shutdown signal arrives."""
        logger.info("liqwatch service starting...")
        try:
            await self.start()
            self._install_signal_handlers()
            await self._stop_event.wait()
        finally:
            await self.shutdown()


async def main():
    """Entry point for service."""
    service = LiquidationService()
    await service.run()


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Service interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Service failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
