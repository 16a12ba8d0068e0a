"""
liqwatch Control Server
Dashboard and runtime parameter endpoint, plus health/status checks.
"""
import os
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Any, Dict, Optional
import psutil
from aiohttp import web
from loguru import logger
from liqwatch.core.scheduler import PollingScheduler
from liqwatch.models import MonitorState
from liqwatch.utils import format_plain, parse_number


@dataclass
class HealthMetrics:
    """Counters describing how the monitor cycles are going."""
    total_ticks: int = 0
    fetch_successes: int = 0
    fetch_failures: int = 0
    consecutive_fetch_failures: int = 0
    alerts_sent: int = 0
    dispatch_failures: int = 0
    last_activity: Optional[datetime] = None
    last_error_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_ticks": self.total_ticks,
            "fetch_successes": self.fetch_successes,
            "fetch_failures": self.fetch_failures,
            "consecutive_fetch_failures": self.consecutive_fetch_failures,
            "alerts_sent": self.alerts_sent,
            "dispatch_failures": self.dispatch_failures,
            "last_activity": self.last_activity.isoformat() if self.last_activity else None,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
        }


class ControlServer:
    """Serves the dashboard and accepts threshold/interval updates."""

    def __init__(
        self,
        state: MonitorState,
        scheduler: PollingScheduler,
        host: str = "0.0.0.0",
        port: int = 3000,
        title: str = "BTC Liquidations Dashboard",
        degraded_after_failures: int = 3,
        fetcher=None,
    ):
        self.state = state
        self.scheduler = scheduler
        self.host = host
        self.port = port
        self.title = title
        self.degraded_after_failures = degraded_after_failures
        self.metrics = HealthMetrics()
        self.start_time = datetime.now()
        self.fetcher = fetcher
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None
        self.process = psutil.Process(os.getpid())

    def create_app(self) -> web.Application:
        """Build the aiohttp application."""
        app = web.Application()
        app.router.add_get("/", self.dashboard_handler)
        app.router.add_post("/set-params", self.set_params_handler)
        app.router.add_get("/health", self.health_check_handler)
        app.router.add_get("/status", self.status_handler)
        return app

    async def start(self):
        """Start the HTTP server."""
        self.app = self.create_app()
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        logger.info(f"Server is running on http://localhost:{self.port}")

    async def cleanup(self):
        """Cleanup resources."""
        if self.site:
            await self.site.stop()
        if self.runner:
            await self.runner.cleanup()

    # -- engine hooks --

    def record_tick(self):
        self.metrics.total_ticks += 1
        self.metrics.last_activity = datetime.now()

    def record_fetch_success(self):
        self.metrics.fetch_successes += 1
        self.metrics.consecutive_fetch_failures = 0

    def record_fetch_failure(self):
        self.metrics.fetch_failures += 1
        self.metrics.consecutive_fetch_failures += 1
        self.metrics.last_error_time = datetime.now()

    def record_dispatch(self, delivered: bool):
        if delivered:
            self.metrics.alerts_sent += 1
        else:
            self.metrics.dispatch_failures += 1
            self.metrics.last_error_time = datetime.now()

    @property
    def health_status(self) -> str:
        if self.metrics.consecutive_fetch_failures >= self.degraded_after_failures:
            return "degraded"
        return "healthy"

    # -- parameter updates --

    def apply_params(self, form) -> Dict[str, float]:
        """
        Apply whichever submitted fields are valid numbers.

        Invalid or missing fields are ignored; a poll interval must also be
        positive, and a new one rebinds the scheduler.
        """
        applied: Dict[str, float] = {}
        thresholds = self.state.thresholds

        long_threshold = parse_number(form.get("longThreshold"))
        if long_threshold is not None:
            thresholds.long_threshold = long_threshold
            applied["longThreshold"] = long_threshold

        short_threshold = parse_number(form.get("shortThreshold"))
        if short_threshold is not None:
            thresholds.short_threshold = short_threshold
            applied["shortThreshold"] = short_threshold

        poll_interval = parse_number(form.get("pollInterval"))
        if poll_interval is not None and poll_interval > 0:
            thresholds.polling_period = poll_interval
            self.scheduler.reschedule(poll_interval)
            applied["pollInterval"] = poll_interval

        if applied:
            logger.info(f"Parameters updated: {applied}")
        return applied

    # -- handlers --

    async def set_params_handler(self, request: web.Request) -> web.Response:
        """POST /set-params: update thresholds and interval, then back to /."""
        form = await request.post()
        self.apply_params(form)
        raise web.HTTPFound("/")

    async def dashboard_handler(self, request: web.Request) -> web.Response:
        """GET /: latest sample, current settings, and the settings form."""
        sample = self.state.sample
        thresholds = self.state.thresholds
        period = thresholds.polling_period
        refresh = max(1, int(round(period)))
        updated = (
            sample.updated_at.strftime("%Y-%m-%d %H:%M:%S") if sample.updated_at else "Never"
        )

        html = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <title>{escape(self.title)}</title>
            <meta http-equiv="refresh" content="{refresh}">
        </head>
        <body>
            <h1>{escape(self.title)}</h1>
            <p>
              <strong>Latest candle data:</strong><br>
              Long Liquidations: {format_plain(sample.last_long_value)}<br>
              Short Liquidations: {format_plain(sample.last_short_value)}<br>
              Updated: {updated}
            </p>
            <hr>
            <form method="POST" action="/set-params">
              <label>Long Threshold (USD):</label>
              <input type="number" name="longThreshold" value="{thresholds.long_threshold:.15g}" step="1000" /><br><br>

              <label>Short Threshold (USD):</label>
              <input type="number" name="shortThreshold" value="{thresholds.short_threshold:.15g}" step="1000" /><br><br>

              <label>Polling Interval (seconds):</label>
              <input type="number" name="pollInterval" value="{period:.15g}" step="1" /><br><br>

              <button type="submit">Save Settings</button>
            </form>
            <hr>
            <p>
              <strong>Current settings:</strong><br>
              Long Threshold &gt; ${format_plain(thresholds.long_threshold)}<br>
              Short Threshold &gt; ${format_plain(thresholds.short_threshold)}<br>
              Polling Interval: {format_plain(period)} seconds
            </p>
        </body>
        </html>
        """

        return web.Response(text=html, content_type="text/html")

    async def health_check_handler(self, request: web.Request) -> web.Response:
        """Simple health check endpoint."""
        if self.health_status == "healthy":
            return web.Response(text="OK", status=200)
        return web.Response(text="DEGRADED", status=200)

    async def status_handler(self, request: web.Request) -> web.Response:
        """Return state and counters as JSON."""
        status = self.state.to_dict()
        status["metrics"] = self.metrics.to_dict()
        status["health_status"] = self.health_status
        status["uptime_seconds"] = (datetime.now() - self.start_time).total_seconds()
        status["memory_usage_mb"] = round(self.process.memory_info().rss / 1024 / 1024, 2)
        status["scheduler"] = {
            "running": self.scheduler.is_running,
            "period_seconds": self.scheduler.period,
            "ticks": self.scheduler.tick_count,
            "cycles_in_flight": self.scheduler.in_flight,
        }
        if self.fetcher is not None:
            status["metrics"]["fetch_retries"] = self.fetcher.retries_attempted
        return web.json_response(status)
