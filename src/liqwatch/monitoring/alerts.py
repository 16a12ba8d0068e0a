"""
liqwatch Alert Dispatcher
Formats liquidation alerts and sends them through the Telegram Bot API.
"""
from typing import Optional
import aiohttp
from loguru import logger
from liqwatch.config import TelegramConfig
from liqwatch.models import Side
from liqwatch.utils import format_compact, format_full


def build_alert_message(side: Side, value: float, symbol_label: str, footer: str) -> str:
    """Render the alert text for one side."""
    return (
        f"CG {side.label} Liquidations\n"
        f"{symbol_label} {side.title} Liquidations: ${format_full(value)}\n"
        f"(${format_compact(value)})\n"
        f"\n"
        f"{footer}"
    )


class TelegramDispatcher:
    """Sends plain-text messages to a single Telegram chat."""

    def __init__(self, config: TelegramConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self.sent_count = 0
        self.failed_count = 0

    async def initialize(self):
        """Initialise async resources."""
        if self.session is None:
            self.session = aiohttp.ClientSession()

    async def cleanup(self):
        """Cleanup async resources."""
        if self.session:
            await self.session.close()
            self.session = None

    @property
    def send_url(self) -> str:
        return f"{self.config.api_base_url}/bot{self.config.bot_token}/sendMessage"

    def format_alert(self, side: Side, value: float) -> str:
        return build_alert_message(side, value, self.config.symbol_label, self.config.footer)

    async def dispatch(self, message: str) -> bool:
        """
        Send a message verbatim.

        Returns True only when Telegram acknowledges delivery. Failures are
        logged and reported as False, never raised.
        """
        try:
            if self.session is None:
                await self.initialize()

            payload = {"chat_id": self.config.chat_id, "text": message}

            async with self.session.post(
                self.send_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            ) as response:
                body = await response.json(content_type=None)
                acknowledged = isinstance(body, dict) and body.get("ok") is True

                if 200 <= response.status < 300 and acknowledged:
                    logger.success(f"Telegram alert sent: {message!r}")
                    self.sent_count += 1
                    return True

                description = body.get("description", "") if isinstance(body, dict) else ""
                logger.error(
                    f"Error sending Telegram alert: HTTP {response.status} {description}"
                )

        except Exception as e:
            logger.error(f"Error sending Telegram alert: {type(e).__name__}: {e}")

        self.failed_count += 1
        return False

    async def dispatch_alert(self, side: Side, value: float) -> bool:
        """Format and send the alert for one side."""
        try:
            message = self.format_alert(side, value)
        except (ArithmeticError, ValueError) as e:
            logger.error(f"Could not format {side.label} alert for {value!r}: {type(e).__name__}: {e}")
            self.failed_count += 1
            return False
        return await self.dispatch(message)
