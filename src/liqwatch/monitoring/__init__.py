"""Alert formatting and delivery."""

from .alerts import TelegramDispatcher, build_alert_message

__all__ = [
    "TelegramDispatcher",
    "build_alert_message",
]
