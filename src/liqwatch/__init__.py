"""
liqwatch - Edge-triggered liquidation volume monitor with Telegram alerts.
"""

from .config import config
from .models import (
    Side,
    LiquidationSample,
    ThresholdConfig,
    SampleState,
    AlertMemory,
    MonitorState,
)
from .utils import format_full, format_compact, parse_number

__version__ = "1.0.0"
__all__ = [
    "config",
    "Side",
    "LiquidationSample",
    "ThresholdConfig",
    "SampleState",
    "AlertMemory",
    "MonitorState",
    "format_full",
    "format_compact",
    "parse_number",
]
