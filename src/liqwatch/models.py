"""Data models for the liquidation monitor."""
import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class Side(Enum):
    """Liquidation side."""
    LONG = "long"
    SHORT = "short"

    @property
    def label(self) -> str:
        """Upper-case label used in alert titles."""
        return self.value.upper()

    @property
    def title(self) -> str:
        """Capitalised label used in alert bodies."""
        return self.value.capitalize()


@dataclass(frozen=True)
class LiquidationSample:
    """Most recent aggregated liquidation candle."""
    long_value: float
    short_value: float
    timestamp: datetime = field(default_factory=datetime.now)

    def value_for(self, side: Side) -> float:
        """Get the sampled value for one side."""
        return self.long_value if side is Side.LONG else self.short_value


@dataclass
class ThresholdConfig:
    """Runtime-adjustable thresholds and polling period (seconds)."""
    long_threshold: float
    short_threshold: float
    polling_period: float

    def __post_init__(self):
        if self.polling_period <= 0:
            raise ValueError("polling_period must be > 0")

    def threshold_for(self, side: Side) -> float:
        """Get the threshold for one side."""
        return self.long_threshold if side is Side.LONG else self.short_threshold

    def snapshot(self) -> "ThresholdConfig":
        """Copy used by a cycle so later control updates don't leak into it."""
        return replace(self)


@dataclass
class SampleState:
    """Latest successfully fetched values, shown on the dashboard."""
    last_long_value: float = 0.0
    last_short_value: float = 0.0
    updated_at: Optional[datetime] = None

    def update(self, sample: LiquidationSample):
        """Overwrite both sides with a new sample."""
        self.last_long_value = sample.long_value
        self.last_short_value = sample.short_value
        self.updated_at = sample.timestamp


@dataclass
class AlertMemory:
    """Last value successfully notified about, per side."""
    last_long_alerted: Optional[float] = None
    last_short_alerted: Optional[float] = None

    def get(self, side: Side) -> Optional[float]:
        return self.last_long_alerted if side is Side.LONG else self.last_short_alerted

    def remember(self, side: Side, value: float):
        if side is Side.LONG:
            self.last_long_alerted = value
        else:
            self.last_short_alerted = value


@dataclass
class MonitorState:
    """All mutable monitor state, shared by the engine and the control server."""
    thresholds: ThresholdConfig
    sample: SampleState = field(default_factory=SampleState)
    alerts: AlertMemory = field(default_factory=AlertMemory)
    _side_locks: Dict[Side, asyncio.Lock] = field(
        default_factory=lambda: {side: asyncio.Lock() for side in Side},
        repr=False,
    )

    def side_lock(self, side: Side) -> asyncio.Lock:
        """Lock guarding evaluate/dispatch/remember for one side."""
        return self._side_locks[side]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "sample": {
                "long": self.sample.last_long_value,
                "short": self.sample.last_short_value,
                "updated_at": (
                    self.sample.updated_at.isoformat() if self.sample.updated_at else None
                ),
            },
            "thresholds": {
                "long": self.thresholds.long_threshold,
                "short": self.thresholds.short_threshold,
                "poll_interval_seconds": self.thresholds.polling_period,
            },
            "last_alerted": {
                "long": self.alerts.last_long_alerted,
                "short": self.alerts.last_short_alerted,
            },
        }
