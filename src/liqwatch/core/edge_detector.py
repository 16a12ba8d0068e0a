"""Edge-triggered alert decisions."""
from dataclasses import dataclass
from typing import Optional
from liqwatch.models import Side


@dataclass(frozen=True)
class EdgeDecision:
    """Outcome of evaluating one side of a sample."""
    side: Side
    value: float
    threshold: float
    should_alert: bool

    @property
    def above_threshold(self) -> bool:
        return self.value > self.threshold


def evaluate(
    side: Side,
    new_value: float,
    threshold: float,
    last_alerted: Optional[float],
) -> EdgeDecision:
    """
    Decide whether a freshly sampled value warrants an alert.

    Alerts fire when the value is above the threshold and differs from the
    last value we successfully alerted on. Holding the exact same value does
    not re-alert; any change while above the threshold does.
    """
    crossed = new_value > threshold
    is_new = last_alerted is None or new_value != last_alerted

    return EdgeDecision(
        side=side,
        value=new_value,
        threshold=threshold,
        should_alert=crossed and is_new,
    )
