"""Tests for edge-triggered alert decisions."""
from liqwatch.core.edge_detector import evaluate
from liqwatch.models import Side


class TestEvaluate:
    """Test suite for the edge detector."""

    def test_first_crossing_alerts(self):
        """Test a value above threshold with no prior alert fires."""
        decision = evaluate(Side.LONG, 6_000_000, 5_000_000, None)
        assert decision.should_alert is True
        assert decision.above_threshold is True

    def test_below_threshold_never_alerts(self):
        assert evaluate(Side.LONG, 4_000_000, 5_000_000, None).should_alert is False

    def test_equal_to_threshold_does_not_alert(self):
        """Test the comparison is strictly greater-than."""
        assert evaluate(Side.SHORT, 10_000_000, 10_000_000, None).should_alert is False

    def test_same_value_is_suppressed(self):
        """Test holding steady above threshold does not re-alert."""
        decision = evaluate(Side.LONG, 6_000_000, 5_000_000, 6_000_000)
        assert decision.should_alert is False
        assert decision.above_threshold is True

    def test_increase_realerts(self):
        assert evaluate(Side.LONG, 7_250_000, 5_000_000, 6_000_000).should_alert is True

    def test_decrease_still_above_threshold_realerts(self):
        """Test any change in the qualifying value is treated as an edge."""
        assert evaluate(Side.LONG, 5_999_999, 5_000_000, 6_000_000).should_alert is True

    def test_non_positive_threshold_always_qualifies(self):
        assert evaluate(Side.SHORT, 0.5, 0, None).should_alert is True
        assert evaluate(Side.SHORT, 0, -1, None).should_alert is True

    def test_decision_carries_inputs(self):
        decision = evaluate(Side.SHORT, 11_000_000, 10_000_000, None)
        assert decision.side is Side.SHORT
        assert decision.value == 11_000_000
        assert decision.threshold == 10_000_000
