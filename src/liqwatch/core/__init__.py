"""Sampling and alerting engine components."""

from .edge_detector import EdgeDecision, evaluate
from .fetcher import LiquidationFetcher, parse_latest_sample
from .engine import LiquidationEngine
from .scheduler import PollingScheduler

__all__ = [
    "EdgeDecision",
    "evaluate",
    "LiquidationFetcher",
    "parse_latest_sample",
    "LiquidationEngine",
    "PollingScheduler",
]
