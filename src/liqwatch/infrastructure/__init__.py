"""Infrastructure components for error handling and the control server."""

from .error_handling import (
    FetchError,
    TransientFetchError,
    ProviderError,
    RetryPolicy,
    async_retry,
    is_transient,
)
from .control_server import ControlServer, HealthMetrics

__all__ = [
    "FetchError",
    "TransientFetchError",
    "ProviderError",
    "RetryPolicy",
    "async_retry",
    "is_transient",
    "ControlServer",
    "HealthMetrics",
]
