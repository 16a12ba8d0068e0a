"""Error types and retry policy for upstream fetches."""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar
import aiohttp
from loguru import logger

T = TypeVar("T")


class FetchError(Exception):
    """Base class for metric fetch failures."""
    pass


class TransientFetchError(FetchError):
    """Network-level failure (timeout, connection reset) worth retrying."""
    pass


class ProviderError(FetchError):
    """Non-transient failure: error status, auth failure, malformed payload."""
    pass


# errors presumed recoverable by simply trying again
TRANSIENT_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    asyncio.TimeoutError,
    aiohttp.ClientConnectionError,
    ConnectionResetError,
    TransientFetchError,
)


def is_transient(error: BaseException) -> bool:
    """Check whether an error should be retried."""
    return isinstance(error, TRANSIENT_EXCEPTIONS)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed delay between attempts."""
    max_retries: int = 3
    delay: float = 5.0

    def should_retry(self, attempt: int, error: BaseException) -> bool:
        """
        Decide whether a failed attempt gets another go.

        Args:
            attempt: Zero-based index of the attempt that just failed
            error: The exception it raised
        """
        return is_transient(error) and attempt < self.max_retries


async def async_retry(
    func: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    start_attempt: int = 0,
    name: Optional[str] = None,
) -> T:
    """
    Run ``func(attempt)`` until it succeeds or the policy gives up.

    The last error is re-raised once retries are exhausted or the error is
    not transient.
    """
    name = name or getattr(func, "__name__", "operation")
    attempt = start_attempt

    while True:
        try:
            return await func(attempt)
        except Exception as e:
            if not policy.should_retry(attempt, e):
                raise

            attempt += 1
            logger.warning(
                f"{name} failed ({type(e).__name__}: {e}), "
                f"retrying (attempt {attempt}/{policy.max_retries}) in {policy.delay:.1f}s"
            )
            await asyncio.sleep(policy.delay)
