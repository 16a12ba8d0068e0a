"""Coinglass client for the latest aggregated liquidation candle."""
import math
from typing import Any, Dict, Optional
import aiohttp
from loguru import logger
from liqwatch.config import CoinglassConfig
from liqwatch.infrastructure.error_handling import (
    ProviderError,
    RetryPolicy,
    async_retry,
    is_transient,
)
from liqwatch.models import LiquidationSample


def _parse_amount(raw: Any) -> float:
    """Parse a numeric or numeric-as-string field; missing means 0."""
    if raw is None or raw == "":
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ProviderError(f"Unparseable liquidation value: {raw!r}") from e
    if not math.isfinite(value):
        raise ProviderError(f"Non-finite liquidation value: {raw!r}")
    return value


def parse_latest_sample(payload: Dict[str, Any]) -> Optional[LiquidationSample]:
    """Extract the most recent candle from a provider response body."""
    if not isinstance(payload, dict):
        raise ProviderError("Response body is not a JSON object")

    data = payload.get("data") or []
    if not isinstance(data, list):
        raise ProviderError("Response 'data' is not a list")
    if not data:
        return None

    candle = data[0]
    if not isinstance(candle, dict):
        raise ProviderError("Latest candle is not an object")

    return LiquidationSample(
        long_value=_parse_amount(candle.get("longLiquidationUsd")),
        short_value=_parse_amount(candle.get("shortLiquidationUsd")),
    )


class LiquidationFetcher:
    """Fetches the latest long/short liquidation sample."""

    def __init__(self, config: CoinglassConfig, retry_policy: Optional[RetryPolicy] = None):
        """Initialise fetcher."""
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy(
            max_retries=config.max_retries,
            delay=config.retry_delay_seconds,
        )
        self.session: Optional[aiohttp.ClientSession] = None
        self.retries_attempted = 0

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
    def params(self) -> Dict[str, Any]:
        return {
            "exchanges": self.config.exchanges,
            "symbol": self.config.symbol,
            "interval": self.config.interval,
            "limit": 1,  # latest candle only
        }

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "CG-API-KEY": self.config.api_key,
        }

    async def fetch_once(self, attempt: int = 0) -> Optional[LiquidationSample]:
        """Issue a single request; raises on any failure."""
        if self.session is None:
            await self.initialize()

        if attempt > 0:
            self.retries_attempted += 1

        async with self.session.get(
            self.config.base_url,
            params=self.params,
            headers=self.headers,
            timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
        ) as response:
            if response.status != 200:
                body = await response.text()
                raise ProviderError(f"HTTP {response.status}: {body[:200]}")

            try:
                payload = await response.json(content_type=None)
            except ValueError as e:
                raise ProviderError(f"Malformed JSON response: {e}") from e

        # coinglass reports API-level errors inside a 200 body
        if isinstance(payload, dict) and payload.get("success") is False:
            raise ProviderError(
                f"Provider error {payload.get('code')}: {payload.get('msg')}"
            )

        return parse_latest_sample(payload)

    async def fetch(self, retry_attempt: int = 0) -> Optional[LiquidationSample]:
        """
        Fetch the latest sample, retrying transient failures.

        Returns None when no sample could be obtained; errors are logged and
        never propagate to the caller.
        """
        attempts_made = 0

        async def attempt_once(attempt: int) -> Optional[LiquidationSample]:
            nonlocal attempts_made
            attempts_made += 1
            return await self.fetch_once(attempt)

        try:
            sample = await async_retry(
                attempt_once,
                self.retry_policy,
                start_attempt=retry_attempt,
                name="Coinglass request",
            )
        except Exception as e:
            if is_transient(e):
                logger.error(
                    f"Coinglass request dropped after {attempts_made} "
                    f"attempt{'s' if attempts_made != 1 else ''}: {type(e).__name__}: {e}"
                )
            else:
                logger.error(f"Error while calling Coinglass: {type(e).__name__}: {e}")
            return None

        if sample is None:
            logger.warning("Coinglass returned no candles")
            return None

        logger.info(f"Latest candle - Long: {sample.long_value}, Short: {sample.short_value}")
        return sample
