"""Shared fixtures for liqwatch tests."""
import pytest
from loguru import logger
from unittest.mock import AsyncMock, MagicMock
from liqwatch.config import CoinglassConfig, TelegramConfig
from liqwatch.models import MonitorState, ThresholdConfig


def _make_response(status=200, json_data=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)
    return response


def _make_context(response):
    """Wrap a response so it can be used with ``async with``."""
    context = MagicMock()
    context.__aenter__.return_value = response
    context.__aexit__.return_value = False
    return context


def _make_session(method, response=None, side_effect=None):
    session = MagicMock()
    session.close = AsyncMock()
    request = getattr(session, method)
    if side_effect is not None:
        request.side_effect = side_effect
    else:
        request.return_value = _make_context(response)
    return session


@pytest.fixture
def make_response():
    """Factory for fake aiohttp responses."""
    return _make_response


@pytest.fixture
def make_context():
    """Factory for ``async with`` wrappers around fake responses."""
    return _make_context


@pytest.fixture
def make_session():
    """Factory for fake aiohttp sessions."""
    return _make_session


@pytest.fixture
def coinglass_config():
    """Provider config with no retry delay."""
    return CoinglassConfig(
        api_key="test-key",
        base_url="https://example.test/aggregated-history",
        symbol="BTC",
        interval="5m",
        exchanges="ALL",
        timeout_seconds=5,
        max_retries=3,
        retry_delay_seconds=0,
    )


@pytest.fixture
def telegram_config():
    """Telegram config pointing at a fake bot."""
    return TelegramConfig(
        bot_token="123:abc",
        chat_id="42",
        api_base_url="https://telegram.test",
        symbol_label="BTCUSDT.P",
        footer="© 2025 VORFX | All rights reserved.",
    )


@pytest.fixture
def state():
    """Fresh monitor state with default thresholds."""
    return MonitorState(
        thresholds=ThresholdConfig(
            long_threshold=5_000_000,
            short_threshold=10_000_000,
            polling_period=60,
        )
    )


@pytest.fixture
def log_messages():
    """Collect loguru output emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG")
    yield messages
    logger.remove(handler_id)
