"""Tests for the service wiring."""
import asyncio
import pytest
from unittest.mock import AsyncMock, patch
from liqwatch.config import Config, MonitorConfig, ServerConfig
from liqwatch.service import LiquidationService, build_state


@pytest.fixture
def service_config(coinglass_config, telegram_config):
    return Config(
        coinglass=coinglass_config,
        telegram=telegram_config,
        monitor=MonitorConfig(long_threshold=1_000, short_threshold=2_000, poll_interval_seconds=15),
        server=ServerConfig(host="127.0.0.1", port=0),
    )


class TestLiquidationService:
    """Test suite for service startup and shutdown."""

    @pytest.fixture
    def service(self, service_config):
        return LiquidationService(service_config, log_to_file=False)

    def test_build_state(self, service_config):
        state = build_state(service_config)

        assert state.thresholds.long_threshold == 1_000
        assert state.thresholds.short_threshold == 2_000
        assert state.thresholds.polling_period == 15
        assert state.alerts.last_long_alerted is None
        assert state.sample.last_long_value == 0

    def test_components_share_state(self, service):
        """Test the engine and control server see the same state object."""
        assert service.engine.state is service.state
        assert service.control_server.state is service.state
        assert service.control_server.scheduler is service.scheduler
        assert service.engine.health_monitor is service.control_server

    def test_handle_shutdown(self, service):
        service.running = True
        service._handle_shutdown(15, None)

        assert service.running is False

    @pytest.mark.asyncio
    async def test_start_installs_schedule(self, service):
        with patch.object(service.control_server, "start", AsyncMock()), \
             patch.object(service.control_server, "cleanup", AsyncMock()), \
             patch.object(service.engine, "initialize", AsyncMock()), \
             patch.object(service.engine, "cleanup", AsyncMock()) as engine_cleanup:
            await service.start()

            assert service.running is True
            assert service.scheduler.is_running
            assert service.scheduler.period == 15

            await service.shutdown()

            assert not service.scheduler.is_running
            engine_cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_stops_on_request(self, service):
        with patch.object(service.control_server, "start", AsyncMock()), \
             patch.object(service.control_server, "cleanup", AsyncMock()) as server_cleanup, \
             patch.object(service.engine, "initialize", AsyncMock()), \
             patch.object(service.engine, "cleanup", AsyncMock()), \
             patch.object(service, "_install_signal_handlers"):
            task = asyncio.create_task(service.run())
            await asyncio.sleep(0.01)

            service.stop()
            await asyncio.wait_for(task, timeout=1)

        server_cleanup.assert_awaited_once()
        assert not service.scheduler.is_running
