"""
Tests for application startup and shutdown.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from storage_telemetry import main
from storage_telemetry.config import Settings
from storage_telemetry.core.events.storage_events import StorageLoadUpdatedEvent
from storage_telemetry.dependencies import get_event_bus, get_websocket_manager


@pytest.fixture
def monitor():
    monitor = Mock()
    monitor.start_monitoring = AsyncMock()
    monitor.stop_monitoring = AsyncMock()
    monitor.get_latest.return_value = None
    return monitor


def run_app(monkeypatch, monitor, **settings_kwargs):
    settings = Settings(_env_file=None, **settings_kwargs)
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    monkeypatch.setattr(main, "setup_logging", lambda s: None)
    monkeypatch.setattr(main, "load_storage_layout", AsyncMock(return_value=()))
    monkeypatch.setattr(main, "get_storage_load_monitor", lambda: monitor)

    with TestClient(main.create_app(settings)) as client:
        assert client.get("/health").status_code == 200
        subscribers = get_event_bus().handler_count(StorageLoadUpdatedEvent)
    return subscribers


def test_enabled_widget_starts_polling_and_push(monkeypatch, monitor):
    subscribers = run_app(monkeypatch, monitor)

    monitor.set_layout.assert_called_once_with(())
    monitor.start_monitoring.assert_awaited_once()
    monitor.stop_monitoring.assert_awaited_once()
    assert subscribers == 1
    assert get_websocket_manager()._sender_task is None


def test_disabled_widget_never_polls_or_pushes(monkeypatch, monitor):
    subscribers = run_app(monkeypatch, monitor, enable_storage_widget=False)

    monitor.start_monitoring.assert_not_awaited()
    assert subscribers == 0
