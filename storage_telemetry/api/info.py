import logging

from fastapi import APIRouter, Depends

from ..config import Settings
from ..core.events.event_bus import DomainEventBus
from ..core.events.storage_events import StorageLoadUpdatedEvent
from ..dependencies import (
    get_event_bus,
    get_health_cache,
    get_settings,
    get_storage_load_monitor,
    get_websocket_manager,
)
from ..services.smart.health_cache import SmartHealthCache
from ..services.storage_load_monitor import StorageLoadMonitor
from ..services.websocket_manager import WebSocketManager

router = APIRouter(tags=["info"])


@router.get("/info")
async def get_static_info(monitor: StorageLoadMonitor = Depends(get_storage_load_monitor)):
    """Static storage layout, index-aligned with the /load/storage* arrays."""
    return {
        "storage": [
            entry.model_dump(by_alias=True, exclude_none=True) for entry in monitor.layout
        ]
    }


@router.get("/config")
async def get_config(settings: Settings = Depends(get_settings)):
    logging.info("Config endpoint called", extra={"operation": "api_config"})
    return {
        "config": settings.model_dump(mode="json"),
        "config_file": settings.config_file_info,
    }


@router.get("/status")
async def get_status(
    monitor: StorageLoadMonitor = Depends(get_storage_load_monitor),
    health_cache: SmartHealthCache = Depends(get_health_cache),
    event_bus: DomainEventBus = Depends(get_event_bus),
    ws_manager: WebSocketManager = Depends(get_websocket_manager),
):
    """Poll loop, SMART cache and push channel diagnostics."""
    return {
        "monitor": monitor.get_monitoring_status(),
        "smart_cache": health_cache.get_cache_info(),
        "push": {
            "subscribers": event_bus.handler_count(StorageLoadUpdatedEvent),
            "websocket_clients": ws_manager.connection_count,
        },
    }
