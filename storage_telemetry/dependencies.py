from functools import lru_cache
from typing import Any, Dict

from .config import Settings
from .core.events.event_bus import DomainEventBus
from .services.smart.health_cache import SmartHealthCache
from .services.smart.smart_prober import SmartProber
from .services.storage.storage_load_mapper import StorageLoadMapper
from .services.storage.system_snapshot import SystemSnapshotCollector
from .services.storage_load_monitor import StorageLoadMonitor
from .services.websocket_manager import WebSocketManager
from .utils.host_config import platform_is_windows

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    """Hent Settings singleton instance."""
    return Settings()


def get_event_bus() -> DomainEventBus:
    if "event_bus" not in _singletons:
        _singletons["event_bus"] = DomainEventBus()
    return _singletons["event_bus"]


def get_smart_prober() -> SmartProber:
    if "smart_prober" not in _singletons:
        settings = get_settings()
        _singletons["smart_prober"] = SmartProber(
            smartctl_path=settings.smartctl_path,
            timeout_seconds=settings.smart_probe_timeout_seconds,
        )
    return _singletons["smart_prober"]


def get_health_cache() -> SmartHealthCache:
    """One cache per process; the only state shared between poll ticks."""
    if "health_cache" not in _singletons:
        _singletons["health_cache"] = SmartHealthCache(prober=get_smart_prober())
    return _singletons["health_cache"]


def get_storage_load_mapper() -> StorageLoadMapper:
    if "storage_load_mapper" not in _singletons:
        settings = get_settings()
        _singletons["storage_load_mapper"] = StorageLoadMapper(
            health_cache=get_health_cache(),
            enable_smart_temps=settings.enable_smart_temps,
            fs_type_filter=settings.fs_type_filter,
            host_win32=platform_is_windows(),
            host_prefix=settings.host_mount_prefix,
        )
    return _singletons["storage_load_mapper"]


def get_snapshot_collector() -> SystemSnapshotCollector:
    if "snapshot_collector" not in _singletons:
        _singletons["snapshot_collector"] = SystemSnapshotCollector(
            lsblk_path=get_settings().lsblk_path
        )
    return _singletons["snapshot_collector"]


def get_storage_load_monitor() -> StorageLoadMonitor:
    if "storage_load_monitor" not in _singletons:
        _singletons["storage_load_monitor"] = StorageLoadMonitor(
            settings=get_settings(),
            mapper=get_storage_load_mapper(),
            collector=get_snapshot_collector(),
            event_bus=get_event_bus(),
        )
    return _singletons["storage_load_monitor"]


def get_websocket_manager() -> WebSocketManager:
    if "websocket_manager" not in _singletons:
        _singletons["websocket_manager"] = WebSocketManager()
    return _singletons["websocket_manager"]


def reset_singletons() -> None:
    _singletons.clear()
    get_settings.cache_clear()
