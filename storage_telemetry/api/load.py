from typing import Optional

from fastapi import APIRouter, Depends, Response

from ..config import Settings
from ..dependencies import get_settings, get_storage_load_monitor
from ..models import StorageLoadSnapshot
from ..services.protocol.legacy import to_legacy_storage_load
from ..services.storage_load_monitor import StorageLoadMonitor

router = APIRouter(prefix="/load", tags=["load"])


def _current_snapshot(
    settings: Settings, monitor: StorageLoadMonitor
) -> Optional[StorageLoadSnapshot]:
    if not settings.enable_storage_widget:
        return None
    return monitor.get_latest()


def _empty_body() -> Response:
    # Consumers read the body as text and treat "" as "no data"
    return Response(content=b"", media_type="application/json")


@router.get("/storage")
async def get_storage_load(
    settings: Settings = Depends(get_settings),
    monitor: StorageLoadMonitor = Depends(get_storage_load_monitor),
):
    """
    Legacy storage load: one number per layout entry, -1 for unmounted entries.

    Returns an empty body when the storage widget is disabled or no poll cycle
    has completed yet.
    """
    snapshot = _current_snapshot(settings, monitor)
    if snapshot is None:
        return _empty_body()
    return to_legacy_storage_load(snapshot.extended)


@router.get("/storage-extended")
async def get_storage_load_extended(
    settings: Settings = Depends(get_settings),
    monitor: StorageLoadMonitor = Depends(get_storage_load_monitor),
):
    """Extended storage load: load plus SMART temperature and health per layout entry."""
    snapshot = _current_snapshot(settings, monitor)
    if snapshot is None:
        return _empty_body()
    return snapshot.extended_payload()
