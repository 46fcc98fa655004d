from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from storage_telemetry.config import Settings
from storage_telemetry.dependencies import get_settings, get_storage_load_monitor, get_websocket_manager
from storage_telemetry.services.storage_load_monitor import StorageLoadMonitor
from storage_telemetry.services.websocket_manager import WebSocketManager

router = APIRouter(tags=["websockets"])


@router.websocket("/socket")
async def websocket_endpoint(
        websocket: WebSocket,
        settings: Settings = Depends(get_settings),
        ws_manager: WebSocketManager = Depends(get_websocket_manager),
        monitor: StorageLoadMonitor = Depends(get_storage_load_monitor),
):
    await ws_manager.connect(websocket)

    try:
        snapshot = monitor.get_latest() if settings.enable_storage_widget else None
        if snapshot is not None:
            await ws_manager.send_snapshot(websocket, snapshot)

        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        ws_manager.disconnect(websocket)
