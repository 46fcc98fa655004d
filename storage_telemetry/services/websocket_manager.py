import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from ..core.events.storage_events import StorageLoadUpdatedEvent
from ..models import StorageLoadSnapshot
from .protocol.legacy import to_legacy_storage_load

STORAGE_LOAD_EVENT = "storage-load"
STORAGE_LOAD_EXTENDED_EVENT = "storage-load-extended"


def build_storage_messages(snapshot: StorageLoadSnapshot) -> List[Dict[str, Any]]:
    """Both payload shapes for one tick, legacy first."""
    extended = snapshot.extended_payload()
    return [
        {"type": STORAGE_LOAD_EVENT, "data": to_legacy_storage_load(extended)},
        {"type": STORAGE_LOAD_EXTENDED_EVENT, "data": extended},
    ]


class WebSocketManager:
    """
    Push channel for storage load.

    Tick events are queued and sent by a single background task, so a slow
    client never blocks the poll loop. A client whose send fails is dropped.
    """

    def __init__(self):
        self._connections: List[WebSocket] = []
        self._message_queue: asyncio.Queue = asyncio.Queue()
        self._sender_task: Optional[asyncio.Task] = None

    def start_sender_task(self) -> None:
        if self._sender_task is None:
            self._sender_task = asyncio.create_task(self._send_queued_messages())
            logging.debug("Storage load push sender started")

    async def stop_sender_task(self) -> None:
        if self._sender_task is None:
            return

        task, self._sender_task = self._sender_task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logging.debug("Storage load push sender stopped")

    async def _send_queued_messages(self) -> None:
        while True:
            message = await self._message_queue.get()
            try:
                await self._broadcast_to_connections(message)
            except Exception as e:
                logging.error(f"Failed to push {message.get('type')}: {e}")
            finally:
                self._message_queue.task_done()

    async def _broadcast_to_connections(self, message: Dict[str, Any]) -> None:
        clients = list(self._connections)
        if not clients:
            return

        text = json.dumps(message)
        results = await asyncio.gather(
            *(client.send_text(text) for client in clients), return_exceptions=True
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                logging.debug(f"Dropping WebSocket client after failed send: {result!r}")
                self.disconnect(client)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.append(websocket)
        logging.info(f"WebSocket client connected ({len(self._connections)} connected)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.remove(websocket)
        logging.info(f"WebSocket client disconnected ({len(self._connections)} connected)")

    async def send_snapshot(self, websocket: WebSocket, snapshot: StorageLoadSnapshot) -> None:
        """Bring a newly connected client up to date with the last tick."""
        for message in build_storage_messages(snapshot):
            await websocket.send_text(json.dumps(message))

    def broadcast_message(self, message: Dict[str, Any]) -> None:
        self._message_queue.put_nowait(message)

    async def handle_storage_load_updated(self, event: StorageLoadUpdatedEvent) -> None:
        for message in build_storage_messages(event.snapshot):
            self.broadcast_message(message)

    @property
    def connection_count(self) -> int:
        return len(self._connections)
