import asyncio
import logging
from datetime import datetime
from typing import Optional, Sequence

from ..config import Settings
from ..core.events.event_bus import DomainEventBus
from ..core.events.storage_events import StorageLoadUpdatedEvent
from ..models import StorageLayoutEntry, StorageLoadSnapshot
from .storage.storage_load_mapper import StorageLoadMapper
from .storage.system_snapshot import SystemSnapshotCollector


class StorageLoadMonitor:
    """
    Periodic poll cycle that recomputes storage load from fresh snapshots.

    Every tick maps the static layout against new block device and filesystem
    snapshots. A tick that does not finish within the poll timeout is
    abandoned and leaves the previous snapshot in place.
    """

    def __init__(
        self,
        settings: Settings,
        mapper: StorageLoadMapper,
        collector: SystemSnapshotCollector,
        event_bus: DomainEventBus,
        layout: Sequence[StorageLayoutEntry] = (),
    ):
        self._settings = settings
        self._mapper = mapper
        self._collector = collector
        self._event_bus = event_bus
        self._layout = tuple(layout)

        self._latest: Optional[StorageLoadSnapshot] = None
        self._last_tick_error: Optional[str] = None
        self._is_running = False
        self._monitor_task: Optional[asyncio.Task] = None

    @property
    def layout(self) -> tuple:
        return self._layout

    def set_layout(self, layout: Sequence[StorageLayoutEntry]) -> None:
        """Install the static layout loaded at startup."""
        self._layout = tuple(layout)

    async def start_monitoring(self) -> None:
        if self._is_running:
            logging.warning("Storage load monitoring already running")
            return

        self._is_running = True
        self._monitor_task = asyncio.create_task(self._monitoring_loop())
        logging.info("Storage load monitoring started")

    async def stop_monitoring(self) -> None:
        if not self._is_running:
            return

        self._is_running = False

        if self._monitor_task:
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass

        logging.info("Storage load monitoring stopped")

    async def _monitoring_loop(self) -> None:
        logging.info(
            f"Storage load loop starting - polling every {self._settings.storage_poll_interval_seconds}s"
        )
        try:
            while self._is_running:
                await self.run_tick()
                await asyncio.sleep(self._settings.storage_poll_interval_seconds)
        except asyncio.CancelledError:
            logging.debug("Storage load loop cancelled")

    async def run_tick(self) -> Optional[StorageLoadSnapshot]:
        """Run one poll cycle. Returns the new snapshot, or None if the cycle was abandoned."""
        try:
            snapshot = await asyncio.wait_for(
                self._compute_snapshot(),
                timeout=self._settings.storage_poll_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._last_tick_error = "timeout"
            logging.warning(
                f"Storage load tick abandoned after {self._settings.storage_poll_timeout_seconds}s"
            )
            return None
        except Exception as e:
            self._last_tick_error = str(e)
            logging.error(f"Error in storage load tick: {e}")
            return None

        self._latest = snapshot
        self._last_tick_error = None
        await self._event_bus.publish(StorageLoadUpdatedEvent(snapshot=snapshot))
        return snapshot

    async def _compute_snapshot(self) -> StorageLoadSnapshot:
        blocks, sizes = await self._collector.collect()
        extended = await self._mapper.map_layout(self._layout, blocks, sizes)

        unmatched = sum(1 for entry in extended if entry.load == -1)
        logging.debug(
            f"Storage load tick: {len(extended)} entries, {unmatched} unmounted/undetectable"
        )
        return StorageLoadSnapshot(extended=extended, computed_at=datetime.now())

    def get_latest(self) -> Optional[StorageLoadSnapshot]:
        return self._latest

    def get_monitoring_status(self) -> dict:
        return {
            "is_running": self._is_running,
            "poll_interval_seconds": self._settings.storage_poll_interval_seconds,
            "layout_entries": len(self._layout),
            "last_computed_at": self._latest.computed_at.isoformat() if self._latest else None,
            "last_tick_error": self._last_tick_error,
        }
