"""
SMART Health Cache - TTL cache in front of SmartProber.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

from .smart_prober import SmartProber
from ...core.exceptions import ProbeError
from ...models import SmartRecord

SMART_CACHE_TTL_SECONDS = 60.0


@dataclass(frozen=True)
class CachedSmartRecord:
    """Record and the time it was obtained, always replaced together."""

    record: SmartRecord
    timestamp: float


class SmartHealthCache:
    """
    Caches SMART records per device path for a fixed TTL.

    Probe failures are cached as empty records so an unreadable device is
    retried once per TTL instead of on every poll tick. Concurrent misses for
    the same device share one probe.
    """

    def __init__(
        self,
        prober: SmartProber,
        ttl_seconds: float = SMART_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._prober = prober
        self.ttl_seconds = ttl_seconds
        self._clock = clock

        self._entries: Dict[str, CachedSmartRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def get(self, device_path: str) -> SmartRecord:
        cached = self._get_fresh(device_path)
        if cached is not None:
            logging.debug(f"Using cached SMART record for {device_path}")
            return cached.record

        lock = self._locks.setdefault(device_path, asyncio.Lock())
        async with lock:
            cached = self._get_fresh(device_path)
            if cached is not None:
                return cached.record

            try:
                record = await self._prober.probe(device_path)
            except ProbeError as e:
                logging.warning(f"{e} - reporting unknown SMART data for {self.ttl_seconds:.0f}s")
                record = SmartRecord()

            self._entries[device_path] = CachedSmartRecord(record=record, timestamp=self._clock())
            return record

    def clear(self) -> None:
        self._entries.clear()
        logging.debug("SMART health cache cleared")

    def get_cache_info(self) -> dict:
        """Get information about cache state (for debugging/monitoring)."""
        now = self._clock()
        return {
            "ttl_seconds": self.ttl_seconds,
            "devices": {
                path: {
                    "age_seconds": round(now - entry.timestamp, 1),
                    "is_valid": now - entry.timestamp < self.ttl_seconds,
                    "is_empty": entry.record.is_empty,
                }
                for path, entry in self._entries.items()
            },
        }

    def _get_fresh(self, device_path: str):
        entry = self._entries.get(device_path)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl_seconds:
            return None
        return entry
