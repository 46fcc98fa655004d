"""
Integration client for the storage load endpoints.

Prefers the extended payload and falls back to the legacy numeric payload
when the server does not provide a valid extended one.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import httpx
from pydantic import StrictFloat, StrictInt, TypeAdapter, ValidationError

from .models import FileSystemUsage, SmartSummary, StorageLoadEntry, StorageUsageReport
from ..core.exceptions import PayloadDecodeError, ShapeMismatchError
from ..models import StorageLayoutEntry

_extended_adapter = TypeAdapter(List[StorageLoadEntry])
_legacy_adapter = TypeAdapter(List[Union[StrictInt, StrictFloat]])
_layout_adapter = TypeAdapter(List[StorageLayoutEntry])


@dataclass(frozen=True)
class ExtendedShape:
    entries: List[StorageLoadEntry]


@dataclass(frozen=True)
class LegacyShape:
    loads: List[Union[int, float]]

    @property
    def entries(self) -> List[StorageLoadEntry]:
        return [StorageLoadEntry(load=load) for load in self.loads]


@dataclass(frozen=True)
class EmptyShape:
    entries: List[StorageLoadEntry] = field(default_factory=list)


StoragePayload = Union[ExtendedShape, LegacyShape, EmptyShape]


def classify_extended_payload(body: str) -> Union[ExtendedShape, EmptyShape]:
    """
    Validate an extended payload against its schema.

    Raises ShapeMismatchError unless the body is empty or a JSON array of
    objects that all carry a numeric `load`.
    """
    if len(body) == 0:
        return EmptyShape()
    try:
        return ExtendedShape(entries=_extended_adapter.validate_json(body))
    except ValidationError as e:
        raise ShapeMismatchError(f"Not an extended storage load payload: {e.error_count()} error(s)") from e


def classify_legacy_payload(body: str) -> Union[LegacyShape, EmptyShape]:
    if len(body) == 0:
        return EmptyShape()
    try:
        return LegacyShape(loads=_legacy_adapter.validate_json(body))
    except ValidationError as e:
        raise PayloadDecodeError(f"Legacy storage load is not a numeric array: {body[:100]!r}") from e


def human_file_size(size: float) -> str:
    units = ["B", "kB", "MB", "GB", "TB", "PB"]
    value = float(size)
    index = 0
    while abs(value) >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g}{units[index]}"


def build_storage_usage_report(
    layout: Sequence[StorageLayoutEntry], storage_load: Sequence[StorageLoadEntry]
) -> StorageUsageReport:
    """
    Combine layout and load into per-entry usage and SMART summaries.

    Entries with load -1 (not mounted) are left out of the filesystem list but
    still get a SMART summary.
    """
    file_system = []
    smart = []

    for index, storage in enumerate(layout):
        device_name = f"Storage {index + 1}: ({', '.join(disk.device for disk in storage.disks)})"
        entry = storage_load[index] if index < len(storage_load) else None

        if entry is not None and entry.load != -1:
            load = entry.load
            file_system.append(
                FileSystemUsage(
                    device_name=device_name,
                    used=human_file_size(load),
                    available=f"{storage.size - load}" if load else f"{storage.size}",
                    percentage=(load / storage.size) * 100 if load and storage.size else 0,
                )
            )

        smart.append(
            SmartSummary(
                device_name=device_name,
                temperature=entry.temperature if entry else None,
                overall_status=(entry.overall_status if entry else None) or "N/A",
                healthy=bool(entry.healthy) if entry else False,
            )
        )

    return StorageUsageReport(file_system=file_system, smart=smart)


class StorageLoadClient:
    """
    Reads storage load from a storage telemetry server.

    Pass either `base_url`, and the client opens and closes its own
    connection pool, or an `http_client` that already carries the server
    base URL and stays owned by the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 5.0,
    ):
        if (base_url is None) == (http_client is None):
            raise ValueError("StorageLoadClient needs exactly one of base_url or http_client")

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)

    async def __aenter__(self) -> "StorageLoadClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_current_storage_load(self) -> List[StorageLoadEntry]:
        payload = await self.fetch_storage_payload()
        return payload.entries

    async def fetch_storage_payload(self) -> StoragePayload:
        """Extended payload if the server offers a valid one, otherwise the legacy payload."""
        response = await self._client.get("/load/storage-extended")
        if response.is_success:
            try:
                payload = classify_extended_payload(response.text)
                if isinstance(payload, ExtendedShape):
                    return payload
            except ShapeMismatchError as e:
                logging.info(f"{e} - falling back to legacy storage load")
        else:
            logging.debug(
                f"Extended storage load unavailable ({response.status_code}) - using legacy endpoint"
            )

        response = await self._client.get("/load/storage")
        response.raise_for_status()
        return classify_legacy_payload(response.text)

    async def get_static_info(self) -> List[StorageLayoutEntry]:
        response = await self._client.get("/info")
        response.raise_for_status()
        return _layout_adapter.validate_python(response.json().get("storage", []))

    async def get_storage_usage_report(self) -> StorageUsageReport:
        layout = await self.get_static_info()
        storage_load = await self.get_current_storage_load()
        return build_storage_usage_report(layout, storage_load)
