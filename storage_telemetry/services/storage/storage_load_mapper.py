"""
Storage Load Mapper - reconciles the static layout with live block devices
and filesystem sizes.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from .health_aggregation import aggregate_smart_records, smart_candidates
from ..smart.health_cache import SmartHealthCache
from ...models import (
    BlockDevice,
    FilesystemSize,
    SmartRecord,
    StorageDisk,
    StorageLayoutEntry,
    StorageLoadExtendedEntry,
)
from ...utils.host_config import from_host

UNMATCHED_LOAD = -1
LVM_FS_TYPE = "LVM2_member"


class StorageLoadMapper:
    """
    Computes one StorageLoadExtendedEntry per layout entry.

    Holds no state between calls besides the shared health cache.
    """

    def __init__(
        self,
        health_cache: Optional[SmartHealthCache],
        enable_smart_temps: bool = True,
        fs_type_filter: Iterable[str] = (),
        host_win32: bool = False,
        host_prefix: str = "",
    ):
        self._health_cache = health_cache
        self._enable_smart_temps = enable_smart_temps and health_cache is not None
        self._fs_type_filter = set(fs_type_filter)
        self._host_win32 = host_win32
        self._host_prefix = host_prefix

    async def map_layout(
        self,
        layout: Sequence[StorageLayoutEntry],
        blocks: Sequence[BlockDevice],
        sizes: Sequence[FilesystemSize],
    ) -> List[StorageLoadExtendedEntry]:
        valid_sizes = self._get_valid_sizes(sizes)

        entries = await asyncio.gather(
            *(self._map_entry(entry, blocks, sizes, valid_sizes) for entry in layout)
        )

        logging.debug(
            f"Mapped {len(entries)} storage entries from "
            f"{len(blocks)} block devices and {len(sizes)} filesystems"
        )
        return list(entries)

    async def _map_entry(
        self,
        entry: StorageLayoutEntry,
        blocks: Sequence[BlockDevice],
        sizes: Sequence[FilesystemSize],
        valid_sizes: List[FilesystemSize],
    ) -> StorageLoadExtendedEntry:
        health = await self._get_entry_health(entry.disks)

        if entry.virtual:
            load = self._get_virtual_load(entry, sizes)
        else:
            device_parts = self._get_blocks_for_disks(entry.disks, blocks)
            device_blocks = _unique_blocks(
                device_parts
                + self._get_blocks_for_raid(entry.raid_label, entry.raid_name, blocks)
                + self._get_blocks_for_xfs(device_parts, blocks)
            )
            is_host = any(self._is_root_mount(block.mount) for block in device_blocks)
            load = self._get_size_for_blocks(device_blocks, entry.size, is_host, valid_sizes)

        return StorageLoadExtendedEntry(
            load=load,
            temperature=health.temperature,
            overall_status=health.overall_status,
            healthy=health.healthy,
        )

    async def _get_entry_health(self, disks: Sequence[StorageDisk]) -> SmartRecord:
        if not self._enable_smart_temps or not disks:
            return SmartRecord()

        candidates = smart_candidates(disks)
        if not candidates:
            return SmartRecord()

        records = await asyncio.gather(
            *(self._health_cache.get(device_path) for device_path in candidates)
        )
        return aggregate_smart_records(records)

    @staticmethod
    def _get_virtual_load(entry: StorageLayoutEntry, sizes: Sequence[FilesystemSize]) -> int:
        if not entry.disks:
            return 0
        device = entry.disks[0].device
        virtual_size = next((size for size in sizes if size.fs == device), None)
        return virtual_size.used if virtual_size else 0

    def _get_valid_sizes(self, sizes: Sequence[FilesystemSize]) -> List[FilesystemSize]:
        host_root = from_host("/", self._host_prefix)
        return [
            size
            for size in sizes
            if (self._host_win32 or size.mount.startswith(host_root))
            and size.type not in self._fs_type_filter
        ]

    def _get_blocks_for_disks(
        self, disks: Sequence[StorageDisk], blocks: Sequence[BlockDevice]
    ) -> List[BlockDevice]:
        def matches(block: BlockDevice) -> bool:
            if self._host_win32:
                return any(disk.device == block.device for disk in disks)
            return any(block.name.startswith(disk.device) for disk in disks)

        return [block for block in blocks if matches(block)]

    @staticmethod
    def _get_blocks_for_raid(
        raid_label: Optional[str], raid_name: Optional[str], blocks: Sequence[BlockDevice]
    ) -> List[BlockDevice]:
        return [
            block
            for block in blocks
            if (raid_label and block.label.startswith(raid_label))
            or (raid_name and block.name.startswith(raid_name))
        ]

    @staticmethod
    def _get_blocks_for_xfs(
        parts: Sequence[BlockDevice], blocks: Sequence[BlockDevice]
    ) -> List[BlockDevice]:
        # XFS on md RAID carries the member partitions' uuid
        part_uuids = {part.uuid for part in parts if part.uuid}
        return [
            block
            for block in blocks
            if block.type == "md" and block.fs_type == "xfs" and block.uuid in part_uuids
        ]

    def _is_root_mount(self, mount: str) -> bool:
        if self._host_win32 or not mount:
            return False
        return mount == from_host("/", self._host_prefix) or mount.startswith(
            from_host("/boot", self._host_prefix)
        )

    def _get_size_for_blocks(
        self,
        device_blocks: List[BlockDevice],
        disk_size: int,
        is_host: bool,
        valid_sizes: List[FilesystemSize],
    ) -> int:
        def matches(size: FilesystemSize) -> bool:
            for block in device_blocks:
                matched_by_mount = bool(size.mount) and (
                    block.mount == size.mount
                    or (bool(block.uuid) and size.mount.endswith(f"dev-disk-by-uuid-{block.uuid}"))
                )
                matched_by_device = bool(block.device) and size.fs.startswith(block.device)
                matched_by_host = is_host and self._is_root_mount(size.mount)
                if matched_by_mount or matched_by_device or matched_by_host:
                    return True
            return False

        sizes = [size for size in valid_sizes if matches(size)]
        if not sizes:
            return UNMATCHED_LOAD

        calculated_size = sum(size.used for size in sizes)
        if any(block.fs_type == LVM_FS_TYPE for block in device_blocks):
            return calculated_size

        total_available = sum(size.size for size in sizes)
        pre_allocated = max(0, disk_size - total_available)
        return calculated_size + pre_allocated


def _unique_blocks(blocks: List[BlockDevice]) -> List[BlockDevice]:
    seen = set()
    unique = []
    for block in blocks:
        key = id(block)
        if key not in seen:
            seen.add(key)
            unique.append(block)
    return unique
