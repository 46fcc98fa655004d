"""
Live block-device and filesystem-size snapshots for each poll tick.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Tuple

import psutil

from ...models import BlockDevice, FilesystemSize

LSBLK_COLUMNS = "NAME,PATH,LABEL,UUID,TYPE,FSTYPE,MOUNTPOINT"


def parse_lsblk_output(output: str) -> List[BlockDevice]:
    """Flatten `lsblk -J` output depth-first (disk, then its partitions, raid members, lvm)."""
    data = json.loads(output)
    blocks: List[BlockDevice] = []

    def traverse(devices: List[Dict[str, Any]]) -> None:
        for dev in devices:
            blocks.append(
                BlockDevice(
                    name=dev.get("name") or "",
                    device=dev.get("path") or "",
                    label=dev.get("label") or "",
                    uuid=dev.get("uuid") or "",
                    type=dev.get("type") or "",
                    fs_type=dev.get("fstype") or "",
                    mount=dev.get("mountpoint") or "",
                )
            )
            if "children" in dev:
                traverse(dev["children"])

    traverse(data.get("blockdevices", []))
    return blocks


class SystemSnapshotCollector:
    def __init__(self, lsblk_path: str = "lsblk", timeout_seconds: float = 10.0):
        self._lsblk_path = lsblk_path
        self._timeout_seconds = timeout_seconds

    async def collect(self) -> Tuple[List[BlockDevice], List[FilesystemSize]]:
        blocks, sizes = await asyncio.gather(
            self.get_block_devices(), self.get_filesystem_sizes()
        )
        return blocks, sizes

    async def get_block_devices(self) -> List[BlockDevice]:
        cmd = [self._lsblk_path, "-J", "-b", "-o", LSBLK_COLUMNS]
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            logging.warning(f"Cannot run {self._lsblk_path}: {e}")
            return []

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError:
            logging.warning(f"lsblk timed out after {self._timeout_seconds}s")
            process.kill()
            await process.wait()
            return []

        if process.returncode != 0:
            error_msg = stderr.decode(errors="replace").strip() if stderr else "Unknown error"
            logging.warning(f"lsblk failed ({process.returncode}): {error_msg}")
            return []

        try:
            return parse_lsblk_output(stdout.decode(errors="replace"))
        except (json.JSONDecodeError, AttributeError) as e:
            logging.warning(f"Cannot parse lsblk output: {e}")
            return []

    async def get_filesystem_sizes(self) -> List[FilesystemSize]:
        return await asyncio.to_thread(_read_filesystem_sizes)


def _read_filesystem_sizes() -> List[FilesystemSize]:
    sizes: List[FilesystemSize] = []
    for part in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError:
            logging.debug(f"Skipping filesystem at {part.mountpoint} (unreadable)")
            continue
        sizes.append(
            FilesystemSize(
                mount=part.mountpoint,
                fs=part.device,
                type=part.fstype,
                used=int(usage.used),
                size=int(usage.total),
            )
        )
    return sizes
