import re
from typing import Iterable, List

from ...models import SmartRecord, SmartStatus, StorageDisk

SATA_DEVICE_PATTERN = re.compile(r"^/dev/sd[a-z]+$", re.IGNORECASE)


def normalize_device_path(device: str) -> str:
    return device if device.startswith("/dev/") else f"/dev/{device}"


def smart_candidates(disks: Iterable[StorageDisk]) -> List[str]:
    """Distinct SATA-style device paths backing an entry, in first-seen order."""
    paths = dict.fromkeys(normalize_device_path(disk.device) for disk in disks)
    return [path for path in paths if SATA_DEVICE_PATTERN.match(path)]


def aggregate_smart_records(records: Iterable[SmartRecord]) -> SmartRecord:
    """
    Combine per-disk records for one logical entry.

    The hottest disk sets the temperature and a single FAILED disk fails the
    whole entry.
    """
    records = list(records)

    temperatures = [r.temperature for r in records if r.temperature is not None]
    temperature = max(temperatures) if temperatures else None

    statuses = {r.overall_status for r in records}
    if SmartStatus.FAILED.value in statuses:
        return SmartRecord(temperature=temperature, overall_status=SmartStatus.FAILED.value, healthy=False)
    if SmartStatus.PASSED.value in statuses:
        return SmartRecord(temperature=temperature, overall_status=SmartStatus.PASSED.value, healthy=True)

    return SmartRecord(temperature=temperature)
