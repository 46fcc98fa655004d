from .models import StorageLoadEntry, StorageUsageReport
from .storage_load_client import (
    EmptyShape,
    ExtendedShape,
    LegacyShape,
    StorageLoadClient,
    classify_extended_payload,
    classify_legacy_payload,
)

__all__ = [
    "EmptyShape",
    "ExtendedShape",
    "LegacyShape",
    "StorageLoadClient",
    "StorageLoadEntry",
    "StorageUsageReport",
    "classify_extended_payload",
    "classify_legacy_payload",
]
