"""
Storage load module.

Components:
- StorageLoadMapper: layout + block devices + filesystem sizes -> per-entry load and health
- SystemSnapshotCollector: live block device / filesystem size snapshots
- load_storage_layout: static layout input
"""

from .layout_loader import load_storage_layout
from .storage_load_mapper import UNMATCHED_LOAD, StorageLoadMapper
from .system_snapshot import SystemSnapshotCollector

__all__ = ['StorageLoadMapper', 'SystemSnapshotCollector', 'load_storage_layout', 'UNMATCHED_LOAD']
