from .legacy import to_legacy_storage_load

__all__ = ["to_legacy_storage_load"]
