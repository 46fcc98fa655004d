# storage_telemetry/core/exceptions.py


class ProbeError(Exception):
    """Raised when smartctl cannot produce data for a device (missing tool, non-zero exit, timeout)."""

    def __init__(self, device_path: str, reason: str):
        self.device_path = device_path
        self.reason = reason
        super().__init__(f"SMART probe failed for {device_path}: {reason}")


class ShapeMismatchError(Exception):
    """Raised when an extended storage-load payload does not have the extended shape."""

    pass


class PayloadDecodeError(Exception):
    """Raised when a legacy storage-load payload is not a numeric JSON array."""

    pass


class LayoutLoadError(Exception):
    """Raised when the static storage layout file cannot be parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid storage layout in {path}: {reason}")
