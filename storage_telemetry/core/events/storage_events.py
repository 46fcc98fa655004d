from dataclasses import dataclass

from storage_telemetry.core.events.domain_event import DomainEvent
from storage_telemetry.models import StorageLoadSnapshot


@dataclass(frozen=True)
class StorageLoadUpdatedEvent(DomainEvent):
    """Event published after every completed poll tick."""
    snapshot: StorageLoadSnapshot
