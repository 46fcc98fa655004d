from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SmartStatus(str, Enum):
    """Overall-health verdicts that smartctl reports and the aggregation understands"""

    PASSED = "PASSED"
    FAILED = "FAILED"


class StorageDisk(BaseModel):
    model_config = ConfigDict(frozen=True)

    device: str = Field(..., description="Kernel device name or path (sda, /dev/sda, nvme0n1)")


class StorageLayoutEntry(BaseModel):
    """
    En logisk storage-enhed fra den statiske topologi.

    Produceres én gang ved opstart af den eksterne static-info collector og
    ændres aldrig i processens levetid.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    size: int = Field(default=0, ge=0, description="Declared size in bytes")
    disks: List[StorageDisk] = Field(default_factory=list)
    virtual: bool = Field(default=False, description="Virtual mount (fs identified by device)")
    raid_label: Optional[str] = Field(default=None, alias="raidLabel")
    raid_name: Optional[str] = Field(default=None, alias="raidName")


class BlockDevice(BaseModel):
    """Snapshot of a kernel block device, re-fetched each poll tick."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    device: str = ""
    label: str = ""
    uuid: str = ""
    type: str = ""
    fs_type: str = Field(default="", alias="fsType")
    mount: str = ""


class FilesystemSize(BaseModel):
    """Usage of one mounted filesystem, re-fetched each poll tick."""

    mount: str = ""
    fs: str = ""
    type: str = ""
    used: int = Field(default=0, ge=0)
    size: int = Field(default=0, ge=0)


class SmartRecord(BaseModel):
    """
    SMART data for one physical device path.

    A field that is None is unknown. The empty record means the device could
    not be read at all.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    temperature: Optional[int] = None
    overall_status: Optional[str] = Field(default=None, alias="overallStatus")
    healthy: Optional[bool] = None

    @property
    def is_empty(self) -> bool:
        return self.temperature is None and self.overall_status is None and self.healthy is None


class StorageLoadExtendedEntry(BaseModel):
    """One output entry per layout entry, at the same index."""

    model_config = ConfigDict(populate_by_name=True)

    load: int = Field(..., description="Used bytes, or -1 when the entry is not mounted/detectable")
    temperature: Optional[int] = None
    overall_status: Optional[str] = Field(default=None, alias="overallStatus")
    healthy: Optional[bool] = None

    def to_wire(self) -> dict:
        # Unknown fields are omitted, never defaulted
        return self.model_dump(by_alias=True, exclude_none=True)


class StorageLoadSnapshot(BaseModel):
    """Result of one completed poll tick."""

    extended: List[StorageLoadExtendedEntry] = Field(default_factory=list)
    computed_at: datetime = Field(default_factory=datetime.now)

    def extended_payload(self) -> List[dict]:
        return [entry.to_wire() for entry in self.extended]
