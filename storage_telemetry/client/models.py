from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator


class StorageLoadEntry(BaseModel):
    """
    Storage load as seen by an integration.

    Built from either payload shape; legacy entries only carry `load`.
    Mistyped optional fields are dropped instead of rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    load: Union[StrictInt, StrictFloat]
    temperature: Optional[float] = None
    overall_status: Optional[str] = Field(default=None, alias="overallStatus")
    healthy: Optional[bool] = None

    @field_validator("temperature", mode="before")
    @classmethod
    def _drop_non_numeric_temperature(cls, value: Any):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value

    @field_validator("overall_status", mode="before")
    @classmethod
    def _drop_non_string_status(cls, value: Any):
        return value if isinstance(value, str) else None

    @field_validator("healthy", mode="before")
    @classmethod
    def _drop_non_bool_healthy(cls, value: Any):
        return value if isinstance(value, bool) else None


class FileSystemUsage(BaseModel):
    device_name: str
    used: str
    available: str
    percentage: float


class SmartSummary(BaseModel):
    device_name: str
    temperature: Optional[float] = None
    overall_status: str = "N/A"
    healthy: bool = False


class StorageUsageReport(BaseModel):
    file_system: List[FileSystemUsage] = Field(default_factory=list)
    smart: List[SmartSummary] = Field(default_factory=list)
