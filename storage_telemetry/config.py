from pathlib import Path
from typing import Annotated, Set

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .utils.host_config import get_hostname_settings_file

DEFAULT_FS_TYPE_FILTER = {
    "cifs",
    "9p",
    "fuse.rclone",
    "fuse.mergerfs",
    "nfs4",
    "iso9660",
    "fuse.shfs",
    "autofs",
}


class Settings(BaseSettings):
    # SMART health polling
    enable_smart_temps: bool = True
    smartctl_path: str = "smartctl"
    smart_probe_timeout_seconds: float = 10.0

    # Storage load mapping
    fs_type_filter: Annotated[Set[str], NoDecode] = DEFAULT_FS_TYPE_FILTER
    storage_layout_file: str = "storage_layout.json"
    host_mount_prefix: str = ""  # e.g. /mnt/host when running in a container
    lsblk_path: str = "lsblk"

    # Poll cycle
    storage_poll_interval_seconds: int = 5
    storage_poll_timeout_seconds: float = 30.0

    # HTTP/WebSocket surface
    enable_storage_widget: bool = True  # Off -> /load/storage* answer with an empty body
    disable_integrations: bool = False
    routing_path: str = ""
    host: str = "0.0.0.0"
    port: int = 3001

    # Logging konfiguration
    log_level: str = "INFO"
    log_file_path: str = "logs/storage_telemetry.log"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(env_file=get_hostname_settings_file())

    @field_validator("fs_type_filter", mode="before")
    @classmethod
    def _split_fs_types(cls, value):
        if isinstance(value, str):
            return {item.strip() for item in value.split(",") if item.strip()}
        return value

    @field_validator("routing_path")
    @classmethod
    def _normalize_routing_path(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    @property
    def log_directory(self) -> Path:
        return Path(self.log_file_path).parent

    @property
    def config_file_info(self) -> dict:
        """Return information about which configuration file is being used."""
        from .utils.host_config import get_hostname, list_all_settings_files

        return {
            "hostname": get_hostname(),
            "active_config_file": get_hostname_settings_file(),
            "all_available_configs": list_all_settings_files(),
        }
