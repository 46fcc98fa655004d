"""
Host-specific configuration and host filesystem helpers.

Handles selection of hostname-specific settings files and translation of
host paths when the service runs in a container with the host root mounted
under a prefix.
"""

import logging
import platform
import shutil
import socket
from pathlib import Path


def get_hostname() -> str:
    """Get the current hostname (without domain)."""
    return socket.gethostname().split('.')[0]


def get_hostname_settings_file() -> str:
    """
    Get the settings file for this host.

    Uses {hostname}-settings.env, creating it from settings.env the first
    time. Falls back to settings.env when neither can be used.
    """
    try:
        hostname = get_hostname()
        base_settings = Path("settings.env")
        host_settings = Path(f"{hostname}-settings.env")

        if host_settings.exists():
            logging.debug(f"Using existing host-specific configuration: {host_settings}")
            return str(host_settings)

        if not base_settings.exists():
            logging.debug("No settings.env found, using defaults and environment")
            return "settings.env"

        shutil.copy2(base_settings, host_settings)
        content = host_settings.read_text(encoding="utf-8")
        host_header = (
            f"# Host-specific configuration for: {hostname}\n"
            "# Auto-generated from settings.env\n\n"
        )
        host_settings.write_text(host_header + content, encoding="utf-8")
        logging.info(f"Created host-specific configuration: {host_settings}")
        return str(host_settings)

    except OSError as e:
        logging.error(f"Error handling host-specific settings: {e}")
        return "settings.env"


def list_all_settings_files() -> list[str]:
    settings_files = []
    if Path("settings.env").exists():
        settings_files.append("settings.env")
    for file_path in Path(".").glob("*-settings.env"):
        settings_files.append(str(file_path))
    return settings_files


def platform_is_windows() -> bool:
    return platform.system() == "Windows"


def from_host(path: str, host_prefix: str = "") -> str:
    """
    Translate a host path to where it is visible for this process.

    from_host("/boot", "/mnt/host") -> "/mnt/host/boot"
    """
    if not host_prefix:
        return path
    prefix = host_prefix.rstrip("/")
    if path == "/":
        return prefix or "/"
    return f"{prefix}/{path.lstrip('/')}"
