"""
Utilities package for storage telemetry.
"""

from .host_config import from_host, get_hostname, get_hostname_settings_file, platform_is_windows

__all__ = ["from_host", "get_hostname", "get_hostname_settings_file", "platform_is_windows"]
