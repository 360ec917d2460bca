"""Configuration management for DEVX.

This package contains:
- settings: Settings dataclass with configuration fields
- manager: ConfigManager class for loading/saving configuration

Configuration Format
====================
Configuration files use flat KEY=VALUE (environment variable style):

    EDITOR="code --wait"
    UPDATE_CHECK_INTERVAL_HOURS=12

Every key can be overridden with a DEVX_-prefixed environment variable.
"""

from devx.config.manager import ConfigManager
from devx.config.settings import CONFIG_DIR, CONFIG_FILE, ENV_PREFIX, Settings

__all__ = [
    "Settings",
    "ConfigManager",
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ENV_PREFIX",
]
