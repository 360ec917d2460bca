"""Settings dataclass for DEVX configuration.

This module defines the Settings dataclass that holds all configuration
values consumed by the core commands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Settings:
    """Configuration settings for DEVX.

    All settings have sensible defaults and can be loaded from the
    configuration files (~/.config/devx/config, .devx) or from
    DEVX_-prefixed environment variables.

    Attributes:
        editor: Editor command checked by ``devx check-deps`` (empty = use $VISUAL/$EDITOR)
        update_check_enabled: Whether commands may check upstream for a newer release
        update_check_interval_hours: Minimum hours between cached update checks
        http_timeout_seconds: Timeout for requests to the release feed
        probe_timeout_seconds: Timeout for each ``<tool> --version`` probe
    """

    editor: str = ""
    update_check_enabled: bool = True
    update_check_interval_hours: int = 24
    http_timeout_seconds: float = 10.0
    probe_timeout_seconds: float = 5.0

    # Config key to attribute mapping
    _key_mapping: dict[str, str] = field(
        default_factory=lambda: {
            "EDITOR": "editor",
            "UPDATE_CHECK_ENABLED": "update_check_enabled",
            "UPDATE_CHECK_INTERVAL_HOURS": "update_check_interval_hours",
            "HTTP_TIMEOUT_SECONDS": "http_timeout_seconds",
            "PROBE_TIMEOUT_SECONDS": "probe_timeout_seconds",
        },
        repr=False,
    )

    def get_attribute_for_key(self, key: str) -> str | None:
        """Get the attribute name for a config key."""
        return self._key_mapping.get(key)

    def get_key_for_attribute(self, attr: str) -> str | None:
        """Get the config key for an attribute name."""
        for key, value in self._key_mapping.items():
            if value == attr:
                return key
        return None

    @classmethod
    def get_config_keys(cls) -> list[str]:
        """Get list of all valid configuration keys."""
        temp = cls()
        return list(temp._key_mapping.keys())


# Per-user configuration directory; Path.home() honors $HOME
CONFIG_DIR = Path.home() / ".config" / "devx"
CONFIG_FILE = CONFIG_DIR / "config"

# Prefix for environment variable overrides (DEVX_EDITOR, ...)
ENV_PREFIX = "DEVX_"


__all__ = [
    "Settings",
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ENV_PREFIX",
]
