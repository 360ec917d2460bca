"""Update coordination for DEVX.

This package contains:
- checker: Upstream release checks, caching and notification bookkeeping
- detector: Install method detection and upgrade instructions
- installer: In-place self-update of the running binary
- state: Persisted update check state
"""

from devx.update.checker import (
    DEFAULT_CHECK_INTERVAL,
    UpdateCoordinator,
    UpdateInfo,
    notify_if_update_available,
)
from devx.update.detector import (
    InstallMethod,
    can_self_update,
    detect_install_method,
    update_instructions,
)
from devx.update.installer import perform_update
from devx.update.state import UpdateCheckState, UpdateStateStore, should_check

__all__ = [
    "DEFAULT_CHECK_INTERVAL",
    "UpdateCoordinator",
    "UpdateInfo",
    "notify_if_update_available",
    "InstallMethod",
    "detect_install_method",
    "can_self_update",
    "update_instructions",
    "perform_update",
    "UpdateCheckState",
    "UpdateStateStore",
    "should_check",
]
