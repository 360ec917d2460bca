"""External integrations for DEVX.

This package contains:
- claude_hooks: Claude Code hook installation into .claude/settings.local.json
- github: GitHub Releases client used by the update coordinator
"""

from devx.integrations.claude_hooks import (
    NOTIFICATION_HOOK_COMMAND,
    NOTIFICATION_MARKER,
    STOP_HOOK_COMMAND,
    STOP_MARKER,
    InstallResult,
    check_hooks_status,
    install_hooks,
    preview_changes,
)
from devx.integrations.github import GitHubReleaseSource, Release, ReleaseAsset

__all__ = [
    # Claude hooks
    "STOP_MARKER",
    "NOTIFICATION_MARKER",
    "STOP_HOOK_COMMAND",
    "NOTIFICATION_HOOK_COMMAND",
    "InstallResult",
    "install_hooks",
    "check_hooks_status",
    "preview_changes",
    # GitHub releases
    "GitHubReleaseSource",
    "Release",
    "ReleaseAsset",
]
