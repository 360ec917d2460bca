"""Claude Code hook installation for DEVX.

This module merges devx's session-flag hooks into a project's
``.claude/settings.local.json`` without disturbing anything else the
user keeps there (permissions, other hook events, unknown keys).

The settings document is carried as a generic JSON tree. A typed view of
the ``hooks`` section is parsed from that tree for inspection only; on
write, the canonical hook groups are spliced back into the tree so keys
the typed view does not know about survive verbatim and in order.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from devx.utils.errors import (
    BackupFailedError,
    MalformedSettingsError,
    SettingsError,
    WriteFailedError,
)
from devx.utils.logging import log_message

CLAUDE_DIR_NAME = ".claude"
SETTINGS_FILE_NAME = "settings.local.json"
BACKUP_SUFFIX = ".backup-"

STOP_MARKER = "Claude Done"
NOTIFICATION_MARKER = "Claude is waiting for your input"

STOP_HOOK_COMMAND = f"devx session flag --force $SESSION_NAME '{STOP_MARKER}'"
NOTIFICATION_HOOK_COMMAND = f"devx session flag --force $SESSION_NAME '{NOTIFICATION_MARKER}'"

STOP_EVENT = "Stop"
NOTIFICATION_EVENT = "Notification"

DIR_MODE = 0o755
FILE_MODE = 0o644


@dataclass(frozen=True)
class HookCommand:
    """A single ``{"type": ..., "command": ...}`` hook entry."""

    type: str
    command: str


@dataclass(frozen=True)
class HookGroup:
    """One entry of a hook-event sequence.

    Attributes:
        hooks: Command hooks run for this group
        matcher: Optional tool matcher; absent for Stop/Notification
    """

    hooks: tuple[HookCommand, ...]
    matcher: str | None = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.matcher is not None:
            data["matcher"] = self.matcher
        data["hooks"] = [{"type": h.type, "command": h.command} for h in self.hooks]
        return data

    def has_command_containing(self, marker: str) -> bool:
        return any(h.type == "command" and marker in h.command for h in self.hooks)


@dataclass
class HooksView:
    """Typed view over the ``hooks`` section of a settings document.

    Only the events devx manages are parsed; other events stay opaque
    in the underlying tree.
    """

    stop: list[HookGroup] = field(default_factory=list)
    notification: list[HookGroup] = field(default_factory=list)

    @property
    def is_installed(self) -> bool:
        """True when both canonical markers are present."""
        return any(g.has_command_containing(STOP_MARKER) for g in self.stop) and any(
            g.has_command_containing(NOTIFICATION_MARKER) for g in self.notification
        )


@dataclass
class InstallResult:
    """Outcome of ``install_hooks``.

    Exactly one of created/updated/already_exists is set.
    """

    settings_path: Path
    created: bool = False
    updated: bool = False
    already_exists: bool = False
    backup_created: bool = False
    backup_path: Path | None = None
    message: str = ""


STOP_GROUP = HookGroup(hooks=(HookCommand(type="command", command=STOP_HOOK_COMMAND),))
NOTIFICATION_GROUP = HookGroup(
    hooks=(HookCommand(type="command", command=NOTIFICATION_HOOK_COMMAND),)
)


def canonical_hooks() -> dict[str, Any]:
    """The hooks payload devx installs."""
    return {
        STOP_EVENT: [STOP_GROUP.to_json()],
        NOTIFICATION_EVENT: [NOTIFICATION_GROUP.to_json()],
    }


def settings_path_for(project_dir: Path) -> Path:
    return Path(project_dir) / CLAUDE_DIR_NAME / SETTINGS_FILE_NAME


def _parse_groups(raw: Any, event: str, path: Path) -> list[HookGroup]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedSettingsError(
            f"reading settings: hooks.{event} in {path} must be a list", path=path
        )

    groups: list[HookGroup] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise MalformedSettingsError(
                f"reading settings: hooks.{event} in {path} contains a non-object group",
                path=path,
            )
        raw_hooks = entry.get("hooks", [])
        if not isinstance(raw_hooks, list):
            raise MalformedSettingsError(
                f"reading settings: hooks.{event}[].hooks in {path} must be a list", path=path
            )
        commands = []
        for hook in raw_hooks:
            if not isinstance(hook, dict):
                raise MalformedSettingsError(
                    f"reading settings: hooks.{event} in {path} contains a non-object hook",
                    path=path,
                )
            commands.append(
                HookCommand(type=str(hook.get("type", "")), command=str(hook.get("command", "")))
            )
        matcher = entry.get("matcher")
        groups.append(
            HookGroup(hooks=tuple(commands), matcher=matcher if isinstance(matcher, str) else None)
        )
    return groups


def parse_hooks_view(document: dict[str, Any], path: Path) -> HooksView:
    """Build the typed hooks view from a parsed settings document.

    Raises:
        MalformedSettingsError: If the hooks section has an unexpected shape
    """
    hooks = document.get("hooks")
    if hooks is None:
        return HooksView()
    if not isinstance(hooks, dict):
        raise MalformedSettingsError(
            f"reading settings: 'hooks' in {path} must be an object", path=path
        )
    return HooksView(
        stop=_parse_groups(hooks.get(STOP_EVENT), STOP_EVENT, path),
        notification=_parse_groups(hooks.get(NOTIFICATION_EVENT), NOTIFICATION_EVENT, path),
    )


def load_settings(path: Path) -> dict[str, Any]:
    """Read and parse a settings document.

    Raises:
        MalformedSettingsError: If the file is not a JSON object
        SettingsError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedSettingsError(
            f"reading settings: {path} is not valid UTF-8: {e}", path=path
        ) from e
    except OSError as e:
        raise SettingsError(f"reading settings: failed to read {path}: {e}", path=path) from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSettingsError(
            f"reading settings: failed to parse {path}: {e}", path=path
        ) from e
    if not isinstance(document, dict):
        raise MalformedSettingsError(
            f"reading settings: {path} must contain a JSON object", path=path
        )
    return document


def merge_canonical_hooks(document: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``document`` with the canonical hooks spliced in.

    Stop and Notification are replaced with one canonical group each;
    every other hook event and top-level key is preserved in order.
    """
    merged = dict(document)
    existing = document.get("hooks")
    hooks: dict[str, Any] = dict(existing) if isinstance(existing, dict) else {}
    hooks.update(canonical_hooks())
    merged["hooks"] = hooks
    return merged


def serialize_settings(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _backup_path_for(settings_path: Path) -> Path:
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    candidate = settings_path.with_name(f"{settings_path.name}{BACKUP_SUFFIX}{timestamp}")
    counter = 1
    while candidate.exists():
        candidate = settings_path.with_name(
            f"{settings_path.name}{BACKUP_SUFFIX}{timestamp}-{counter}"
        )
        counter += 1
    return candidate


def create_backup(settings_path: Path) -> Path:
    """Copy the settings file byte-for-byte next to itself.

    Raises:
        BackupFailedError: If the copy fails
    """
    backup_path = _backup_path_for(settings_path)
    try:
        shutil.copy2(settings_path, backup_path)
    except OSError as e:
        raise BackupFailedError(
            f"installing hooks: failed to back up {settings_path} to {backup_path}: {e}",
            path=settings_path,
        ) from e
    log_message(f"Backed up {settings_path} to {backup_path}")
    return backup_path


def write_settings_atomic(settings_path: Path, document: dict[str, Any]) -> None:
    """Write the settings document via a temp sibling and rename.

    Readers see either the old document or the new one, never a partial
    write. The temp file is removed on failure.

    Raises:
        WriteFailedError: If writing or renaming fails
    """
    data = serialize_settings(document)
    try:
        fd, temp_path = tempfile.mkstemp(
            dir=settings_path.parent,
            prefix=f".{settings_path.name}.",
            suffix=".tmp",
        )
    except OSError as e:
        raise WriteFailedError(
            f"installing hooks: failed to create temp file next to {settings_path}: {e}",
            path=settings_path,
        ) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.chmod(temp_path, FILE_MODE)
        os.replace(temp_path, settings_path)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise WriteFailedError(
            f"installing hooks: failed to write {settings_path}: {e}", path=settings_path
        ) from e


def install_hooks(project_dir: Path, force: bool = False, backup: bool = True) -> InstallResult:
    """Install devx's Claude hooks into a project's local settings.

    Args:
        project_dir: Project root; settings live in ``<project>/.claude``
        force: Rewrite the hooks even when they are already installed
        backup: Copy the existing settings file before modifying it

    Returns:
        InstallResult describing what happened

    Raises:
        MalformedSettingsError: Existing settings could not be parsed
        BackupFailedError: Backup copy failed; nothing was written
        WriteFailedError: Writing the new document failed
    """
    settings_path = settings_path_for(project_dir)
    claude_dir = settings_path.parent
    result = InstallResult(settings_path=settings_path)

    if not settings_path.exists():
        try:
            claude_dir.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise WriteFailedError(
                f"installing hooks: failed to create {claude_dir}: {e}", path=settings_path
            ) from e
        write_settings_atomic(settings_path, {"hooks": canonical_hooks()})
        log_message(f"Created {settings_path} with Claude hooks")
        result.created = True
        result.message = "Claude hooks installed successfully"
        return result

    document = load_settings(settings_path)
    view = parse_hooks_view(document, settings_path)

    if view.is_installed and not force:
        result.already_exists = True
        result.message = "Claude hooks are already installed and match expected configuration"
        return result

    if backup:
        result.backup_path = create_backup(settings_path)
        result.backup_created = True

    write_settings_atomic(settings_path, merge_canonical_hooks(document))
    log_message(f"Updated {settings_path} with Claude hooks (force={force})")
    result.updated = True
    result.message = "Claude hooks updated successfully"
    return result


def check_hooks_status(project_dir: Path) -> bool:
    """Report whether the canonical hooks are installed. No side effects.

    Raises:
        MalformedSettingsError: Existing settings could not be parsed
    """
    settings_path = settings_path_for(project_dir)
    if not settings_path.exists():
        return False
    document = load_settings(settings_path)
    return parse_hooks_view(document, settings_path).is_installed


def preview_changes(project_dir: Path, backup: bool = True) -> str:
    """Describe what ``install_hooks`` would do, without writing anything.

    Raises:
        MalformedSettingsError: Existing settings could not be parsed
    """
    settings_path = settings_path_for(project_dir)
    relative = f"{CLAUDE_DIR_NAME}/{SETTINGS_FILE_NAME}"
    lines: list[str] = []

    if not settings_path.exists():
        if not settings_path.parent.exists():
            lines.append(f"Will create: {CLAUDE_DIR_NAME}/")
        lines.append(f"Will create: {relative}")
        lines.append("")
        lines.append("New file contents:")
        document: dict[str, Any] = {"hooks": canonical_hooks()}
    else:
        existing = load_settings(settings_path)
        if parse_hooks_view(existing, settings_path).is_installed:
            lines.append(f"No changes needed: hooks already installed in {relative}")
            lines.append("Use --force to reinstall them anyway.")
            lines.append("")
            lines.append("Current file contents:")
            document = existing
        else:
            lines.append(f"Will update: {relative}")
            if backup:
                lines.append(f"Will create: {relative}{BACKUP_SUFFIX}<UTC timestamp>")
            lines.append("")
            lines.append("Updated file contents:")
            document = merge_canonical_hooks(existing)

    lines.append("```json")
    lines.append(serialize_settings(document).rstrip("\n"))
    lines.append("```")
    return "\n".join(lines) + "\n"


__all__ = [
    "STOP_MARKER",
    "NOTIFICATION_MARKER",
    "STOP_HOOK_COMMAND",
    "NOTIFICATION_HOOK_COMMAND",
    "HookCommand",
    "HookGroup",
    "HooksView",
    "InstallResult",
    "canonical_hooks",
    "settings_path_for",
    "load_settings",
    "parse_hooks_view",
    "merge_canonical_hooks",
    "create_backup",
    "write_settings_atomic",
    "install_hooks",
    "check_hooks_status",
    "preview_changes",
]
