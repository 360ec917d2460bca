"""External tool availability checks for DEVX.

Each dependency is looked up on PATH and asked for ``--version``; the
first non-empty output line becomes the reported version. Failures are
recorded per result and never abort a batch.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum

from devx.config.settings import Settings
from devx.utils.logging import log_command, log_message

DEFAULT_PROBE_TIMEOUT = 5.0


class ProbeErrorKind(Enum):
    """Why a probe could not produce a clean result."""

    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    SPAWN_FAILED = "spawn_failed"


@dataclass(frozen=True)
class Dependency:
    """An external command-line tool the workflow relies on.

    Attributes:
        name: Display name
        command: Executable name as found on PATH
        required: Whether devx features break without it
        description: What the tool is used for
        install_hint: How to install it
    """

    name: str
    command: str
    required: bool
    description: str
    install_hint: str


@dataclass
class ProbeResult:
    """Outcome of probing one dependency.

    ``available`` is True once the command resolved on PATH and could be
    spawned. A probe that timed out is still available, with
    ``error=TIMEOUT`` and whatever version text arrived before the kill.
    """

    dependency: Dependency
    available: bool
    version: str = ""
    error: ProbeErrorKind | None = None
    error_message: str = ""


DEPENDENCIES: tuple[Dependency, ...] = (
    Dependency(
        name="Git",
        command="git",
        required=True,
        description="Version control system for managing worktrees",
        install_hint="Install with: brew install git",
    ),
    Dependency(
        name="Tmux",
        command="tmux",
        required=True,
        description="Terminal multiplexer for session management",
        install_hint="Install with: brew install tmux",
    ),
    Dependency(
        name="Tmuxp",
        command="tmuxp",
        required=True,
        description="Tmux session manager",
        install_hint="Install with: pipx install tmuxp",
    ),
    Dependency(
        name="Caddy",
        command="caddy",
        required=True,
        description="Web server for local development routing",
        install_hint="Install with: brew install caddy",
    ),
    Dependency(
        name="Direnv",
        command="direnv",
        required=False,
        description="Environment variable management (recommended)",
        install_hint="Install with: brew install direnv",
    ),
)


def list_dependencies() -> list[Dependency]:
    """Return the static dependency list, in display order."""
    return list(DEPENDENCIES)


def first_nonempty_line(output: str | bytes | None) -> str:
    if not output:
        return ""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    for line in output.splitlines():
        if line.strip():
            return line.strip()
    return ""


def probe(dependency: Dependency, timeout: float = DEFAULT_PROBE_TIMEOUT) -> ProbeResult:
    """Check whether a dependency is installed and extract its version.

    Args:
        dependency: The tool to probe
        timeout: Seconds to wait for ``--version`` before killing the child

    Returns:
        ProbeResult for the dependency
    """
    executable = shutil.which(dependency.command)
    if executable is None:
        return ProbeResult(
            dependency=dependency,
            available=False,
            error=ProbeErrorKind.NOT_FOUND,
            error_message=f"{dependency.command} not found in PATH",
        )

    command = f"{dependency.command} --version"
    try:
        completed = subprocess.run(
            [executable, "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        log_command(command, -1)
        return ProbeResult(
            dependency=dependency,
            available=True,
            version=first_nonempty_line(e.output),
            error=ProbeErrorKind.TIMEOUT,
            error_message=f"{command} timed out after {timeout}s",
        )
    except OSError as e:
        log_message(f"Failed to run {command}: {e}")
        return ProbeResult(
            dependency=dependency,
            available=False,
            error=ProbeErrorKind.SPAWN_FAILED,
            error_message=f"failed to run {command}: {e}",
        )

    log_command(command, completed.returncode)
    return ProbeResult(
        dependency=dependency,
        available=True,
        version=first_nonempty_line(completed.stdout),
    )


def probe_all(timeout: float = DEFAULT_PROBE_TIMEOUT) -> list[ProbeResult]:
    """Probe every dependency, preserving ``list_dependencies`` order."""
    return [probe(dep, timeout=timeout) for dep in list_dependencies()]


def editor_command(settings: Settings | None = None) -> str:
    """Resolve the configured editor.

    Precedence: config EDITOR key, then $VISUAL, then $EDITOR.
    """
    if settings is not None and settings.editor.strip():
        return settings.editor.strip()
    for var in ("VISUAL", "EDITOR"):
        value = os.environ.get(var, "").strip()
        if value:
            return value
    return ""


def _executable_of(command_line: str) -> str:
    """First word of an editor command line ("code --wait" -> "code")."""
    try:
        parts = shlex.split(command_line)
    except ValueError:
        parts = command_line.split()
    return parts[0] if parts else command_line


def resolve_editor(
    settings: Settings | None = None,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> ProbeResult | None:
    """Probe the configured editor, or return None if none is configured."""
    command_line = editor_command(settings)
    if not command_line:
        return None

    dependency = Dependency(
        name="Editor",
        command=_executable_of(command_line),
        required=False,
        description=f"Configured editor: {command_line}",
        install_hint=f"Check your editor configuration or install {_executable_of(command_line)}",
    )
    return probe(dependency, timeout=timeout)


def summarize_missing(
    results: list[ProbeResult],
    editor_result: ProbeResult | None = None,
) -> tuple[list[str], list[str]]:
    """Split unavailable dependencies into (required, optional) name lists."""
    missing_required: list[str] = []
    missing_optional: list[str] = []
    for result in results:
        if result.available:
            continue
        if result.dependency.required:
            missing_required.append(result.dependency.name)
        else:
            missing_optional.append(result.dependency.name)
    if editor_result is not None and not editor_result.available:
        missing_optional.append(editor_result.dependency.name)
    return missing_required, missing_optional


__all__ = [
    "DEFAULT_PROBE_TIMEOUT",
    "DEPENDENCIES",
    "Dependency",
    "ProbeErrorKind",
    "ProbeResult",
    "list_dependencies",
    "probe",
    "probe_all",
    "editor_command",
    "resolve_editor",
    "summarize_missing",
]
