"""Detect how the running devx binary was installed.

The install method decides whether ``devx update`` may replace the
binary in place or should defer to a package manager.
"""

from __future__ import annotations

import os
import shutil
import sys
from enum import Enum
from pathlib import Path

from devx.utils.logging import log_message


class InstallMethod(Enum):
    """How devx got onto this machine."""

    HOMEBREW = "homebrew"
    TOOLCHAIN = "toolchain"
    MANUAL = "manual"
    UNKNOWN = "unknown"


CELLAR_MARKERS = (
    "/usr/local/Cellar/devx",
    "/opt/homebrew/Cellar/devx",
    "/home/linuxbrew/.linuxbrew/Cellar/devx",
)

BREW_BIN_LOCATIONS = (
    "/usr/local/bin/devx",
    "/opt/homebrew/bin/devx",
    "/home/linuxbrew/.linuxbrew/bin/devx",
)

# Language toolchain install directories and their upgrade commands
TOOLCHAIN_UPGRADES = {
    "/go/bin/": "go install github.com/jfox85/devx@latest",
    "/pipx/venvs/": "pipx upgrade devx",
    "/uv/tools/": "uv tool upgrade devx",
}
TOOLCHAIN_MARKERS = tuple(TOOLCHAIN_UPGRADES)

PYTHON_SOURCE_SUFFIXES = (".py", ".pyc")


def current_executable() -> Path:
    """Path of the running devx executable, before symlink resolution.

    Raises:
        OSError: If the executable cannot be located
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable)
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        raise FileNotFoundError("cannot determine the devx executable")
    found = shutil.which(argv0)
    return Path(found or argv0)


def _is_homebrew_path(resolved: str) -> bool:
    if any(marker in resolved for marker in CELLAR_MARKERS):
        return True
    # custom brew prefixes
    return "/Cellar/devx/" in resolved


def _links_into_cellar(path: Path) -> bool:
    """True if ``path`` is a brew-managed symlink pointing into a Cellar."""
    if path.as_posix() not in BREW_BIN_LOCATIONS:
        return False
    try:
        target = os.readlink(path)
    except OSError:
        return False
    return "/Cellar/" in Path(target).as_posix()


def is_python_launch(path: Path) -> bool:
    """True if ``path`` is a Python source file or the interpreter itself.

    This is what argv[0] looks like under ``python -m devx``; such a path
    is never a devx binary that can be replaced.
    """
    if path.suffix.lower() in PYTHON_SOURCE_SUFFIXES:
        return True
    if not sys.executable:
        return False
    try:
        return os.path.samefile(path, sys.executable)
    except OSError:
        return False


def _toolchain_marker(resolved: str) -> str | None:
    for marker in TOOLCHAIN_MARKERS:
        if marker in resolved:
            return marker
    return None


def _resolve_executable(executable: Path | str | None) -> tuple[Path, str]:
    path = Path(executable) if executable is not None else current_executable()
    return path, path.resolve(strict=True).as_posix()


def detect_install_method(executable: Path | str | None = None) -> InstallMethod:
    """Classify the install method of ``executable`` (default: running binary).

    Never raises; any failure to locate or resolve the executable yields
    ``InstallMethod.UNKNOWN``, as does running from Python sources.
    """
    try:
        path, resolved = _resolve_executable(executable)
    except OSError as e:
        log_message(f"Could not resolve devx executable: {e}")
        return InstallMethod.UNKNOWN

    if is_python_launch(path):
        log_message(f"devx is running from Python sources ({path})")
        return InstallMethod.UNKNOWN
    if _is_homebrew_path(resolved):
        return InstallMethod.HOMEBREW
    if _toolchain_marker(resolved) is not None:
        return InstallMethod.TOOLCHAIN
    if _links_into_cellar(path):
        return InstallMethod.HOMEBREW
    return InstallMethod.MANUAL


def can_self_update(method: InstallMethod | None = None) -> bool:
    """Package-manager installs must not have their binary replaced in place."""
    if method is None:
        method = detect_install_method()
    return method is not InstallMethod.HOMEBREW


def _toolchain_upgrade(executable: Path | str | None) -> str:
    try:
        _, resolved = _resolve_executable(executable)
    except OSError:
        resolved = ""
    marker = _toolchain_marker(resolved)
    if marker is not None:
        return TOOLCHAIN_UPGRADES[marker]
    return " or ".join(TOOLCHAIN_UPGRADES.values())


def update_instructions(
    method: InstallMethod | None = None,
    executable: Path | str | None = None,
) -> str:
    """Human-readable upgrade command for the install method.

    Toolchain installs get the command of the toolchain that owns
    ``executable`` (default: running binary).
    """
    if method is None:
        method = detect_install_method(executable)
    if method is InstallMethod.HOMEBREW:
        return "brew upgrade devx"
    if method is InstallMethod.TOOLCHAIN:
        return _toolchain_upgrade(executable)
    if method is InstallMethod.MANUAL:
        return "Run 'devx update' to update to the latest version"
    return "Please reinstall devx using your preferred method"


__all__ = [
    "InstallMethod",
    "current_executable",
    "detect_install_method",
    "is_python_launch",
    "can_self_update",
    "update_instructions",
]
