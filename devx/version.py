"""Build and runtime version information for DEVX."""

from __future__ import annotations

import platform
import sys
from dataclasses import asdict, dataclass

import devx

_UNSET = ("", "unknown")


@dataclass(frozen=True)
class VersionInfo:
    """Version details reported by ``devx version``.

    Attributes:
        version: Release version set at build time ("dev" for local builds)
        git_commit: Commit hash the build was made from
        build_date: Build timestamp
        python_version: Interpreter version running the tool
        os: Operating system name (darwin, linux, windows)
        arch: Machine architecture (amd64, arm64, ...)
    """

    version: str
    git_commit: str
    build_date: str
    python_version: str
    os: str
    arch: str

    def __str__(self) -> str:
        result = f"devx version {self.version}"
        if self.git_commit not in _UNSET:
            result += f" ({self.git_commit[:7]})"
        if self.build_date not in _UNSET:
            result += f" built {self.build_date}"
        return result

    def detailed(self) -> str:
        """Multi-line version report."""
        return (
            "devx version information:\n"
            f"  Version:        {self.version}\n"
            f"  Git commit:     {self.git_commit}\n"
            f"  Build date:     {self.build_date}\n"
            f"  Python version: {self.python_version}\n"
            f"  OS/Arch:        {self.os}/{self.arch}"
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def host_os() -> str:
    """Operating system name in release-asset form."""
    if sys.platform.startswith("darwin"):
        return "darwin"
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def host_arch() -> str:
    """Machine architecture in release-asset form."""
    machine = platform.machine().lower()
    aliases = {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "i386": "386",
        "i686": "386",
    }
    return aliases.get(machine, machine)


def get_version_info() -> VersionInfo:
    return VersionInfo(
        version=devx.__version__,
        git_commit=devx.__git_commit__,
        build_date=devx.__build_date__,
        python_version=platform.python_version(),
        os=host_os(),
        arch=host_arch(),
    )


__all__ = [
    "VersionInfo",
    "get_version_info",
    "host_arch",
    "host_os",
]
