"""Dependency probing for DEVX.

This package contains:
- checker: Static dependency list, PATH lookup and version probes
- report: Rich-formatted report of probe results
"""

from devx.deps.checker import (
    DEPENDENCIES,
    Dependency,
    ProbeErrorKind,
    ProbeResult,
    editor_command,
    list_dependencies,
    probe,
    probe_all,
    resolve_editor,
    summarize_missing,
)
from devx.deps.report import print_missing_warning, render

__all__ = [
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
    "render",
    "print_missing_warning",
]
