"""DEVX - Local development environment manager.

This package provides a Python CLI application for setting up and
maintaining a developer workstation: Claude hook installation,
dependency checks, and self-update.
"""

# Build metadata, rewritten by the release pipeline
__version__ = "dev"
__git_commit__ = "unknown"
__build_date__ = "unknown"

GITHUB_REPO = "jfox85/devx"

__all__ = [
    "__version__",
    "__git_commit__",
    "__build_date__",
    "GITHUB_REPO",
]
