"""Custom exceptions and exit codes for DEVX.

This module defines the exit codes and exception hierarchy used throughout
the application. Every surfaced failure is a DevxError carrying the exit
code the CLI should terminate with.
"""

from enum import IntEnum
from pathlib import Path
from typing import ClassVar


class ExitCode(IntEnum):
    """Process exit codes.

    These codes are used for consistent error reporting and can be
    checked by calling scripts or CI systems.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    DEPENDENCY_MISSING = 2
    SETTINGS_ERROR = 3
    USER_CANCELLED = 4
    UPDATE_ERROR = 5


class DevxError(Exception):
    """Base exception for DEVX errors.

    All custom exceptions in this application should inherit from this class.
    Each exception type has an associated exit code for proper error reporting.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        """Initialize the exception."""
        super().__init__(message)
        self._exit_code = exit_code

    @property
    def exit_code(self) -> ExitCode:
        """Get the exit code for this exception."""
        if self._exit_code is not None:
            return self._exit_code
        return self.__class__._default_exit_code


class NotFoundError(DevxError):
    """A required external tool or file is absent."""

    _default_exit_code: ClassVar[ExitCode] = ExitCode.DEPENDENCY_MISSING


class SettingsError(DevxError):
    """Base class for Claude settings document failures.

    Carries the path of the settings document involved so messages
    stay grep-friendly.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.SETTINGS_ERROR

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        exit_code: ExitCode | None = None,
    ) -> None:
        super().__init__(message, exit_code)
        self.path = path


class MalformedSettingsError(SettingsError):
    """The settings document could not be parsed.

    Raised when:
    - The file is not valid JSON
    - The top-level value is not a JSON object
    - The hooks section has an unexpected shape

    The document is never overwritten after this error.
    """


class BackupFailedError(SettingsError):
    """Copying the settings document to its backup location failed."""


class WriteFailedError(SettingsError):
    """Writing or renaming the settings document failed.

    No partial document is ever visible at the target path.
    """


class NetworkError(DevxError):
    """The upstream release feed could not be reached or returned garbage."""

    _default_exit_code: ClassVar[ExitCode] = ExitCode.UPDATE_ERROR


class AlreadyLatestError(DevxError):
    """An update was requested but the running version is already current."""

    def __init__(self, message: str, version: str = "") -> None:
        super().__init__(message)
        self.version = version


class UpdateFailedError(DevxError):
    """Downloading or replacing the binary failed.

    The running binary is left unchanged.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.UPDATE_ERROR


class PersistenceError(DevxError):
    """Reading or writing the update check state failed.

    The update coordinator logs and swallows this error; its only cost is
    a redundant check or notification.
    """


class UserCancelledError(DevxError):
    """User cancelled the operation (Ctrl+C)."""

    _default_exit_code: ClassVar[ExitCode] = ExitCode.USER_CANCELLED


__all__ = [
    "ExitCode",
    "DevxError",
    "NotFoundError",
    "SettingsError",
    "MalformedSettingsError",
    "BackupFailedError",
    "WriteFailedError",
    "NetworkError",
    "AlreadyLatestError",
    "UpdateFailedError",
    "PersistenceError",
    "UserCancelledError",
]
