"""Utility modules for DEVX.

This package contains:
- console: Rich-based terminal output utilities
- errors: Custom exceptions and exit codes
- logging: Logging configuration
- retry: Backoff and retry for network calls
"""

from devx.utils.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_step,
    print_success,
    print_warning,
)
from devx.utils.errors import (
    AlreadyLatestError,
    BackupFailedError,
    DevxError,
    ExitCode,
    MalformedSettingsError,
    NetworkError,
    NotFoundError,
    PersistenceError,
    UpdateFailedError,
    UserCancelledError,
    WriteFailedError,
)
from devx.utils.logging import log_command, log_message, setup_logging
from devx.utils.retry import RetryConfig, calculate_backoff_delay, with_retry

__all__ = [
    # Console
    "console",
    "print_error",
    "print_success",
    "print_warning",
    "print_info",
    "print_header",
    "print_step",
    # Errors
    "ExitCode",
    "DevxError",
    "NotFoundError",
    "MalformedSettingsError",
    "BackupFailedError",
    "WriteFailedError",
    "NetworkError",
    "AlreadyLatestError",
    "UpdateFailedError",
    "PersistenceError",
    "UserCancelledError",
    # Logging
    "setup_logging",
    "log_message",
    "log_command",
    # Retry
    "RetryConfig",
    "calculate_backoff_delay",
    "with_retry",
]
