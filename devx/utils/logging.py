"""Diagnostic log for devx.

Command output goes to the terminal through ``devx.utils.console``; this
module keeps a separate trail of what happened behind it: every
``<tool> --version`` spawn of the dependency probe, configuration loads
and saves, release feed retries, update state that could not be read or
written, and each step of a self-update. The trail is off unless asked
for, so a failed state write or a retried request never shows up in
normal output.

Environment Variables:
    DEVX_LOG: Set to "true" to write the log (default: "false")
    DEVX_LOG_FILE: Path to log file (default: ~/.devx.log)
"""

import logging
import os
from pathlib import Path

LOG_ENABLED = os.environ.get("DEVX_LOG", "false").lower() == "true"
LOG_FILE = Path(os.environ.get("DEVX_LOG_FILE", str(Path.home() / ".devx.log")))

# Records carry the emitting module so probe, update and config lines can be told apart
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logger: logging.Logger | None = None


def setup_logging() -> logging.Logger:
    """Attach the log file (or a NullHandler) to the ``devx`` logger.

    Called once by the CLI entry point. Module loggers such as
    ``devx.integrations.github`` (retry warnings) and
    ``devx.config.manager`` (ignored values) are children of ``devx``
    and end up in the same file.

    Returns:
        The ``devx`` logger
    """
    global _logger

    if _logger is not None:
        return _logger

    logger = logging.getLogger("devx")
    logger.handlers.clear()

    if LOG_ENABLED:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(LOG_FILE)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    else:
        logger.addHandler(logging.NullHandler())

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    global _logger
    if _logger is None:
        return setup_logging()
    return _logger


def log_message(message: str) -> None:
    """Record a step (config load, update download, state fallback, ...)."""
    get_logger().info(message)


def log_command(command: str, exit_code: int = 0) -> None:
    """Record an external command spawned by the dependency probe.

    Args:
        command: The command line, e.g. ``tmux --version``
        exit_code: Its exit status (-1 when it was killed on timeout)
    """
    get_logger().info(f"COMMAND: {command} | EXIT_CODE: {exit_code}")


__all__ = [
    "LOG_ENABLED",
    "LOG_FILE",
    "LOG_FORMAT",
    "setup_logging",
    "get_logger",
    "log_message",
    "log_command",
]
