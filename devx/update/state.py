"""Persistent update check state.

Stored as ``updatecheck.json`` in the per-user config directory:

    {
      "last_check": "2026-10-18T09:30:00+00:00",
      "last_notified_version": "0.3.0"
    }

A missing file is an empty state (never checked, never notified).
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from devx.utils.errors import PersistenceError

STATE_FILE_NAME = "updatecheck.json"

# RFC3339 writers may emit nanoseconds; fromisoformat accepts at most six digits
_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


@dataclass
class UpdateCheckState:
    """Last upstream check and last version surfaced to the user."""

    last_check: datetime | None = None
    last_notified_version: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "last_check": self.last_check.isoformat() if self.last_check else None,
            "last_notified_version": self.last_notified_version,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UpdateCheckState:
        return cls(
            last_check=parse_timestamp(data.get("last_check")),
            last_notified_version=str(data.get("last_notified_version") or ""),
        )


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC3339 timestamp; empty and zero-year values mean "never"."""
    if not value or not isinstance(value, str):
        return None
    text = _FRACTION_PATTERN.sub(r"\1", value.strip())
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise PersistenceError(f"reading update state: invalid last_check {value!r}") from e
    if parsed.year <= 1:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def should_check(last_check: datetime | None, interval: timedelta, now: datetime) -> bool:
    """True when no check happened yet or ``interval`` has elapsed."""
    if last_check is None:
        return True
    return now - last_check >= interval


class UpdateStateStore:
    """Reads and writes the update check state file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def in_dir(cls, config_dir: Path) -> UpdateStateStore:
        return cls(config_dir / STATE_FILE_NAME)

    def load(self) -> UpdateCheckState:
        """Load state; a missing file yields an empty state.

        Raises:
            PersistenceError: If the file exists but cannot be read or parsed
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return UpdateCheckState()
        except OSError as e:
            raise PersistenceError(f"reading update state: {self.path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"reading update state: {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"reading update state: {self.path} is not a JSON object")
        return UpdateCheckState.from_json(data)

    def save(self, state: UpdateCheckState) -> None:
        """Atomically write state, creating the config directory if needed.

        Raises:
            PersistenceError: If the directory or file cannot be written
        """
        temp_path: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".updatecheck-")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_json(), f, indent=2)
                f.write("\n")
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path is not None:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            raise PersistenceError(f"saving update state: {self.path}: {e}") from e


__all__ = [
    "STATE_FILE_NAME",
    "UpdateCheckState",
    "UpdateStateStore",
    "parse_timestamp",
    "should_check",
]
