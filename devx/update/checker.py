"""Update checks against the upstream release feed.

``UpdateCoordinator`` answers "is there a newer devx?", rate-limits that
question through the persisted update state, and decides whether the
user has already been told about a given release.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from rich.console import Console
from rich.markup import escape

import devx
from devx.config.manager import ConfigManager
from devx.integrations.github import GitHubReleaseSource, Release
from devx.update.state import UpdateCheckState, UpdateStateStore, should_check
from devx.utils.console import console as default_console
from devx.utils.errors import DevxError, NetworkError, PersistenceError
from devx.utils.logging import log_message
from devx.utils.versioning import current_version, parse_version

DEFAULT_CHECK_INTERVAL = timedelta(hours=24)


@dataclass(frozen=True)
class UpdateInfo:
    """Result of comparing the running build with the newest release.

    ``current_version`` is the build string as shipped (e.g. "dev"), for
    display; ``available`` compares it as semver, with non-semver builds
    counting as 0.0.0.
    """

    current_version: str
    latest_version: str
    release_notes: str
    release_url: str
    available: bool


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UpdateCoordinator:
    """Checks for, caches and de-duplicates update notifications.

    Attributes:
        store: Persistent update check state
        source: Upstream release feed
    """

    def __init__(
        self,
        store: UpdateStateStore,
        source: GitHubReleaseSource | None = None,
        clock: Callable[[], datetime] = _utcnow,
        version: str | None = None,
    ) -> None:
        self.store = store
        self.source = source or GitHubReleaseSource()
        self._clock = clock
        self._version = version if version is not None else devx.__version__

    @classmethod
    def from_config(cls, config: ConfigManager) -> UpdateCoordinator:
        """Coordinator using the config directory and HTTP timeout of ``config``."""
        timeout = float(config.settings.http_timeout_seconds)
        return cls(
            store=UpdateStateStore.in_dir(config.config_dir),
            source=GitHubReleaseSource(timeout_seconds=timeout),
        )

    def latest_release(self) -> Release:
        """Newest stable upstream release.

        Raises:
            NetworkError: If the feed fails or lists no usable release
        """
        release = self.source.latest_release()
        if release is None:
            raise NetworkError(
                f"checking for updates: no release information found for {self.source.repo}"
            )
        return release

    def check(self) -> UpdateInfo:
        """Contact upstream and compare its newest release with this build."""
        release = self.latest_release()
        latest = parse_version(release.version)
        available = latest is not None and latest > current_version(self._version)
        log_message(
            f"Update check: current={self._version} latest={release.version} "
            f"available={available}"
        )
        return UpdateInfo(
            current_version=self._version,
            latest_version=release.version,
            release_notes=release.release_notes,
            release_url=release.url,
            available=available,
        )

    def load_state(self) -> UpdateCheckState:
        """Load persisted state, treating an unreadable file as empty."""
        try:
            return self.store.load()
        except PersistenceError as e:
            log_message(f"Ignoring update state: {e}")
            return UpdateCheckState()

    def check_with_cache(
        self, interval: timedelta = DEFAULT_CHECK_INTERVAL
    ) -> tuple[UpdateInfo | None, bool]:
        """Check upstream only when ``interval`` has passed since the last check.

        Returns:
            ``(info, True)`` after a check, ``(None, False)`` when skipped

        Raises:
            NetworkError: If the check fails; state is left untouched
        """
        state = self.load_state()
        now = self._clock()
        if not should_check(state.last_check, interval, now):
            return None, False

        info = self.check()

        state.last_check = now
        if info.available:
            state.last_notified_version = info.latest_version
        self._save_quietly(state)
        return info, True

    def should_notify(self, info: UpdateInfo) -> bool:
        """True if ``info`` is an update the user has not been shown yet."""
        if not info.available:
            return False
        try:
            state = self.store.load()
        except PersistenceError as e:
            log_message(f"Could not load update state, notifying anyway: {e}")
            return True
        return state.last_notified_version != info.latest_version

    def mark_notified(self, version: str) -> None:
        """Record ``version`` as shown to the user. Failures are logged only."""
        state = self.load_state()
        state.last_notified_version = version
        self._save_quietly(state)

    def _save_quietly(self, state: UpdateCheckState) -> None:
        try:
            self.store.save(state)
        except PersistenceError as e:
            log_message(f"Warning: failed to save update check state: {e}")


def notify_if_update_available(
    config: ConfigManager,
    coordinator: UpdateCoordinator | None = None,
    console: Console | None = None,
) -> UpdateInfo | None:
    """Print a one-line notice when a release newer than the last one shown exists.

    Runs at most once per ``UPDATE_CHECK_INTERVAL_HOURS``. Never raises;
    errors are logged.

    Returns:
        The UpdateInfo that was announced, or None
    """
    if not config.settings.update_check_enabled:
        return None

    out = console or default_console
    coordinator = coordinator or UpdateCoordinator.from_config(config)
    interval = timedelta(hours=config.settings.update_check_interval_hours)

    previous = coordinator.load_state().last_notified_version
    try:
        info, did_check = coordinator.check_with_cache(interval)
    except DevxError as e:
        log_message(f"Background update check failed: {e}")
        return None

    if not did_check or info is None or not info.available:
        return None
    if info.latest_version == previous:
        return None

    out.print(
        f"[info]A new version of devx is available: {escape(info.latest_version)} "
        f"(current: {escape(info.current_version)})[/info]"
    )
    out.print("[dim]Run 'devx update' to upgrade.[/dim]")
    return info


__all__ = [
    "DEFAULT_CHECK_INTERVAL",
    "UpdateInfo",
    "UpdateCoordinator",
    "notify_if_update_available",
]
