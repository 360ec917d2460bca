"""Tests for devx.update.checker module.

Tests cover:
- check() against a mocked release feed, including dev builds
- check_with_cache() rate limiting and state updates
- should_notify() de-duplication
- mark_notified() and notify_if_update_available()
"""

import io
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from devx.config.manager import ConfigManager
from devx.update.checker import UpdateCoordinator, UpdateInfo, notify_if_update_available
from devx.update.state import UpdateCheckState, UpdateStateStore
from devx.utils.console import custom_theme
from devx.utils.errors import NetworkError, PersistenceError
from tests.helpers import release_payload

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
DAY = timedelta(hours=24)


def _info(latest="0.3.0", available=True, current="0.2.0"):
    return UpdateInfo(
        current_version=current,
        latest_version=latest,
        release_notes="",
        release_url="",
        available=available,
    )


@pytest.fixture
def store(tmp_path):
    return UpdateStateStore.in_dir(tmp_path / "state")


@pytest.fixture
def make_coordinator(store, releases_source):
    """Coordinator with a fixed clock and a mocked releases feed."""

    def _make(releases, version="0.2.0", now=NOW):
        return UpdateCoordinator(
            store=store,
            source=releases_source(releases),
            clock=lambda: now,
            version=version,
        )

    return _make


class TestCheck:
    """Tests for UpdateCoordinator.check()."""

    def test_update_available(self, make_coordinator):
        """A newer release is reported as available."""
        coordinator = make_coordinator([release_payload("v0.3.0", body="New stuff")])

        info = coordinator.check()

        assert info.current_version == "0.2.0"
        assert info.latest_version == "0.3.0"
        assert info.release_notes == "New stuff"
        assert info.release_url.endswith("v0.3.0")
        assert info.available is True

    def test_same_version(self, make_coordinator):
        """Running the latest release means no update."""
        info = make_coordinator([release_payload("v0.2.0")], version="v0.2.0").check()

        assert info.available is False

    def test_dev_build_sees_any_release(self, make_coordinator):
        """A dev build compares as 0.0.0 but displays its own string."""
        info = make_coordinator([release_payload("v0.0.1")], version="dev").check()

        assert info.available is True
        assert info.current_version == "dev"

    def test_newer_local_build(self, make_coordinator):
        """A local build ahead of upstream sees no update."""
        info = make_coordinator([release_payload("v0.2.0")], version="0.3.0-rc.1").check()

        assert info.available is False

    def test_prerelease_precedence(self, make_coordinator):
        """Pre-release builds compare by semver identifier precedence."""
        behind = make_coordinator([release_payload("v1.0.0-alpha.1")], version="1.0.0-alpha.beta")
        ahead = make_coordinator([release_payload("v1.0.0-beta.11")], version="1.0.0-beta.2")

        assert behind.check().available is False
        assert ahead.check().available is True

    def test_no_release(self, make_coordinator):
        """An empty feed is an error."""
        with pytest.raises(NetworkError) as exc_info:
            make_coordinator([]).check()

        assert "no release information found" in str(exc_info.value)


class TestCheckWithCache:
    """Tests for UpdateCoordinator.check_with_cache()."""

    def test_first_check_persists_state(self, make_coordinator, store):
        """Without state the feed is consulted and the result recorded."""
        coordinator = make_coordinator([release_payload("v0.3.0")])

        info, did_check = coordinator.check_with_cache(DAY)

        assert did_check is True
        assert info.latest_version == "0.3.0"
        state = store.load()
        assert state.last_check == NOW
        assert state.last_notified_version == "0.3.0"

    def test_skipped_within_interval(self, make_coordinator, store):
        """A recent check suppresses contacting upstream."""
        store.save(UpdateCheckState(last_check=NOW - timedelta(hours=1)))
        coordinator = make_coordinator([release_payload("v0.3.0")])
        coordinator.source = MagicMock()

        info, did_check = coordinator.check_with_cache(DAY)

        assert (info, did_check) == (None, False)
        coordinator.source.latest_release.assert_not_called()

    def test_checks_after_interval(self, make_coordinator, store):
        """Once the interval has elapsed upstream is consulted again."""
        store.save(UpdateCheckState(last_check=NOW - DAY, last_notified_version="0.3.0"))

        info, did_check = make_coordinator([release_payload("v0.3.0")]).check_with_cache(DAY)

        assert did_check is True
        assert store.load().last_check == NOW

    def test_no_update_keeps_notified_version(self, make_coordinator, store):
        """last_notified_version only changes when an update is available."""
        store.save(UpdateCheckState(last_notified_version="0.1.0"))

        make_coordinator([release_payload("v0.2.0")]).check_with_cache(DAY)

        state = store.load()
        assert state.last_notified_version == "0.1.0"
        assert state.last_check == NOW

    def test_failure_leaves_state_untouched(self, make_coordinator, store):
        """A failed check propagates and does not record a check time."""
        earlier = UpdateCheckState(last_check=NOW - 2 * DAY, last_notified_version="0.1.0")
        store.save(earlier)
        coordinator = make_coordinator([])

        with pytest.raises(NetworkError):
            coordinator.check_with_cache(DAY)

        assert store.load() == earlier

    def test_save_failure_is_swallowed(self, make_coordinator, store):
        """Failing to persist state does not fail the check."""
        coordinator = make_coordinator([release_payload("v0.3.0")])

        with patch.object(store, "save", side_effect=PersistenceError("read-only")):
            info, did_check = coordinator.check_with_cache(DAY)

        assert did_check is True
        assert info.available is True

    def test_corrupt_state_treated_as_empty(self, make_coordinator, store):
        """An unreadable state file does not block checking."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{garbage")

        info, did_check = make_coordinator([release_payload("v0.3.0")]).check_with_cache(DAY)

        assert did_check is True
        assert store.load().last_notified_version == "0.3.0"


class TestShouldNotify:
    """Tests for UpdateCoordinator.should_notify()."""

    def test_notification_dedup(self, store):
        """Only versions other than the last one shown trigger a notification."""
        store.save(UpdateCheckState(last_notified_version="0.2.0"))
        coordinator = UpdateCoordinator(store=store, source=MagicMock())

        assert coordinator.should_notify(_info(latest="0.2.0")) is False
        assert coordinator.should_notify(_info(latest="0.3.0")) is True
        assert coordinator.should_notify(_info(available=False)) is False

    def test_load_failure_notifies(self, store):
        """Unreadable state fails open toward notifying."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("not json")
        coordinator = UpdateCoordinator(store=store, source=MagicMock())

        assert coordinator.should_notify(_info()) is True

    def test_false_right_after_mark_notified(self, store):
        """Marking a version notified suppresses it until upstream advances."""
        coordinator = UpdateCoordinator(store=store, source=MagicMock())

        coordinator.mark_notified("0.3.0")

        assert coordinator.should_notify(_info(latest="0.3.0")) is False
        assert coordinator.should_notify(_info(latest="0.3.1")) is True


class TestMarkNotified:
    """Tests for UpdateCoordinator.mark_notified()."""

    def test_keeps_last_check(self, store):
        """Only the notified version is changed."""
        store.save(UpdateCheckState(last_check=NOW, last_notified_version="0.1.0"))

        UpdateCoordinator(store=store, source=MagicMock()).mark_notified("0.2.0")

        assert store.load() == UpdateCheckState(last_check=NOW, last_notified_version="0.2.0")

    def test_failure_swallowed(self, store):
        """Persistence errors are not raised."""
        coordinator = UpdateCoordinator(store=store, source=MagicMock())

        with patch.object(store, "save", side_effect=PersistenceError("nope")):
            coordinator.mark_notified("0.2.0")


class TestNotifyIfUpdateAvailable:
    """Tests for notify_if_update_available()."""

    @pytest.fixture
    def config(self, isolated_config):
        manager = ConfigManager(isolated_config / "config")
        manager.load()
        return manager

    @pytest.fixture
    def console(self):
        return Console(file=io.StringIO(), theme=custom_theme, width=200, color_system=None)

    def test_prints_notice_once(self, config, console, make_coordinator):
        """A new release is announced on the first check only."""
        coordinator = make_coordinator([release_payload("v0.3.0")])

        first = notify_if_update_available(config, coordinator=coordinator, console=console)

        assert first is not None
        assert "A new version of devx is available: 0.3.0" in console.file.getvalue()

        coordinator._clock = lambda: NOW + 2 * DAY
        second = notify_if_update_available(config, coordinator=coordinator, console=console)

        assert second is None
        assert console.file.getvalue().count("A new version") == 1

    def test_disabled_by_config(self, config, console):
        """UPDATE_CHECK_ENABLED=false skips the check entirely."""
        config.settings.update_check_enabled = False
        coordinator = MagicMock()

        assert notify_if_update_available(config, coordinator=coordinator, console=console) is None
        coordinator.check_with_cache.assert_not_called()

    def test_network_error_swallowed(self, config, console, make_coordinator):
        """Failures are logged, not raised or printed."""
        coordinator = make_coordinator([])

        assert notify_if_update_available(config, coordinator=coordinator, console=console) is None
        assert console.file.getvalue() == ""

    def test_uses_configured_interval(self, config, console):
        """The interval comes from UPDATE_CHECK_INTERVAL_HOURS."""
        config.settings.update_check_interval_hours = 6
        coordinator = MagicMock()
        coordinator.load_state.return_value = UpdateCheckState()
        coordinator.check_with_cache.return_value = (None, False)

        notify_if_update_available(config, coordinator=coordinator, console=console)

        coordinator.check_with_cache.assert_called_once_with(timedelta(hours=6))

    def test_from_config_uses_config_dir(self, config):
        """State lives next to the global config file."""
        coordinator = UpdateCoordinator.from_config(config)

        assert coordinator.store.path == config.config_dir / "updatecheck.json"
