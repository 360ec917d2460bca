"""Tests for devx.integrations.github module."""

import httpx
import pytest

from devx.integrations.github import GitHubReleaseSource, Release, ReleaseAsset
from devx.utils.errors import ExitCode, NetworkError
from devx.utils.retry import RetryConfig
from tests.helpers import release_payload


def _asset(name):
    return ReleaseAsset(name=name, download_url=f"https://example.com/{name}", size=1)


class TestLatestRelease:
    """Tests for GitHubReleaseSource.latest_release()."""

    def test_picks_highest_stable(self, releases_source):
        """Drafts and pre-releases are skipped; the highest version wins."""
        source = releases_source(
            [
                release_payload("v0.2.0"),
                release_payload("v0.4.0", draft=True),
                release_payload("v0.3.0-rc.1", prerelease=True),
                release_payload("v0.3.0", body="Fixes"),
                release_payload("v0.10.0-beta", prerelease=True),
            ]
        )

        release = source.latest_release()

        assert release.version == "0.3.0"
        assert release.tag == "v0.3.0"
        assert release.release_notes == "Fixes"
        assert release.url.endswith("/v0.3.0")

    def test_skips_non_semver_tags(self, releases_source):
        """Tags like 'nightly' are ignored."""
        source = releases_source([release_payload("nightly"), release_payload("v0.1.0")])

        assert source.latest_release().version == "0.1.0"

    def test_semver_tag_order(self, releases_source):
        """Suffixed tags published as full releases are ranked by semver precedence."""
        source = releases_source(
            [
                release_payload("v1.0.0-alpha.beta"),
                release_payload("v1.0.0-alpha.1"),
                release_payload("v1.0.0-alpha"),
            ]
        )

        assert source.latest_release().version == "1.0.0-alpha.beta"

    def test_no_releases(self, releases_source):
        """An empty feed yields None."""
        assert releases_source([]).latest_release() is None

    def test_parses_assets(self, releases_source):
        """Assets are carried with their download URLs."""
        source = releases_source(
            [
                release_payload(
                    "v1.0.0",
                    assets=[
                        {
                            "name": "devx_linux_amd64.tar.gz",
                            "browser_download_url": "https://dl/devx_linux_amd64.tar.gz",
                            "size": 1234,
                        }
                    ],
                )
            ]
        )

        release = source.latest_release()

        assert release.assets == (
            ReleaseAsset("devx_linux_amd64.tar.gz", "https://dl/devx_linux_amd64.tar.gz", 1234),
        )

    def test_request_headers(self, make_release_source, monkeypatch):
        """Requests carry a user agent and the optional GitHub token."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        make_release_source(handler).latest_release()

        request = seen[0]
        assert str(request.url) == "https://api.github.com/repos/jfox85/devx/releases"
        assert request.headers["Authorization"] == "Bearer ghp_test"
        assert request.headers["User-Agent"].startswith("devx/")

    def test_http_error(self, make_release_source):
        """A 404 is surfaced as NetworkError."""
        source = make_release_source(lambda request: httpx.Response(404, json={}))

        with pytest.raises(NetworkError) as exc_info:
            source.latest_release()

        assert str(exc_info.value).startswith("checking for updates:")
        assert exc_info.value.exit_code == ExitCode.UPDATE_ERROR

    def test_invalid_json(self, make_release_source):
        """A non-JSON body is a NetworkError."""
        source = make_release_source(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(NetworkError):
            source.latest_release()

    def test_unexpected_shape(self, make_release_source):
        """A JSON object instead of a list is rejected."""
        source = make_release_source(lambda request: httpx.Response(200, json={"message": "x"}))

        with pytest.raises(NetworkError):
            source.latest_release()

    def test_connection_error(self, make_release_source):
        """Transport failures become NetworkError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            make_release_source(handler).latest_release()

        assert "connection refused" in str(exc_info.value)

    def test_retries_once_on_server_error(self, make_release_source):
        """A 503 is retried once before succeeding."""
        responses = [httpx.Response(503), httpx.Response(200, json=[release_payload("v1.0.0")])]
        calls = []

        def handler(request):
            calls.append(request)
            return responses[len(calls) - 1]

        source = make_release_source(
            handler, RetryConfig(max_retries=1, base_delay_seconds=0.0, jitter_factor=0.0)
        )

        assert source.latest_release().version == "1.0.0"
        assert len(calls) == 2

    def test_gives_up_after_retry(self, make_release_source):
        """Persistent server errors fail after a single retry."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        source = make_release_source(
            handler, RetryConfig(max_retries=1, base_delay_seconds=0.0, jitter_factor=0.0)
        )

        with pytest.raises(NetworkError):
            source.latest_release()
        assert len(calls) == 2


class TestDownload:
    """Tests for GitHubReleaseSource.download()."""

    def test_returns_bytes(self, make_release_source):
        """Asset content is returned as bytes."""

        def handler(request):
            assert request.headers["Accept"] == "application/octet-stream"
            return httpx.Response(200, content=b"\x7fELF binary")

        data = make_release_source(handler).download("https://example.com/devx")

        assert data == b"\x7fELF binary"

    def test_follows_redirects(self, make_release_source):
        """GitHub asset downloads redirect to a CDN."""

        def handler(request):
            if request.url.host == "github.com":
                return httpx.Response(302, headers={"Location": "https://cdn.example.com/devx"})
            return httpx.Response(200, content=b"binary")

        data = make_release_source(handler).download("https://github.com/jfox85/devx/dl")

        assert data == b"binary"

    def test_failure(self, make_release_source):
        """Download errors are NetworkError with the downloading prefix."""
        source = make_release_source(lambda request: httpx.Response(404))

        with pytest.raises(NetworkError) as exc_info:
            source.download("https://example.com/missing")

        assert str(exc_info.value).startswith("downloading update:")


class TestAssetForPlatform:
    """Tests for Release.asset_for_platform()."""

    def _release(self, *names):
        assets = tuple(_asset(n) for n in names)
        return Release(version="1.0.0", tag="v1.0.0", url="", assets=assets)

    @pytest.mark.parametrize(
        "name",
        [
            "devx_darwin_arm64.tar.gz",
            "devx_1.0.0_darwin_arm64.tar.gz",
            "devx-darwin-arm64.zip",
            "devx_darwin_aarch64",
            "DEVX_Darwin_ARM64.tgz",
        ],
    )
    def test_matches_platform_names(self, name):
        """Common goreleaser-style names are recognized."""
        release = self._release("checksums.txt", name)

        assert release.asset_for_platform("devx", "darwin", "arm64").name == name

    def test_amd64_alias(self):
        """x86_64 assets satisfy amd64."""
        release = self._release("devx_linux_x86_64.tar.gz")

        assert release.asset_for_platform("devx", "linux", "amd64") is not None

    def test_no_match(self):
        """Other platforms and unrelated files are not picked."""
        release = self._release("devx_linux_amd64.tar.gz", "other_darwin_arm64.tar.gz")

        assert release.asset_for_platform("devx", "darwin", "arm64") is None

    def test_default_repo(self):
        """The built-in repository is used by default."""
        assert GitHubReleaseSource().releases_url == (
            "https://api.github.com/repos/jfox85/devx/releases"
        )
