"""GitHub Releases client for the DEVX update coordinator.

Lists releases of the built-in repository, picks the newest stable
semver release, and downloads release assets. Requests use ``httpx``
with a timeout and a single retry on transient failures.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import httpx

import devx
from devx.utils.errors import NetworkError
from devx.utils.retry import DEFAULT_RETRY_CONFIG, RetryConfig, with_retry
from devx.utils.versioning import normalize_version, parse_version

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSIONS = ("", ".exe", ".zip", ".tar.gz", ".tgz", ".gz")

ARCH_ALIASES: dict[str, tuple[str, ...]] = {
    "amd64": ("amd64", "x86_64"),
    "arm64": ("arm64", "aarch64"),
    "386": ("386", "i386"),
}


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a release."""

    name: str
    download_url: str
    size: int = 0


@dataclass(frozen=True)
class Release:
    """An upstream release.

    Attributes:
        version: Semver string without the leading "v" (e.g. "0.3.0")
        tag: Tag name as published (e.g. "v0.3.0")
        url: Human-facing release page
        release_notes: Release body (markdown)
        assets: Files attached to the release
    """

    version: str
    tag: str
    url: str
    release_notes: str = ""
    assets: tuple[ReleaseAsset, ...] = field(default_factory=tuple)

    def asset_for_platform(self, command: str, os_name: str, arch: str) -> ReleaseAsset | None:
        """Find the asset built for ``os_name``/``arch``.

        Matches names like ``devx_darwin_arm64.tar.gz`` or
        ``devx_0.3.0_linux_x86_64.tar.gz``: the name starts with the
        command and ends with ``<os><sep><arch><ext>``.
        """
        arches = ARCH_ALIASES.get(arch, (arch,))
        suffixes = [
            f"{os_name}{sep}{a}{ext}"
            for a in arches
            for sep in ("_", "-")
            for ext in ARCHIVE_EXTENSIONS
        ]
        for asset in self.assets:
            name = asset.name.lower()
            if not name.startswith(command.lower()):
                continue
            if any(name.endswith(suffix) for suffix in suffixes):
                return asset
        return None


def _release_from_json(data: dict[str, Any]) -> Release | None:
    tag = str(data.get("tag_name") or "")
    if parse_version(tag) is None:
        return None
    assets = tuple(
        ReleaseAsset(
            name=str(a.get("name", "")),
            download_url=str(a.get("browser_download_url", "")),
            size=int(a.get("size") or 0),
        )
        for a in data.get("assets") or []
        if isinstance(a, dict)
    )
    return Release(
        version=normalize_version(tag),
        tag=tag,
        url=str(data.get("html_url") or ""),
        release_notes=str(data.get("body") or ""),
        assets=assets,
    )


def _log_retry(attempt: int, delay: float, error: Exception) -> None:
    logger.warning(f"Release feed request failed ({error}); retry {attempt} in {delay:.1f}s")


class GitHubReleaseSource:
    """Upstream release feed backed by the GitHub REST API.

    HTTP Client Sharing:
        An injected ``httpx.Client`` is used as-is and never closed here,
        which is how tests substitute a mock transport. Without one, a
        client is created per call and closed afterwards.
    """

    API_URL = "https://api.github.com"

    def __init__(
        self,
        repo: str = devx.GITHUB_REPO,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ) -> None:
        self.repo = repo
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds
        self._retry_config = retry_config

    @property
    def releases_url(self) -> str:
        return f"{self.API_URL}/repos/{self.repo}/releases"

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {
            "Accept": accept,
            "User-Agent": f"devx/{devx.__version__}",
        }
        token = os.environ.get("GITHUB_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _get(self, url: str, accept: str) -> httpx.Response:
        """GET with timeout and retry; raises httpx errors."""

        @with_retry(self._retry_config, on_retry=_log_retry)
        def send() -> httpx.Response:
            if self._http_client is not None:
                response = self._http_client.get(
                    url,
                    headers=self._headers(accept),
                    timeout=self._timeout_seconds,
                    follow_redirects=True,
                )
            else:
                with httpx.Client(timeout=self._timeout_seconds) as client:
                    response = client.get(
                        url, headers=self._headers(accept), follow_redirects=True
                    )
            response.raise_for_status()
            return response

        return send()

    def latest_release(self) -> Release | None:
        """Return the newest stable semver release, or None if there is none.

        Drafts, pre-releases and tags that are not semver are skipped.

        Raises:
            NetworkError: If the feed is unreachable or returns invalid data
        """
        try:
            response = self._get(self.releases_url, "application/vnd.github+json")
            payload = response.json()
        except httpx.HTTPError as e:
            raise NetworkError(f"checking for updates: {self.releases_url}: {e}") from e
        except ValueError as e:
            raise NetworkError(
                f"checking for updates: invalid JSON from {self.releases_url}: {e}"
            ) from e

        if not isinstance(payload, list):
            raise NetworkError(
                f"checking for updates: unexpected response from {self.releases_url}"
            )

        best: Release | None = None
        for entry in payload:
            if not isinstance(entry, dict) or entry.get("draft") or entry.get("prerelease"):
                continue
            release = _release_from_json(entry)
            if release is None:
                continue
            if best is None or parse_version(release.version) > parse_version(best.version):
                best = release
        return best

    def download(self, url: str) -> bytes:
        """Download a release asset.

        Raises:
            NetworkError: If the download fails
        """
        try:
            response = self._get(url, "application/octet-stream")
        except httpx.HTTPError as e:
            raise NetworkError(f"downloading update: {url}: {e}") from e
        return response.content


__all__ = [
    "Release",
    "ReleaseAsset",
    "GitHubReleaseSource",
]
