"""Shared pytest fixtures for DEVX tests."""

import json
import os
from pathlib import Path

import httpx
import pytest

from devx.integrations.github import GitHubReleaseSource
from devx.utils.retry import RetryConfig
from tests.helpers import NO_RETRY


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config at a temp dir and drop DEVX_ overrides.

    Also runs each test from a fresh working directory so no real
    ``.devx`` file is discovered.
    """
    config_dir = tmp_path / "home" / ".config" / "devx"
    monkeypatch.setattr("devx.config.manager.CONFIG_FILE", config_dir / "config")
    for key in list(os.environ):
        if key.startswith("DEVX_") or key in ("VISUAL", "EDITOR", "GITHUB_TOKEN"):
            monkeypatch.delenv(key, raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    (workdir / ".git").mkdir()
    monkeypatch.chdir(workdir)
    return config_dir


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def settings_file(project_dir: Path):
    """Factory writing ``.claude/settings.local.json`` with the given content."""

    def _write(content: dict | str) -> Path:
        path = project_dir / ".claude" / "settings.local.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content)
        else:
            path.write_text(json.dumps(content, indent=2))
        return path

    return _write


@pytest.fixture
def make_release_source():
    """Factory for a GitHubReleaseSource backed by httpx.MockTransport."""

    def _make(handler, retry_config: RetryConfig = NO_RETRY) -> GitHubReleaseSource:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return GitHubReleaseSource(http_client=client, retry_config=retry_config)

    return _make


@pytest.fixture
def releases_source(make_release_source):
    """Factory for a source that serves a fixed releases list."""

    def _make(releases: list[dict]) -> GitHubReleaseSource:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=releases)

        return make_release_source(handler)

    return _make
