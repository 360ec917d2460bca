"""Tests for devx.deps.report module."""

import io

import pytest
from rich.console import Console

from devx.deps.checker import Dependency, ProbeErrorKind, ProbeResult
from devx.deps.report import print_missing_warning, render
from devx.utils.console import custom_theme


def _console():
    return Console(file=io.StringIO(), theme=custom_theme, width=200, color_system=None)


def _output(console):
    return console.file.getvalue()


def _result(name, required=True, available=True, version="", error=None):
    dep = Dependency(
        name=name,
        command=name.lower(),
        required=required,
        description=f"{name} description",
        install_hint=f"Install with: brew install {name.lower()}",
    )
    return ProbeResult(dependency=dep, available=available, version=version, error=error)


@pytest.fixture
def mixed_results():
    return [
        _result("Git", version="git version 2.44.0"),
        _result("Tmux", available=False, error=ProbeErrorKind.NOT_FOUND),
        _result("Direnv", required=False, available=False, error=ProbeErrorKind.NOT_FOUND),
    ]


class TestRender:
    """Tests for render()."""

    def test_sections_in_order(self, mixed_results):
        """Missing required comes before required, optional and editor."""
        console = _console()
        editor = _result("Editor", required=False, version="NVIM v0.10.0")

        render(mixed_results, editor, console=console)

        out = _output(console)
        positions = [
            out.index("Missing required:"),
            out.index("Required:"),
            out.index("Optional:"),
            out.index("Editor:"),
        ]
        assert positions == sorted(positions)

    def test_versions_and_hints(self, mixed_results):
        """Available tools show versions; missing ones show install hints."""
        console = _console()

        render(mixed_results, console=console)

        out = _output(console)
        assert "✓ Git (git version 2.44.0)" in out
        assert "✗ Tmux" in out
        assert "└─ Install with: brew install tmux" in out
        assert "Install with: brew install git" not in out

    def test_summary_lines(self, mixed_results):
        """Summary names missing required and optional tools."""
        console = _console()

        render(mixed_results, console=console)

        out = _output(console)
        assert "Missing required dependencies: Tmux" in out
        assert "Missing optional dependencies: Direnv" in out
        assert "All dependencies are available" not in out

    def test_all_available(self):
        """A clean report ends with the all-good line."""
        console = _console()

        render([_result("Git", version="2.44")], console=console)

        out = _output(console)
        assert "All dependencies are available!" in out
        assert "Missing required:" not in out

    def test_no_editor_section_without_editor(self):
        """The editor section is omitted when no editor is configured."""
        console = _console()

        render([_result("Git")], None, console=console)

        assert "Editor:" not in _output(console)

    def test_timeout_noted(self):
        """A timed out probe is flagged but still listed as present."""
        console = _console()

        render([_result("Caddy", error=ProbeErrorKind.TIMEOUT)], console=console)

        out = _output(console)
        assert "✓ Caddy" in out
        assert "timed out" in out

    def test_markup_in_version_is_literal(self):
        """Tool output containing brackets is not parsed as markup."""
        console = _console()

        render([_result("Odd", version="odd [bold]1.0[/bold]")], console=console)

        assert "odd [bold]1.0[/bold]" in _output(console)

    def test_empty_results(self):
        """Rendering nothing does not raise."""
        console = _console()

        render([], console=console)

        assert "Dependency Check" in _output(console)


class TestPrintMissingWarning:
    """Tests for print_missing_warning()."""

    def test_warns_about_missing(self, mixed_results):
        """Both missing groups point at check-deps."""
        console = _console()

        print_missing_warning(mixed_results, console=console)

        out = _output(console)
        assert "Missing required dependencies: Tmux" in out
        assert "Missing optional dependencies: Direnv" in out
        assert out.count("devx check-deps") == 2

    def test_silent_when_all_present(self):
        """Nothing is printed when every tool is present."""
        console = _console()

        print_missing_warning([_result("Git")], console=console)

        assert _output(console) == ""
