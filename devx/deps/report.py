"""Human-readable dependency report for ``devx check-deps``."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from devx.deps.checker import ProbeErrorKind, ProbeResult, summarize_missing
from devx.utils.console import console as default_console
from devx.version import get_version_info


def _result_line(result: ProbeResult) -> str:
    dep = result.dependency
    status = "[success]✓[/success]" if result.available else "[error]✗[/error]"
    line = f"  {status} {escape(dep.name)}"
    if result.available and result.version:
        line += f" [dim]({escape(result.version)})[/dim]"
    line += f" - {escape(dep.description)}"
    if result.error is ProbeErrorKind.TIMEOUT:
        line += " [warning](version check timed out)[/warning]"
    return line


def _print_result(out: Console, result: ProbeResult) -> None:
    out.print(_result_line(result))
    if not result.available:
        out.print(f"    └─ {escape(result.dependency.install_hint)}")
        if result.error is ProbeErrorKind.SPAWN_FAILED and result.error_message:
            out.print(f"    └─ [dim]{escape(result.error_message)}[/dim]")


def render(
    results: list[ProbeResult],
    editor_result: ProbeResult | None = None,
    console: Console | None = None,
) -> None:
    """Print the dependency report.

    Output is grouped as required-missing, required-present, optional and
    editor, followed by a summary line.
    """
    out = console or default_console

    required_missing = [r for r in results if r.dependency.required and not r.available]
    required_present = [r for r in results if r.dependency.required and r.available]
    optional = [r for r in results if not r.dependency.required]

    out.print(f"[header]Dependency Check ({escape(str(get_version_info()))})[/header]")
    out.print("[header]=================[/header]")

    sections = (
        ("Missing required", required_missing),
        ("Required", required_present),
        ("Optional", optional),
        ("Editor", [editor_result] if editor_result is not None else []),
    )
    for title, group in sections:
        if not group:
            continue
        out.print()
        out.print(f"[bold]{title}:[/bold]")
        for result in group:
            _print_result(out, result)

    out.print()

    missing_required, missing_optional = summarize_missing(results, editor_result)
    if missing_required:
        out.print(
            f"[warning]⚠️  Missing required dependencies: {escape(', '.join(missing_required))}"
            "[/warning]"
        )
        out.print("   Some features may not work properly.")
    if missing_optional:
        out.print(
            f"[info]ℹ️  Missing optional dependencies: {escape(', '.join(missing_optional))}"
            "[/info]"
        )
        out.print("   These are recommended but not required.")
    if not missing_required and not missing_optional:
        out.print("[success]✅ All dependencies are available![/success]")

    out.print()


def print_missing_warning(
    results: list[ProbeResult],
    editor_result: ProbeResult | None = None,
    console: Console | None = None,
) -> None:
    """Short warning shown when devx runs without a subcommand."""
    out = console or default_console
    missing_required, missing_optional = summarize_missing(results, editor_result)

    if missing_required:
        out.print(
            "[warning]⚠️  Warning: Missing required dependencies: "
            f"{escape(', '.join(missing_required))}[/warning]"
        )
        out.print("   Run 'devx check-deps' for installation instructions.")
        out.print()
    if missing_optional:
        out.print(
            "[info]ℹ️  Note: Missing optional dependencies: "
            f"{escape(', '.join(missing_optional))}[/info]"
        )
        out.print("   Run 'devx check-deps' for more details.")
        out.print()


__all__ = [
    "render",
    "print_missing_warning",
]
