"""CLI interface for DEVX.

This module provides the Typer-based command-line interface: dependency
checks, Claude hook installation, configuration and self-update.
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from devx.config.manager import ConfigManager
from devx.config.settings import Settings
from devx.deps import print_missing_warning, probe_all, render, resolve_editor, summarize_missing
from devx.integrations.claude_hooks import (
    CLAUDE_DIR_NAME,
    NOTIFICATION_MARKER,
    SETTINGS_FILE_NAME,
    STOP_MARKER,
    check_hooks_status,
    install_hooks,
    preview_changes,
    settings_path_for,
)
from devx.update import (
    UpdateCoordinator,
    UpdateInfo,
    can_self_update,
    detect_install_method,
    notify_if_update_available,
    perform_update,
    update_instructions,
)
from devx.utils.console import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
    show_version,
)
from devx.utils.errors import AlreadyLatestError, DevxError, ExitCode, UserCancelledError
from devx.utils.logging import setup_logging
from devx.version import get_version_info

# Create Typer app
app = typer.Typer(
    name="devx",
    help="DEVX - Developer workstation tooling for tmux sessions and Claude Code",
    add_completion=False,
    no_args_is_help=False,
)

hooks_app = typer.Typer(
    name="hooks",
    help="Manage the Claude Code hooks that update devx session flags",
    no_args_is_help=True,
)
config_app = typer.Typer(
    name="config",
    help="Show or change devx configuration",
    no_args_is_help=True,
)
app.add_typer(hooks_app, name="hooks")
app.add_typer(config_app, name="config")

ProjectDirOption = Annotated[
    Path | None,
    typer.Option(
        "--project-dir",
        "-C",
        help="Project directory (default: current directory)",
        file_okay=False,
    ),
]


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        show_version()
        raise typer.Exit()


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Translate DEVX errors into a printed message and exit code."""
    try:
        yield
    except UserCancelledError as e:
        print_info(f"\n{escape(str(e))}")
        raise typer.Exit(ExitCode.USER_CANCELLED) from e
    except DevxError as e:
        print_error(escape(str(e)))
        raise typer.Exit(e.exit_code) from e
    except KeyboardInterrupt as e:
        print_info("\nOperation cancelled by user")
        raise typer.Exit(ExitCode.USER_CANCELLED) from e


def _load_config() -> ConfigManager:
    config = ConfigManager()
    config.load()
    return config


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = None,
) -> None:
    """DEVX - Developer workstation tooling.

    Run without a command for a quick dependency check.
    """
    setup_logging()
    if ctx.invoked_subcommand is not None:
        return

    config = _load_config()
    timeout = config.settings.probe_timeout_seconds
    results = probe_all(timeout=timeout)
    editor_result = resolve_editor(config.settings, timeout=timeout)
    print_missing_warning(results, editor_result)
    print_info("Run 'devx --help' to see available commands.")


@app.command("check-deps")
def check_deps() -> None:
    """Check that required and optional external tools are installed.

    Exits with a non-zero status when a required tool is missing.
    """
    with _handle_errors():
        config = _load_config()
        timeout = config.settings.probe_timeout_seconds
        results = probe_all(timeout=timeout)
        editor_result = resolve_editor(config.settings, timeout=timeout)
        render(results, editor_result)
        notify_if_update_available(config)

    missing_required, _ = summarize_missing(results, editor_result)
    if missing_required:
        raise typer.Exit(ExitCode.DEPENDENCY_MISSING)


@hooks_app.command("install")
def hooks_install(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Rewrite hooks even if already installed"),
    ] = False,
    no_backup: Annotated[
        bool,
        typer.Option("--no-backup", help="Don't back up existing settings"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would change without writing"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress output"),
    ] = False,
    project_dir: ProjectDirOption = None,
) -> None:
    """Install Claude hooks that set session flags when Claude stops or waits.

    The hooks will:
    - Set the session flag to "Claude Done" when Claude stops
    - Set the session flag to "Claude is waiting for your input" on notifications

    Existing settings are backed up before they are changed.
    """
    project = project_dir or Path.cwd()
    with _handle_errors():
        if dry_run:
            preview = preview_changes(project, backup=not no_backup)
            if not quiet:
                console.print("Dry run - changes that would be made:\n")
                console.print(preview, markup=False, highlight=False, soft_wrap=True)
            return

        if check_hooks_status(project) and not force:
            if not quiet:
                print_info("Claude hooks are already installed and configured correctly.")
                print_info("Use --force to reinstall them anyway.")
            return

        result = install_hooks(project, force=force, backup=not no_backup)

    if quiet:
        return

    print_success(result.message)
    if result.already_exists:
        return
    if result.backup_created and result.backup_path is not None:
        print_info(f"Backup created: {escape(str(result.backup_path))}")

    relative = f"{CLAUDE_DIR_NAME}/{SETTINGS_FILE_NAME}"
    if result.created:
        console.print(f"\nCreated {relative} with hooks configuration.")
    elif result.updated:
        console.print(f"\nUpdated {relative} with hooks configuration.")

    console.print("\nThe following hooks have been configured:")
    console.print(f"• Stop: Sets session flag to '{STOP_MARKER}'")
    console.print(f"• Notification: Sets session flag to '{NOTIFICATION_MARKER}'")


@hooks_app.command("preview")
def hooks_preview(
    no_backup: Annotated[
        bool,
        typer.Option("--no-backup", help="Preview without a backup step"),
    ] = False,
    project_dir: ProjectDirOption = None,
) -> None:
    """Show the settings file that 'devx hooks install' would write."""
    project = project_dir or Path.cwd()
    with _handle_errors():
        preview = preview_changes(project, backup=not no_backup)
    console.print(preview, markup=False, highlight=False, soft_wrap=True)


@hooks_app.command("status")
def hooks_status(project_dir: ProjectDirOption = None) -> None:
    """Report whether the Claude hooks are installed in this project."""
    project = project_dir or Path.cwd()
    with _handle_errors():
        installed = check_hooks_status(project)

    path = escape(str(settings_path_for(project)))
    if installed:
        print_success(f"Claude hooks are installed in {path}")
    else:
        print_warning(f"Claude hooks are not installed in {path}")
        print_info("Run 'devx hooks install' to install them.")


def _print_update_info(info: UpdateInfo) -> None:
    console.print(f"Current version: {escape(info.current_version)}")
    console.print(f"Latest version:  {escape(info.latest_version)}")
    if not info.available:
        print_success("You are running the latest version!")
        return
    console.print(
        f"🆙 A newer version is available: {escape(info.current_version)} → "
        f"{escape(info.latest_version)}"
    )
    if info.release_url:
        console.print(f"Release URL: {escape(info.release_url)}")
    console.print("\nRun 'devx update' to upgrade.")


@app.command("update")
def update(
    check: Annotated[
        bool,
        typer.Option("--check", help="Only check for updates without downloading"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Update even if the current version is the latest"),
    ] = False,
) -> None:
    """Update devx to the latest GitHub release.

    Installs managed by Homebrew are pointed at 'brew upgrade' instead.
    """
    with _handle_errors():
        config = _load_config()
        coordinator = UpdateCoordinator.from_config(config)

        if check:
            print_info("Checking for updates...")
            _print_update_info(coordinator.check())
            return

        method = detect_install_method()
        if not can_self_update(method):
            console.print(update_instructions(method))
            return

        print_info("Checking for updates...")
        info = coordinator.check()
        console.print(f"Current version: {escape(info.current_version)}")
        console.print(f"Latest version:  {escape(info.latest_version)}")

        if not info.available and not force:
            print_success("You are already running the latest version!")
            return
        if not info.available:
            print_info("Forcing update due to --force flag...")
        else:
            print_info(
                f"Updating from {escape(info.current_version)} to {escape(info.latest_version)}..."
            )

        try:
            perform_update(force=force, source=coordinator.source)
        except AlreadyLatestError:
            print_success("You are already running the latest version!")


@app.command("version")
def version_cmd(
    output: Annotated[
        str | None,
        typer.Option("--output", "-o", help="Output format: json"),
    ] = None,
    detailed: Annotated[
        bool,
        typer.Option("--detailed", help="Show detailed version information"),
    ] = False,
    check_updates: Annotated[
        bool,
        typer.Option("--check-updates", help="Check for available updates"),
    ] = False,
) -> None:
    """Show version information."""
    if output not in (None, "json"):
        raise typer.BadParameter(f"Unsupported output format: {output}", param_hint="--output")

    info = get_version_info()
    if output == "json":
        console.print(
            json.dumps(info.to_dict(), indent=2), markup=False, highlight=False, soft_wrap=True
        )
    elif detailed:
        console.print(info.detailed(), markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(str(info), markup=False, highlight=False, soft_wrap=True)

    if not check_updates:
        return

    console.print()
    print_info("Checking for updates...")
    coordinator = UpdateCoordinator.from_config(_load_config())
    try:
        update_info = coordinator.check()
    except DevxError as e:
        print_warning(f"Error checking for updates: {escape(str(e))}")
        return

    _print_update_info(update_info)
    if update_info.available:
        coordinator.mark_notified(update_info.latest_version)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration and where each value comes from."""
    _load_config().show()


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g. EDITOR)")],
    value: Annotated[str, typer.Argument(help="Value to store")],
    local: Annotated[
        bool,
        typer.Option("--local", help="Write to the project's .devx file instead of global config"),
    ] = False,
) -> None:
    """Store a configuration value."""
    key = key.upper()
    if key not in Settings.get_config_keys():
        valid = ", ".join(Settings.get_config_keys())
        print_error(f"Unknown config key: {escape(key)}. Valid keys: {valid}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    config = _load_config()
    try:
        warning = config.save(key, value, scope="local" if local else "global")
    except (OSError, ValueError) as e:
        print_error(f"Failed to save configuration: {escape(str(e))}")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    print_success(f"Saved {key}")
    if warning:
        print_warning(escape(warning))


__all__ = [
    "app",
    "main",
]
