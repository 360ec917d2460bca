"""Self-update: download the newest release and swap the running binary.

The replacement is written next to the current executable and renamed
over it, so a failed update leaves the installed binary untouched.
"""

from __future__ import annotations

import gzip
import io
import os
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath

from rich.console import Console
from rich.markup import escape

import devx
from devx.integrations.github import GitHubReleaseSource, Release
from devx.update.detector import current_executable, is_python_launch
from devx.utils.console import console as default_console
from devx.utils.errors import AlreadyLatestError, NetworkError, UpdateFailedError
from devx.utils.logging import log_message
from devx.utils.versioning import current_version, parse_version
from devx.version import host_arch, host_os

COMMAND_NAME = "devx"


def extract_binary(asset_name: str, data: bytes, command: str = COMMAND_NAME) -> bytes:
    """Return the executable contained in a downloaded release asset.

    Archives (``.tar.gz``/``.tgz``, ``.zip``, ``.gz``) are unpacked and
    the member named ``command`` (or ``command.exe``) is returned; any
    other asset is taken to be the raw binary.

    Raises:
        UpdateFailedError: If the archive is corrupt or lacks the binary
    """
    wanted = {command, f"{command}.exe"}
    name = asset_name.lower()
    try:
        if name.endswith((".tar.gz", ".tgz")):
            with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
                for member in archive.getmembers():
                    if member.isfile() and PurePosixPath(member.name).name in wanted:
                        extracted = archive.extractfile(member)
                        if extracted is not None:
                            return extracted.read()
        elif name.endswith(".zip"):
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                for info in archive.infolist():
                    if not info.is_dir() and PurePosixPath(info.filename).name in wanted:
                        return archive.read(info)
        elif name.endswith(".gz"):
            return gzip.decompress(data)
        else:
            return data
    except (tarfile.TarError, zipfile.BadZipFile, OSError, EOFError) as e:
        raise UpdateFailedError(f"updating: cannot unpack {asset_name}: {e}") from e

    raise UpdateFailedError(f"updating: {asset_name} does not contain a {command} binary")


def replace_executable(target: Path, binary: bytes) -> None:
    """Atomically replace ``target`` with ``binary``, keeping its permissions.

    Raises:
        UpdateFailedError: If any step fails; ``target`` is then unchanged
    """
    new_path = target.with_name(f".{target.name}.new")
    old_path = target.with_name(f".{target.name}.old")

    try:
        mode = stat.S_IMODE(target.stat().st_mode)
    except OSError:
        mode = 0o755

    try:
        new_path.write_bytes(binary)
        os.chmod(new_path, mode | stat.S_IXUSR)
        if os.name == "nt":
            # A running .exe cannot be overwritten, only renamed aside
            old_path.unlink(missing_ok=True)
            os.replace(target, old_path)
            try:
                os.replace(new_path, target)
            except OSError:
                os.replace(old_path, target)
                raise
        else:
            os.replace(new_path, target)
    except OSError as e:
        new_path.unlink(missing_ok=True)
        raise UpdateFailedError(f"updating: cannot replace {target}: {e}") from e

    if os.name != "nt":
        return
    try:
        old_path.unlink()
    except OSError as e:
        log_message(f"Leaving previous binary at {old_path}: {e}")


def perform_update(
    force: bool = False,
    source: GitHubReleaseSource | None = None,
    executable: Path | None = None,
    console: Console | None = None,
) -> Release:
    """Update the running devx to the newest release.

    Args:
        force: Reinstall even if the running version is current
        source: Release feed (default: GitHub)
        executable: Binary to replace (default: the running executable)
        console: Where to print the confirmation

    Returns:
        The installed release

    Raises:
        NetworkError: If the release feed cannot be reached
        AlreadyLatestError: If no newer release exists and ``force`` is False
        UpdateFailedError: If download or replacement fails
    """
    out = console or default_console
    source = source or GitHubReleaseSource()

    current = current_version()
    release = source.latest_release()
    if release is None:
        raise NetworkError(f"updating: no release information found for {source.repo}")

    latest = parse_version(release.version)
    if latest is not None and latest <= current and not force:
        raise AlreadyLatestError(
            f"updating: you are already running the latest version ({devx.__version__})",
            version=devx.__version__,
        )

    os_name, arch = host_os(), host_arch()
    asset = release.asset_for_platform(COMMAND_NAME, os_name, arch)
    if asset is None:
        raise UpdateFailedError(
            f"updating: release {release.version} has no binary for {os_name}/{arch}"
        )

    try:
        target = executable or current_executable().resolve(strict=True)
    except OSError as e:
        raise UpdateFailedError(f"updating: cannot locate the devx executable: {e}") from e
    if is_python_launch(target):
        raise UpdateFailedError(
            "updating: cannot self-update when run as a Python module; "
            "reinstall the devx binary or upgrade the Python package instead"
        )

    log_message(f"Downloading {asset.name} for release {release.version}")
    try:
        data = source.download(asset.download_url)
    except NetworkError as e:
        raise UpdateFailedError(str(e)) from e

    replace_executable(target, extract_binary(asset.name, data))
    log_message(f"Replaced {target} with release {release.version}")

    out.print(f"[success]✅ Successfully updated to version {escape(release.version)}[/success]")
    if release.release_notes.strip():
        out.print()
        out.print("[header]Release notes:[/header]")
        out.print(release.release_notes.strip(), markup=False)
    return release


__all__ = [
    "extract_binary",
    "replace_executable",
    "perform_update",
]
