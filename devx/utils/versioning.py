"""Semantic version parsing and comparison.

Release tags and the build-time version string are validated as semver
(after stripping a leading "v"). The numeric core is ordered with
``packaging``; pre-release identifiers follow semver precedence rules.
Build metadata ("+sha.abc") is ignored for ordering, as semver requires.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from packaging.version import Version

import devx

SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """A parsed semver string.

    Attributes:
        release: The MAJOR.MINOR.PATCH core
        prerelease: Dot-separated pre-release identifiers ("rc.1" -> ("rc", "1"))
        build: Build metadata, kept for display only
    """

    release: Version
    prerelease: tuple[str, ...] = ()
    build: str = field(default="")

    def _precedence(self) -> tuple:
        if not self.prerelease:
            # A release outranks every pre-release of the same core
            return (self.release, 1, ())
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease
        )
        return (self.release, 0, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def __str__(self) -> str:
        result = str(self.release)
        if self.prerelease:
            result += "-" + ".".join(self.prerelease)
        if self.build:
            result += f"+{self.build}"
        return result

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)


# Dev builds compare as 0.0.0 so any tagged release dominates them
ZERO_VERSION = SemanticVersion(Version("0.0.0"))


def normalize_version(raw: str) -> str:
    """Strip whitespace and a leading "v" from a version string."""
    value = raw.strip()
    if value[:1] in ("v", "V"):
        value = value[1:]
    return value


def is_semver(raw: str) -> bool:
    return SEMVER_PATTERN.match(normalize_version(raw)) is not None


def parse_version(raw: str) -> SemanticVersion | None:
    """Parse a semver string into an orderable SemanticVersion.

    Returns:
        The parsed version, or None if ``raw`` is not valid semver
    """
    match = SEMVER_PATTERN.match(normalize_version(raw))
    if match is None:
        return None

    major, minor, patch, prerelease, build = match.groups()
    return SemanticVersion(
        release=Version(f"{major}.{minor}.{patch}"),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=build or "",
    )


def current_version(raw: str | None = None) -> SemanticVersion:
    """The running build's version, with non-semver builds treated as 0.0.0."""
    parsed = parse_version(devx.__version__ if raw is None else raw)
    return parsed if parsed is not None else ZERO_VERSION


def is_newer(candidate: str, baseline: str) -> bool:
    """True if ``candidate`` is strictly newer than ``baseline``.

    A non-semver candidate is never newer; a non-semver baseline counts
    as 0.0.0.
    """
    parsed = parse_version(candidate)
    if parsed is None:
        return False
    return parsed > current_version(baseline)


__all__ = [
    "SEMVER_PATTERN",
    "ZERO_VERSION",
    "SemanticVersion",
    "normalize_version",
    "is_semver",
    "parse_version",
    "current_version",
    "is_newer",
]
