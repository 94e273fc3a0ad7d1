"""Release version parsing, ordering and ranges.

Version strings follow Semantic Versioning 2.0.0:
    MAJOR.MINOR.PATCH[-prerelease][+build]

Example:
    1.4.0-rc.1+build.7

Ordering follows SemVer precedence: numeric core first, a prerelease sorts
below its release, prerelease identifiers compare numerically when both
are numeric and lexically otherwise, numeric identifiers sort below
alphanumeric ones. Build metadata is ignored for ordering and equality.

Ranges are comma-separated comparators:
    >=1.0.0, <2.0.0
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field

# Regex from semver.org, anchored
VERSION_PATTERN = re.compile(
    r"^"
    r"(?P<major>0|[1-9]\d*)\."
    r"(?P<minor>0|[1-9]\d*)\."
    r"(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
    r"$"
)

COMPARATOR_PATTERN = re.compile(r"^\s*(?P<op>==|!=|>=|<=|>|<)?\s*(?P<version>\S+)\s*$")


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """Parsed release version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Dot-separated prerelease identifiers (empty for releases).
        build: Dot-separated build metadata identifiers.
        raw: Original version string.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()
    raw: str = field(default="", compare=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _precedence_key(self) -> tuple:
        if not self.prerelease:
            pre: tuple = (1,)
        else:
            pre = (
                0,
                tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in self.prerelease),
            )
        return (self.major, self.minor, self.patch, pre)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __str__(self) -> str:
        if self.raw:
            return self.raw
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def parse_version(version_str: str) -> Version:
    """Parse a version string.

    Args:
        version_str: Version string to parse.

    Returns:
        Parsed Version.

    Raises:
        ValueError: If the string is not a valid semantic version.
    """
    if not isinstance(version_str, str) or not version_str:
        raise ValueError("Version string is empty")

    match = VERSION_PATTERN.match(version_str)
    if not match:
        raise ValueError(
            f"Invalid version '{version_str}': expected MAJOR.MINOR.PATCH[-prerelease][+build]"
        )

    prerelease = match.group("prerelease")
    build = match.group("build")
    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
        raw=version_str,
    )


def is_valid_version(version_str: str) -> bool:
    """Check if a version string is valid without raising."""
    try:
        parse_version(version_str)
        return True
    except ValueError:
        return False


_OPERATORS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    ">=": lambda a, b: a >= b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    "<": lambda a, b: a < b,
}


@dataclass(frozen=True)
class VersionRange:
    """Conjunction of version comparators.

    Attributes:
        comparators: (operator, version) pairs that must all hold.
        raw: Original range string.
    """

    comparators: tuple[tuple[str, Version], ...]
    raw: str = ""

    def contains(self, version: Version) -> bool:
        return all(_OPERATORS[op](version, bound) for op, bound in self.comparators)

    def __contains__(self, version: Version) -> bool:
        return self.contains(version)

    def __str__(self) -> str:
        return self.raw or ", ".join(f"{op}{bound}" for op, bound in self.comparators)


def parse_range(spec: str) -> VersionRange:
    """Parse a comparator list such as ``">=1.0.0, <2.0.0"``.

    A comparator without an operator means ``==``.

    Raises:
        ValueError: If the spec is empty or any comparator is invalid.
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ValueError("Version range is empty")

    comparators = []
    for part in spec.split(","):
        match = COMPARATOR_PATTERN.match(part)
        if not match:
            raise ValueError(f"Invalid comparator '{part.strip()}' in range '{spec}'")
        op = match.group("op") or "=="
        comparators.append((op, parse_version(match.group("version"))))

    return VersionRange(comparators=tuple(comparators), raw=spec)
