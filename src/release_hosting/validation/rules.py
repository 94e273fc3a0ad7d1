"""
Validation rules, grouped into ordered checks.

Each check inspects a whole instance and yields every violation it finds,
so the pipeline can either stop at the first one (fail-fast) or collect
them all. Checks run in this order:

1. Identity fields are present (and package names are well formed)
2. Version strings parse under the version grammar
3. Target descriptors parse under the target grammar
4. Checksums use an allowed algorithm with a digest of matching length,
   sizes are non-negative, URLs are absolute http(s)
5. No duplicate artifact within a release, package versions strictly ascending

Rules are pure: no network, no filesystem.
"""

import re
from typing import Callable, Iterator
from urllib.parse import urlparse

from pydantic import BaseModel

from release_hosting.models.entities import (
    Ack,
    Artifact,
    Package,
    Release,
    ReleaseSummary,
)
from release_hosting.models.enums import ChecksumAlgorithm, SelectorKind
from release_hosting.models.query import ResolutionQuery
from release_hosting.validation.exceptions import Rule, ValidationError
from release_hosting.validation.target import parse_target
from release_hosting.validation.version import parse_range, parse_version

PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
HEX_PATTERN = re.compile(r"^[0-9a-fA-F]+$")

Check = Callable[[BaseModel], Iterator[ValidationError]]


def _artifacts(instance: BaseModel) -> list[tuple[str, Artifact]]:
    """(field prefix, artifact) pairs contained in an instance."""
    if isinstance(instance, Release):
        return [(f"artifacts[{i}].", artifact) for i, artifact in enumerate(instance.artifacts)]
    if isinstance(instance, Artifact):
        return [("", instance)]
    return []


def _required(field: str, value: str | None) -> Iterator[ValidationError]:
    if value is None or not str(value).strip():
        yield ValidationError(field, Rule.REQUIRED, f"Field '{field}' must not be empty")


def _package_name(field: str, value: str) -> Iterator[ValidationError]:
    if value and value.strip() and not PACKAGE_NAME_PATTERN.match(value):
        yield ValidationError(
            field,
            Rule.PACKAGE_NAME,
            f"Package name '{value}' must start with a letter or digit and contain only "
            f"letters, digits, '.', '_' or '-'",
            value=value,
        )


def check_identity(instance: BaseModel) -> Iterator[ValidationError]:
    """Check 1: identity fields are non-empty."""
    if isinstance(instance, (Release, ReleaseSummary, Ack)):
        yield from _required("package", instance.package)
        yield from _package_name("package", instance.package)
        yield from _required("version", instance.version)
    elif isinstance(instance, Package):
        yield from _required("name", instance.name)
        yield from _package_name("name", instance.name)
    elif isinstance(instance, ResolutionQuery):
        yield from _required("package", instance.package)
        yield from _package_name("package", instance.package)
        yield from _required("target", instance.target)
        if instance.selector.kind is SelectorKind.EXACT:
            yield from _required("selector.version", instance.selector.version)
        elif instance.selector.kind is SelectorKind.RANGE:
            yield from _required("selector.spec", instance.selector.spec)

    for prefix, artifact in _artifacts(instance):
        yield from _required(f"{prefix}target", artifact.target)
        yield from _required(f"{prefix}url", artifact.url)
        yield from _required(f"{prefix}checksum.algorithm", artifact.checksum.algorithm)
        yield from _required(f"{prefix}checksum.digest", artifact.checksum.digest)


def _version(field: str, value: str | None) -> Iterator[ValidationError]:
    if not value:
        return
    try:
        parse_version(value)
    except ValueError as e:
        yield ValidationError(field, Rule.VERSION_GRAMMAR, str(e), value=value)


def check_versions(instance: BaseModel) -> Iterator[ValidationError]:
    """Check 2: version strings parse."""
    if isinstance(instance, (Release, ReleaseSummary, Ack)):
        yield from _version("version", instance.version)
    elif isinstance(instance, Package):
        for i, version in enumerate(instance.releases):
            yield from _version(f"releases[{i}]", version)
    elif isinstance(instance, ResolutionQuery):
        selector = instance.selector
        if selector.kind is SelectorKind.EXACT:
            yield from _version("selector.version", selector.version)
        elif selector.kind is SelectorKind.RANGE and selector.spec:
            try:
                parse_range(selector.spec)
            except ValueError as e:
                yield ValidationError("selector.spec", Rule.VERSION_RANGE, str(e), value=selector.spec)


def _target(field: str, value: str | None) -> Iterator[ValidationError]:
    if not value:
        return
    try:
        parse_target(value)
    except ValueError as e:
        yield ValidationError(field, Rule.TARGET_GRAMMAR, str(e), value=value)


def check_targets(instance: BaseModel) -> Iterator[ValidationError]:
    """Check 3: target descriptors parse."""
    if isinstance(instance, ResolutionQuery):
        yield from _target("target", instance.target)
    for prefix, artifact in _artifacts(instance):
        yield from _target(f"{prefix}target", artifact.target)


def check_integrity(instance: BaseModel) -> Iterator[ValidationError]:
    """Check 4: checksum algorithm and digest, size, URL."""
    allowed = [algorithm.value for algorithm in ChecksumAlgorithm]

    for prefix, artifact in _artifacts(instance):
        checksum = artifact.checksum
        if checksum.algorithm:
            try:
                algorithm = ChecksumAlgorithm(checksum.algorithm.lower())
            except ValueError:
                yield ValidationError(
                    f"{prefix}checksum.algorithm",
                    Rule.CHECKSUM_ALGORITHM,
                    f"Checksum algorithm '{checksum.algorithm}' is not allowed "
                    f"(expected one of {', '.join(allowed)})",
                    value=checksum.algorithm,
                )
            else:
                digest = checksum.digest
                if digest and (
                    len(digest) != algorithm.digest_length or not HEX_PATTERN.match(digest)
                ):
                    yield ValidationError(
                        f"{prefix}checksum.digest",
                        Rule.CHECKSUM_DIGEST,
                        f"{algorithm.value} digest must be {algorithm.digest_length} hex "
                        f"characters (got {len(digest)})",
                        value=digest,
                    )

        if artifact.size < 0:
            yield ValidationError(
                f"{prefix}size",
                Rule.ARTIFACT_SIZE,
                f"Artifact size must be non-negative (got {artifact.size})",
                value=artifact.size,
            )

        if artifact.url:
            parsed = urlparse(artifact.url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                yield ValidationError(
                    f"{prefix}url",
                    Rule.ARTIFACT_URL,
                    f"Artifact URL '{artifact.url}' must be an absolute http(s) URL",
                    value=artifact.url,
                )


def check_uniqueness(instance: BaseModel) -> Iterator[ValidationError]:
    """Check 5: no duplicate artifacts, package versions strictly ascending."""
    if isinstance(instance, Release):
        seen: dict[tuple[str, str | None], int] = {}
        for i, artifact in enumerate(instance.artifacts):
            key = (artifact.target, artifact.label)
            if key in seen:
                label = f" with label '{artifact.label}'" if artifact.label else ""
                yield ValidationError(
                    f"artifacts[{i}]",
                    Rule.DUPLICATE_ARTIFACT,
                    f"Release {instance.package} {instance.version} already has an artifact "
                    f"for target '{artifact.target}'{label} (artifacts[{seen[key]}])",
                    value=artifact.target,
                )
            else:
                seen[key] = i

    elif isinstance(instance, Package):
        previous = None
        for i, raw in enumerate(instance.releases):
            try:
                current = parse_version(raw)
            except ValueError:
                # Reported by check_versions
                continue
            if previous is not None and not current > previous:
                yield ValidationError(
                    f"releases[{i}]",
                    Rule.VERSION_ORDER,
                    f"Release versions must be strictly ascending: '{raw}' follows '{previous}'",
                    value=raw,
                )
            previous = current


CHECKS: tuple[Check, ...] = (
    check_identity,
    check_versions,
    check_targets,
    check_integrity,
    check_uniqueness,
)


def check_key(package: str, version: str | None = None) -> Iterator[ValidationError]:
    """Identity and version checks for a bare (package, version) lookup key."""
    yield from _required("package", package)
    yield from _package_name("package", package)
    if version is not None:
        yield from _required("version", version)
        yield from _version("version", version)
