"""
Pure selection rules: which release, then which artifact.

No I/O here; the engine feeds these functions what the transport fetched.

Release selection:
- exact: the release whose version equals the requested one (build metadata ignored)
- latest: maximum version, prereleases excluded unless allowed
- range: maximum version satisfying every comparator, same prerelease rule

Artifact selection:
1. Exact target match (or, with fallback enabled, the first non-empty step
   of the target's fallback chain)
2. Label filter, when a label is given, on that step only; no candidate
   left is NoMatchingArtifact even if a more generic target has the label
3. More than one candidate left is Ambiguous
"""

from typing import Iterable, Optional, Sequence

import structlog

from release_hosting.models.entities import Artifact, Release, ReleaseSummary
from release_hosting.models.enums import SelectorKind
from release_hosting.models.query import VersionSelector
from release_hosting.resolution.exceptions import Ambiguous, NoMatchingArtifact, NoMatchingRelease
from release_hosting.validation.target import TargetDescriptor, parse_target
from release_hosting.validation.version import Version, parse_range, parse_version

logger = structlog.get_logger(__name__)


def _parsed_versions(summaries: Iterable[ReleaseSummary]) -> list[tuple[Version, ReleaseSummary]]:
    parsed = []
    for summary in summaries:
        try:
            parsed.append((parse_version(summary.version), summary))
        except ValueError:
            logger.warning("Skipping unparsable version", package=summary.package, version=summary.version)
    return parsed


def select_release(
    package: str,
    summaries: Sequence[ReleaseSummary],
    selector: VersionSelector,
) -> ReleaseSummary:
    """
    Choose the release a selector points at.

    Raises:
        NoMatchingRelease: Nothing satisfies the selector
    """
    candidates = _parsed_versions(summaries)
    available = [summary.version for summary in summaries]

    if selector.kind is SelectorKind.EXACT:
        wanted = parse_version(selector.version)
        for version, summary in candidates:
            if version == wanted:
                return summary
        raise NoMatchingRelease(package, str(selector), available)

    if not selector.allow_prerelease:
        candidates = [(v, s) for v, s in candidates if not v.is_prerelease]

    if selector.kind is SelectorKind.RANGE:
        version_range = parse_range(selector.spec)
        candidates = [(v, s) for v, s in candidates if version_range.contains(v)]

    if not candidates:
        raise NoMatchingRelease(package, str(selector), available)

    version, summary = max(candidates, key=lambda pair: pair[0])
    logger.debug("Selected release", package=package, version=str(version), selector=str(selector))
    return summary


def _targets(release: Release) -> list[tuple[Optional[TargetDescriptor], Artifact]]:
    parsed = []
    for artifact in release.artifacts:
        try:
            parsed.append((parse_target(artifact.target), artifact))
        except ValueError:
            parsed.append((None, artifact))
    return parsed


def select_artifact(
    release: Release,
    target: str,
    label: Optional[str] = None,
    allow_fallback: bool = False,
) -> Artifact:
    """
    Choose the single artifact of ``release`` for ``target``.

    Raises:
        NoMatchingArtifact: No artifact for the target (and label)
        Ambiguous: Several artifacts remain and no label narrows them down
    """
    wanted = parse_target(target)
    chain = wanted.fallback_chain() if allow_fallback else [wanted]
    artifacts = _targets(release)

    for step in chain:
        matches = [artifact for descriptor, artifact in artifacts if descriptor == step]
        if not matches:
            continue
        if label is not None:
            matches = [artifact for artifact in matches if artifact.label == label]
            if not matches:
                # the label is not swapped for one on a more generic target
                break

        if step != wanted:
            logger.info(
                "Falling back to a more generic target",
                package=release.package,
                version=release.version,
                requested=str(wanted),
                selected=str(step),
            )
        if len(matches) > 1:
            raise Ambiguous(release.package, release.version, str(step), matches)
        return matches[0]

    raise NoMatchingArtifact(
        release.package,
        release.version,
        target,
        [artifact.target for artifact in release.artifacts],
        label=label,
    )
