"""
Resolution exceptions.

Resolution errors are logical outcomes, not faults: no release or artifact
matches, or the match is ambiguous. They are returned to the caller and
never retried.
"""

from typing import Optional

from release_hosting.exceptions import HostingError
from release_hosting.models.entities import Artifact


class ResolutionError(HostingError):
    """Base exception for resolution outcomes."""

    pass


class NoMatchingRelease(ResolutionError):
    """
    No release of the package satisfies the version selector.

    Attributes:
        package: Package name
        selector: Selector text (e.g. "latest", ">=1.0.0, <2.0.0")
        available: Versions that were considered
    """

    def __init__(self, package: str, selector: str, available: Optional[list[str]] = None):
        self.package = package
        self.selector = selector
        self.available = list(available or [])
        super().__init__(
            f"No release of {package} matches {selector}",
            {"package": package, "selector": selector, "available": self.available},
        )


class NoMatchingArtifact(ResolutionError):
    """
    The chosen release has no artifact for the target (and label).

    Attributes:
        package: Package name
        version: Version of the chosen release
        target: Requested target descriptor
        label: Requested label, if any
        available_targets: Targets present in the release
    """

    def __init__(
        self,
        package: str,
        version: str,
        target: str,
        available_targets: list[str],
        label: Optional[str] = None,
    ):
        self.package = package
        self.version = version
        self.target = target
        self.label = label
        self.available_targets = list(available_targets)

        wanted = f"{target} (label '{label}')" if label is not None else target
        details = {
            "package": package,
            "version": version,
            "target": target,
            "available_targets": self.available_targets,
        }
        if label is not None:
            details["label"] = label
        super().__init__(f"{package} {version} has no artifact for {wanted}", details)


class Ambiguous(ResolutionError):
    """
    More than one artifact remains after target and label filtering.

    Attributes:
        candidates: The competing artifacts
    """

    def __init__(self, package: str, version: str, target: str, candidates: list[Artifact]):
        self.package = package
        self.version = version
        self.target = target
        self.candidates = list(candidates)
        labels = [candidate.label for candidate in self.candidates]
        super().__init__(
            f"{package} {version} has {len(self.candidates)} artifacts for {target}; "
            f"pass a label to choose one of {labels}",
            {
                "package": package,
                "version": version,
                "target": target,
                "candidates": [candidate.url for candidate in self.candidates],
                "labels": labels,
            },
        )
