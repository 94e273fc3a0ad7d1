"""
Caller-supplied resolution queries.

Queries are ephemeral: built per call, never persisted, never sent over
the wire as-is.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from release_hosting.models.enums import SelectorKind


class VersionSelector(BaseModel):
    """
    Which release(s) of a package a query accepts.

    Use the constructors rather than building one by hand:

        VersionSelector.exact("1.2.0")
        VersionSelector.latest()
        VersionSelector.range(">=1.0.0, <2.0.0")
    """

    model_config = ConfigDict(frozen=True)

    kind: SelectorKind
    version: Optional[str] = Field(default=None, description="Version for exact selectors")
    spec: Optional[str] = Field(default=None, description="Comparator list for range selectors")
    allow_prerelease: bool = Field(
        default=False,
        description="Whether latest/range selection may pick prerelease versions",
    )

    @classmethod
    def exact(cls, version: str) -> "VersionSelector":
        return cls(kind=SelectorKind.EXACT, version=version)

    @classmethod
    def latest(cls, allow_prerelease: bool = False) -> "VersionSelector":
        return cls(kind=SelectorKind.LATEST, allow_prerelease=allow_prerelease)

    @classmethod
    def range(cls, spec: str, allow_prerelease: bool = False) -> "VersionSelector":
        return cls(kind=SelectorKind.RANGE, spec=spec, allow_prerelease=allow_prerelease)

    def __str__(self) -> str:
        if self.kind is SelectorKind.EXACT:
            return f"=={self.version}"
        if self.kind is SelectorKind.RANGE:
            return str(self.spec)
        return "latest"


class ResolutionQuery(BaseModel):
    """
    Request to pick exactly one artifact.

    Attributes:
        package: Package name
        selector: Version selector
        target: Target descriptor of the consumer, e.g. 'linux-x64'
        label: Optional label filter, e.g. 'installer'
        allow_fallback: Override the engine's target-fallback policy (None = use engine default)
    """

    model_config = ConfigDict(frozen=True)

    package: str
    selector: VersionSelector
    target: str
    label: Optional[str] = None
    allow_fallback: Optional[bool] = None
