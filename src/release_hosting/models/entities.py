"""
Entity models shared by producers and consumers of the hosting service.

Containment is strict: a Package owns Release identifiers, a Release owns
its Artifacts. Models carry structure only; grammar, allow-list and
duplicate rules live in the validation layer so that decoding reports
shape problems and validation reports rule problems.

Every model allows unknown fields. They are kept in ``model_extra`` and
written back out on encode, which lets an older client pass newer
payloads through untouched.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Checksum(BaseModel):
    """Content checksum of an artifact (algorithm + hex digest)."""

    model_config = ConfigDict(extra="allow")

    algorithm: str = Field(..., description="Hash algorithm name, e.g. 'sha256'")
    digest: str = Field(..., description="Hex-encoded digest")


class Artifact(BaseModel):
    """
    A single downloadable file belonging to one Release and one target.

    Within a Release an artifact is identified by (target, label).
    """

    model_config = ConfigDict(extra="allow")

    target: str = Field(..., description="Target descriptor, e.g. 'linux-x64'")
    url: str = Field(..., description="Absolute download location")
    checksum: Checksum = Field(..., description="Content checksum")
    size: int = Field(..., description="Size in bytes")
    label: Optional[str] = Field(
        default=None,
        description="Optional human label such as 'installer' or 'archive'",
    )


class Release(BaseModel):
    """A version of a package with its platform-specific artifacts."""

    model_config = ConfigDict(extra="allow")

    package: str = Field(..., description="Owning package name")
    version: str = Field(..., description="Semantic version string")
    published_at: datetime = Field(..., description="Publish timestamp")
    artifacts: list[Artifact] = Field(default_factory=list)
    tag: Optional[str] = Field(default=None, description="Source control tag, e.g. 'v1.2.0'")
    notes: Optional[str] = Field(default=None, description="Release notes / announcement body")

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the release: (package name, version)."""
        return (self.package, self.version)


class Package(BaseModel):
    """A named package and the ordered list of versions it owns."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Package name, unique within the hosting namespace")
    releases: list[str] = Field(
        default_factory=list,
        description="Release versions owned by the package, oldest first",
    )


class ReleaseSummary(BaseModel):
    """Listing entry for a release; artifacts are fetched separately."""

    model_config = ConfigDict(extra="allow")

    package: str
    version: str
    published_at: datetime
    artifact_count: Optional[int] = None


class ReleasePage(BaseModel):
    """One page of a release listing."""

    model_config = ConfigDict(extra="allow")

    releases: list[ReleaseSummary] = Field(default_factory=list)


class Ack(BaseModel):
    """Acknowledgement returned by the service for an announced release."""

    model_config = ConfigDict(extra="allow")

    package: str
    version: str
    release_url: Optional[str] = None
