"""
Pydantic data models for the release-hosting wire format.

Includes:
- Entities (Package, Release, Artifact, Checksum, ReleaseSummary, Ack)
- SchemaEnvelope and schema-generation constants
- Enums (ChecksumAlgorithm, SelectorKind)
- Resolution queries (ResolutionQuery, VersionSelector)
"""

from release_hosting.models.entities import (
    Ack,
    Artifact,
    Checksum,
    Package,
    Release,
    ReleasePage,
    ReleaseSummary,
)
from release_hosting.models.enums import ChecksumAlgorithm, SelectorKind
from release_hosting.models.envelope import (
    GENERATION_FIELD,
    GENERATION_HEADER,
    OLDEST_READABLE_GENERATION,
    SCHEMA_GENERATION,
    SchemaEnvelope,
    supported_generations,
)
from release_hosting.models.query import ResolutionQuery, VersionSelector

__all__ = [
    # Entities
    "Ack",
    "Artifact",
    "Checksum",
    "Package",
    "Release",
    "ReleasePage",
    "ReleaseSummary",
    # Enums
    "ChecksumAlgorithm",
    "SelectorKind",
    # Envelope
    "GENERATION_FIELD",
    "GENERATION_HEADER",
    "OLDEST_READABLE_GENERATION",
    "SCHEMA_GENERATION",
    "SchemaEnvelope",
    "supported_generations",
    # Queries
    "ResolutionQuery",
    "VersionSelector",
]
