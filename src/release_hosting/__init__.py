"""
Release Hosting Client

Publish and discover versioned release artifacts on a hosting service.

Importing this package gives the schema-only surface: models, codec,
JSON Schema generation and validation, with no networking dependency
loaded. Client names (ReleaseHostingClient, HostingClient, RetryPolicy,
ResolutionEngine, Settings, ...) are imported on first access.
"""

import importlib
from typing import Any

from release_hosting.exceptions import HostingError
from release_hosting.models import (
    Ack,
    Artifact,
    Checksum,
    ChecksumAlgorithm,
    Package,
    Release,
    ReleasePage,
    ReleaseSummary,
    ResolutionQuery,
    SchemaEnvelope,
    SelectorKind,
    VersionSelector,
)
from release_hosting.schema import (
    IncompatibleGenerationError,
    MalformedJsonError,
    MissingFieldError,
    SchemaCodec,
    SchemaError,
    TypeMismatchError,
    decode,
    decode_envelope,
    encode,
    json_schema,
    schema_document,
)
from release_hosting.validation import Rule, ValidationError, ValidationPipeline

__version__ = "0.1.0"

# name -> module, resolved on first attribute access
_CLIENT_EXPORTS = {
    "ReleaseHostingClient": "release_hosting.client",
    "HostingClient": "release_hosting.transport",
    "BaseTransportClient": "release_hosting.transport",
    "ReleaseListing": "release_hosting.transport",
    "TransportError": "release_hosting.transport",
    "FatalTransportError": "release_hosting.transport",
    "GaveUpAfterRetries": "release_hosting.transport",
    "TransportCancelled": "release_hosting.transport",
    "RetryPolicy": "release_hosting.retry",
    "ResolutionEngine": "release_hosting.resolution",
    "ResolutionError": "release_hosting.resolution",
    "NoMatchingRelease": "release_hosting.resolution",
    "NoMatchingArtifact": "release_hosting.resolution",
    "Ambiguous": "release_hosting.resolution",
    "Settings": "release_hosting.config",
    "configure_logging": "release_hosting.logging_config",
}


def __getattr__(name: str) -> Any:
    module_name = _CLIENT_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    value = getattr(importlib.import_module(module_name), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(_CLIENT_EXPORTS))


__all__ = [
    "__version__",
    "HostingError",
    # Models
    "Ack",
    "Artifact",
    "Checksum",
    "ChecksumAlgorithm",
    "Package",
    "Release",
    "ReleasePage",
    "ReleaseSummary",
    "ResolutionQuery",
    "SchemaEnvelope",
    "SelectorKind",
    "VersionSelector",
    # Codec
    "SchemaCodec",
    "encode",
    "decode",
    "decode_envelope",
    "json_schema",
    "schema_document",
    "SchemaError",
    "MalformedJsonError",
    "MissingFieldError",
    "TypeMismatchError",
    "IncompatibleGenerationError",
    # Validation
    "ValidationPipeline",
    "ValidationError",
    "Rule",
]
