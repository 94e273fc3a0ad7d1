"""
Schema errors raised while decoding wire payloads.

Schema errors are always fatal: retrying cannot fix a shape mismatch.
"""

from typing import Any, Sequence

from release_hosting.exceptions import HostingError


class SchemaError(HostingError):
    """Base exception for payloads that cannot be interpreted."""


class MalformedJsonError(SchemaError):
    """The payload is not a JSON object."""

    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        details: dict[str, Any] = {}
        if raw_content:
            # First 500 chars only, avoid excessive logging
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error
        super().__init__(message, details)


class MissingFieldError(SchemaError):
    """A required field is absent."""

    def __init__(self, field: str, model: str | None = None, errors: list[str] | None = None):
        self.field = field
        self.model = model
        details: dict[str, Any] = {"field": field}
        if model:
            details["model"] = model
        if errors:
            details["validation_errors"] = errors[:10]
        where = f" in {model}" if model else ""
        super().__init__(f"Missing required field '{field}'{where}", details)


class TypeMismatchError(SchemaError):
    """A field has the wrong JSON type."""

    def __init__(
        self,
        field: str,
        expected: str,
        actual: str,
        model: str | None = None,
        errors: list[str] | None = None,
    ):
        self.field = field
        self.expected = expected
        self.actual = actual
        self.model = model
        details: dict[str, Any] = {"field": field, "expected": expected, "actual": actual}
        if model:
            details["model"] = model
        if errors:
            details["validation_errors"] = errors[:10]
        super().__init__(f"Field '{field}' expected {expected}, got {actual}", details)


class IncompatibleGenerationError(SchemaError):
    """The payload was written in a schema generation this client cannot read."""

    def __init__(self, found: Any, supported: Sequence[int]):
        self.found = found
        self.supported = list(supported)
        super().__init__(
            f"Schema generation {found!r} is not supported "
            f"(supported: {', '.join(str(g) for g in self.supported)})",
            {"found": found, "supported": self.supported},
        )
