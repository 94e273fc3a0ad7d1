"""
Validation exceptions.

Validation errors are raised before any network call when the caller
built data that breaks a rule, and are never retried.
"""

from enum import Enum
from typing import Any

from release_hosting.exceptions import HostingError


class Rule(str, Enum):
    """Identifiers of the validation rules, in check order."""

    REQUIRED = "required"
    PACKAGE_NAME = "package_name"
    VERSION_GRAMMAR = "version_grammar"
    VERSION_RANGE = "version_range"
    TARGET_GRAMMAR = "target_grammar"
    CHECKSUM_ALGORITHM = "checksum_algorithm"
    CHECKSUM_DIGEST = "checksum_digest"
    ARTIFACT_SIZE = "artifact_size"
    ARTIFACT_URL = "artifact_url"
    DUPLICATE_ARTIFACT = "duplicate_artifact"
    VERSION_ORDER = "version_order"


class ValidationError(HostingError):
    """
    A model instance violates a validation rule.

    Attributes:
        field: Path of the violating field (e.g. "artifacts[1].checksum.digest")
        rule: The violated Rule
        value: The offending value, when there is one
    """

    def __init__(self, field: str, rule: Rule, message: str, value: Any | None = None):
        self.field = field
        self.rule = rule
        self.value = value

        details: dict[str, Any] = {"field": field, "rule": rule.value}
        if value is not None:
            details["invalid_value"] = str(value)
        super().__init__(message, details)
