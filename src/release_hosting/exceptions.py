"""
Common base for every error this library raises.

The four error families (schema, validation, transport, resolution) all
derive from HostingError so callers can catch the whole union in one
clause and still branch on the concrete family.
"""

from typing import Any


class HostingError(Exception):
    """
    Base exception for all release-hosting errors.

    Attributes:
        message: Human-readable error description
        details: Structured error data for programmatic handling and logging
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message
