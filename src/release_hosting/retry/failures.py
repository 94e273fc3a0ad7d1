"""
Classified failures of a single attempt.

The transport classifies every failed attempt as Retryable or Fatal; the
retry policy decides what to do next from that classification alone.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from release_hosting.schema.exceptions import SchemaError


class FailureReason(str, Enum):
    """Why an attempt failed."""

    # Retryable
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"

    # Fatal
    CLIENT_ERROR = "client_error"
    REQUEST_ERROR = "request_error"
    MALFORMED_RESPONSE = "malformed_response"
    INCOMPATIBLE_GENERATION = "incompatible_generation"
    SERVICE_REJECTED = "service_rejected"
    INCONSISTENT_RESPONSE = "inconsistent_response"
    INVALID_RESPONSE = "invalid_response"
    UNEXPECTED_STATUS = "unexpected_status"
    PAGINATION_LOOP = "pagination_loop"


@dataclass(frozen=True)
class Retryable:
    reason: FailureReason
    detail: str
    status_code: Optional[int] = None
    retry_after: Optional[float] = None  # seconds, from the Retry-After header


@dataclass(frozen=True)
class Fatal:
    reason: FailureReason
    detail: str
    status_code: Optional[int] = None
    errors: tuple[str, ...] = field(default_factory=tuple)
    schema_error: Optional[SchemaError] = None


ClassifiedFailure = Union[Retryable, Fatal]
