"""
Custom exceptions for the transport layer.

Every failed remote operation surfaces as exactly one of:

- FatalTransportError: the service (or its response) made a retry pointless
- GaveUpAfterRetries: retryable failures exhausted the retry policy
- TransportCancelled: the caller cancelled or the overall timeout elapsed

Caller mistakes are reported as ValidationError before any request is sent.
"""

from typing import Optional

from release_hosting.exceptions import HostingError
from release_hosting.retry.failures import FailureReason
from release_hosting.schema.exceptions import SchemaError


class TransportError(HostingError):
    """
    Base exception for all transport errors.

    Attributes:
        operation: Remote operation that failed (e.g. "fetch_release")
    """

    def __init__(self, message: str, operation: str, details: dict | None = None):
        self.operation = operation
        super().__init__(message, {"operation": operation, **(details or {})})


class FatalTransportError(TransportError):
    """
    A non-retryable failure.

    Raised for client errors (4xx), malformed or incoherent responses,
    incompatible schema generations, invalid received data and broken
    pagination. Never retried.

    Attributes:
        reason: Classified FailureReason
        status_code: HTTP status, when a response was received
        errors: Error strings reported by the service
        schema_error: Underlying decode failure, for schema problems
    """

    def __init__(
        self,
        message: str,
        operation: str,
        reason: FailureReason,
        status_code: Optional[int] = None,
        errors: Optional[list[str]] = None,
        schema_error: Optional[SchemaError] = None,
    ):
        self.reason = reason
        self.status_code = status_code
        self.errors = list(errors or [])
        self.schema_error = schema_error

        details: dict = {"reason": reason.value}
        if status_code is not None:
            details["status_code"] = status_code
        if self.errors:
            details["errors"] = self.errors
        if schema_error is not None:
            details["schema_error"] = schema_error.message
        super().__init__(message, operation, details)


class GaveUpAfterRetries(TransportError):
    """
    Retryable failures exhausted the retry policy.

    Attributes:
        attempts: Number of attempts made (equals the policy's cap)
        last_reason: FailureReason of the final attempt
        history: FailureReason values of every failed attempt, in order
    """

    def __init__(
        self,
        operation: str,
        attempts: int,
        last_reason: FailureReason,
        last_detail: str,
        history: list[str],
    ):
        self.attempts = attempts
        self.last_reason = last_reason
        self.last_detail = last_detail
        self.history = list(history)
        super().__init__(
            f"{operation} gave up after {attempts} attempt(s): {last_detail}",
            operation,
            {
                "attempts": attempts,
                "last_reason": last_reason.value,
                "history": self.history,
            },
        )


class TransportCancelled(TransportError):
    """
    The operation was cancelled by the caller or hit its overall timeout.

    Attributes:
        attempts: Number of attempts started before cancellation
        cause: "cancelled" or "timeout"
    """

    def __init__(self, operation: str, attempts: int, cause: str = "cancelled"):
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"{operation} {'timed out' if cause == 'timeout' else 'was cancelled'} "
            f"after {attempts} attempt(s)",
            operation,
            {"attempts": attempts, "cause": cause},
        )
