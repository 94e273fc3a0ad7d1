"""
Classification of HTTP attempts.

Every attempt ends in exactly one outcome:

- Success: a coherent envelope carrying the expected payload
- Retryable: timeouts, connection failures, rate limiting (429), server errors (5xx)
- Fatal: client errors (4xx), malformed or incoherent responses,
  incompatible schema generations

The retry policy only ever sees Retryable or Fatal.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Union

import httpx

from release_hosting.models.envelope import GENERATION_FIELD, SchemaEnvelope
from release_hosting.retry.failures import ClassifiedFailure, Fatal, FailureReason, Retryable
from release_hosting.schema.codec import check_generation, decode_envelope
from release_hosting.schema.exceptions import IncompatibleGenerationError, SchemaError


@dataclass(frozen=True)
class Success:
    envelope: SchemaEnvelope
    status_code: int


Outcome = Union[Success, Retryable, Fatal]


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """
    Parse a Retry-After header into seconds.

    Accepts delta-seconds (digits only, "120") or an HTTP date. Dates in
    the past yield 0.0; anything else ("1.5", "inf", "1e3") yields None.
    """
    if value is None or not value.strip():
        return None

    value = value.strip()
    if value.isascii() and value.isdigit():
        return float(int(value))

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    return max(0.0, (when - now).total_seconds())


def _json_object(body: bytes) -> Optional[dict[str, Any]]:
    """Best-effort parse of an error body; None when it is not a JSON object."""
    try:
        parsed = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _reported_errors(body: bytes) -> tuple[str, ...]:
    """Error strings from an error response body."""
    raw = _json_object(body)
    if raw is not None and isinstance(raw.get("errors"), list):
        return tuple(str(error) for error in raw["errors"])

    text = body.decode("utf-8", errors="replace").strip()
    return (text[:500],) if text else ()


def _generation_problem(body: bytes) -> Optional[IncompatibleGenerationError]:
    """An IncompatibleGenerationError when the body is an envelope of an unreadable generation."""
    raw = _json_object(body)
    if raw is None or GENERATION_FIELD not in raw:
        return None
    try:
        check_generation(raw)
    except IncompatibleGenerationError as e:
        return e
    except SchemaError:
        return None
    return None


def classify_response(response: httpx.Response, payload_type: type) -> Outcome:
    """
    Classify a received HTTP response.

    Args:
        response: Fully read response
        payload_type: Model the envelope payload must decode into

    Returns:
        Success, Retryable or Fatal
    """
    status = response.status_code
    body = response.content

    if status == 429:
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        return Retryable(
            FailureReason.RATE_LIMITED,
            "Rate limited by hosting service",
            status_code=status,
            retry_after=retry_after,
        )

    if status >= 500:
        # an unreadable generation stays unreadable
        generation_error = _generation_problem(body)
        if generation_error is not None:
            return Fatal(
                FailureReason.INCOMPATIBLE_GENERATION,
                generation_error.message,
                status_code=status,
                schema_error=generation_error,
            )
        return Retryable(
            FailureReason.SERVER_ERROR,
            f"Hosting service error: {status}",
            status_code=status,
        )

    if status >= 400:
        generation_error = _generation_problem(body)
        if generation_error is not None:
            return Fatal(
                FailureReason.INCOMPATIBLE_GENERATION,
                generation_error.message,
                status_code=status,
                schema_error=generation_error,
            )
        return Fatal(
            FailureReason.CLIENT_ERROR,
            f"Hosting service rejected the request: {status}",
            status_code=status,
            errors=_reported_errors(body),
        )

    if not 200 <= status < 300:
        return Fatal(
            FailureReason.UNEXPECTED_STATUS,
            f"Unexpected HTTP status: {status}",
            status_code=status,
        )

    try:
        envelope = decode_envelope(body, payload_type)
    except IncompatibleGenerationError as e:
        return Fatal(
            FailureReason.INCOMPATIBLE_GENERATION,
            e.message,
            status_code=status,
            schema_error=e,
        )
    except SchemaError as e:
        return Fatal(
            FailureReason.MALFORMED_RESPONSE,
            f"Malformed {payload_type.__name__} response: {e.message}",
            status_code=status,
            schema_error=e,
        )

    if envelope.success and envelope.payload is not None:
        return Success(envelope, status)

    if not envelope.success and envelope.payload is None:
        return Fatal(
            FailureReason.SERVICE_REJECTED,
            "Hosting service reported failure",
            status_code=status,
            errors=tuple(envelope.errors),
        )

    # success=true without payload, or success=false with one
    state = "success" if envelope.success else "failure"
    payload_state = "no payload" if envelope.payload is None else "a payload"
    return Fatal(
        FailureReason.INCONSISTENT_RESPONSE,
        f"Hosting service inconsistently reported {state} with {payload_state}",
        status_code=status,
        errors=tuple(envelope.errors),
    )


def classify_exception(exc: httpx.HTTPError) -> ClassifiedFailure:
    """Classify an exception raised while sending a request."""
    if isinstance(exc, httpx.TimeoutException):
        return Retryable(FailureReason.TIMEOUT, f"Request timed out: {type(exc).__name__}")

    if isinstance(exc, (httpx.NetworkError, httpx.RemoteProtocolError)):
        return Retryable(FailureReason.CONNECTION, f"Connection failed: {exc}")

    if isinstance(exc, httpx.DecodingError):
        return Fatal(FailureReason.MALFORMED_RESPONSE, f"Undecodable response body: {exc}")

    # Unsupported protocol, proxy misconfiguration, invalid request, redirect loop
    return Fatal(FailureReason.REQUEST_ERROR, f"{type(exc).__name__}: {exc}")
