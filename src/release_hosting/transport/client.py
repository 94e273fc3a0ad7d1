"""
HTTP client for the release-hosting service.

Communicates with the hosting API using httpx AsyncClient. Supports:
- Release announcement, release/package fetch, paginated release listing
- Bearer authentication scoped to one (source_host, owner) namespace
- Retries under a RetryPolicy with caller cancellation and overall timeouts
- Validation of outgoing and incoming payloads
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Optional, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, SecretStr

from release_hosting.models.entities import (
    Ack,
    Package,
    Release,
    ReleasePage,
    ReleaseSummary,
)
from release_hosting.models.envelope import GENERATION_HEADER, SCHEMA_GENERATION, SchemaEnvelope
from release_hosting.monitoring.metrics import (
    hosting_request_latency_seconds,
    hosting_requests_total,
    hosting_retries_total,
)
from release_hosting.retry.failures import FailureReason, Fatal
from release_hosting.retry.policy import GiveUp, RetryPolicy
from release_hosting.schema.codec import encode, wrap
from release_hosting.transport.base_client import BaseTransportClient
from release_hosting.transport.exceptions import (
    FatalTransportError,
    GaveUpAfterRetries,
    TransportCancelled,
)
from release_hosting.transport.listing import ReleaseListing
from release_hosting.transport.outcome import Outcome, Success, classify_exception, classify_response
from release_hosting.validation.exceptions import ValidationError
from release_hosting.validation.pipeline import ValidationPipeline
from release_hosting.validation.version import parse_version

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

IDENTIFIER_HEADER = "X-Hosting-Identifier"
IDEMPOTENCY_HEADER = "Idempotency-Key"


def _header_safe(value: str) -> bool:
    return bool(value) and value.isascii() and value.isprintable()


def auth_headers(
    credential: Optional[SecretStr], source_host: str, owner: str
) -> dict[str, str]:
    """
    Headers identifying (and optionally authenticating) the namespace.

    Raises:
        ValueError: Empty namespace part, or credential/namespace not usable in a header
    """
    for name, part in (("source_host", source_host), ("owner", owner)):
        if not part or "/" in part:
            raise ValueError(f"Namespace {name} must be a non-empty name without '/', got {part!r}")

    identifier = f"{source_host}/{owner}"
    if not _header_safe(identifier):
        raise ValueError(f"Namespace '{identifier}' cannot be sent as an HTTP header")

    headers = {IDENTIFIER_HEADER: identifier}
    if credential is not None:
        token = credential.get_secret_value()
        if not _header_safe(token) or " " in token:
            raise ValueError("Credential is empty or contains characters not allowed in an HTTP header")
        headers["Authorization"] = f"Bearer {token}"
    return headers


@dataclass
class _CallState:
    """Progress of one logical call, shared with the timeout wrapper."""

    operation: str
    attempts: int = 0


class HostingClient(BaseTransportClient):
    """
    httpx-based client for one hosting namespace.

    API Endpoints ({scope} = {source_host}/{owner}):
    - POST /{scope}/{package}/releases: announce a release
    - GET /{scope}/{package}/releases/{version}: fetch one release
    - GET /{scope}/{package}/releases: list release summaries (paginated)
    - GET /{scope}/{package}: fetch a package

    Features:
    - Connection pooling via persistent AsyncClient (or an injected one)
    - Retries of timeouts, connection failures, 429 and 5xx under RetryPolicy
    - Retry-After honored verbatim on 429
    - Cancellation via asyncio.Event, overall timeout per call
    """

    def __init__(
        self,
        base_url: str,
        source_host: str,
        owner: str,
        credential: Optional[str | SecretStr] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        validator: Optional[ValidationPipeline] = None,
        request_timeout: float = 10.0,
        connection_limits: Optional[httpx.Limits] = None,
        page_size: Optional[int] = None,
    ):
        """
        Initialize hosting client.

        Args:
            base_url: Hosting service API root
            source_host: Source forge of the namespace (e.g. "github")
            owner: Namespace owner
            credential: Bearer token; None builds an unauthenticated client
            http_client: Injected AsyncClient (left open on close()); created lazily if None
            retry_policy: Retry policy (default RetryPolicy())
            validator: Validation pipeline for outgoing and incoming payloads
            request_timeout: Per-request HTTP timeout in seconds
            connection_limits: httpx pool limits for the owned AsyncClient
            page_size: Default page size for listings (None = server default)

        Raises:
            ValueError: Credential or namespace unusable as HTTP header values
        """
        super().__init__(base_url, source_host, owner)

        if isinstance(credential, str):
            credential = SecretStr(credential)
        self._headers = auth_headers(credential, source_host, owner)
        self.authenticated = credential is not None

        self.retry_policy = retry_policy or RetryPolicy()
        self.validator = validator or ValidationPipeline()
        self.request_timeout = request_timeout
        self.page_size = page_size

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            )
        self._connection_limits = connection_limits

        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._owns_client and (self._client is None or self._client.is_closed):
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.request_timeout),
                limits=self._connection_limits,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    def _url(self, *segments: str) -> str:
        path = "/".join(quote(segment, safe="") for segment in segments)
        return f"{self.base_url}/{quote(self.source_host, safe='')}/{quote(self.owner, safe='')}/{path}"

    # === Operations ===

    async def announce_release(
        self,
        release: Release,
        *,
        idempotency_key: Optional[str] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Ack:
        """
        Announce a release via POST /{scope}/{package}/releases.

        Body: envelope of the Release. Response: envelope of an Ack.
        """
        self.validator.validate(release)

        headers = {}
        if idempotency_key is not None:
            headers[IDEMPOTENCY_HEADER] = idempotency_key

        envelope = await self._execute(
            "announce_release",
            "POST",
            self._url(release.package, "releases"),
            Ack,
            content=encode(wrap(release)),
            headers=headers,
            cancel=cancel,
            timeout=timeout,
        )
        ack = envelope.payload
        self._check_received("announce_release", ack)

        if ack.package != release.package or parse_version(ack.version) != parse_version(release.version):
            raise FatalTransportError(
                f"Announced {release.package} {release.version} but service acknowledged "
                f"{ack.package} {ack.version}",
                "announce_release",
                FailureReason.INVALID_RESPONSE,
            )

        logger.info(
            "Release announced",
            package=release.package,
            version=release.version,
            artifacts=len(release.artifacts),
            release_url=ack.release_url,
        )
        return ack

    async def fetch_release(
        self,
        package: str,
        version: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Release:
        """Fetch a release via GET /{scope}/{package}/releases/{version}."""
        self.validator.validate_key(package, version)

        envelope = await self._execute(
            "fetch_release",
            "GET",
            self._url(package, "releases", version),
            Release,
            cancel=cancel,
            timeout=timeout,
        )
        release = envelope.payload
        self._check_received("fetch_release", release)

        if release.package != package or parse_version(release.version) != parse_version(version):
            raise FatalTransportError(
                f"Requested {package} {version} but received {release.package} {release.version}",
                "fetch_release",
                FailureReason.INVALID_RESPONSE,
            )

        logger.debug(
            "Release fetched",
            package=package,
            version=release.version,
            artifacts=len(release.artifacts),
        )
        return release

    async def fetch_package(
        self,
        package: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Package:
        """Fetch a package via GET /{scope}/{package}."""
        self.validator.validate_key(package)

        envelope = await self._execute(
            "fetch_package",
            "GET",
            self._url(package),
            Package,
            cancel=cancel,
            timeout=timeout,
        )
        result = envelope.payload
        self._check_received("fetch_package", result)

        if result.name != package:
            raise FatalTransportError(
                f"Requested package {package} but received {result.name}",
                "fetch_package",
                FailureReason.INVALID_RESPONSE,
            )
        return result

    def list_releases(
        self,
        package: str,
        *,
        page_size: Optional[int] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> ReleaseListing:
        """
        List release summaries via GET /{scope}/{package}/releases.

        Query parameters: page_token (omitted on the first page), page_size.
        """
        self.validator.validate_key(package)
        page_size = page_size if page_size is not None else self.page_size

        async def fetch_page(
            page_token: Optional[str],
        ) -> tuple[list[ReleaseSummary], Optional[str]]:
            return await self._fetch_release_page(package, page_token, page_size, cancel, timeout)

        return ReleaseListing(package, fetch_page)

    async def _fetch_release_page(
        self,
        package: str,
        page_token: Optional[str],
        page_size: Optional[int],
        cancel: Optional[asyncio.Event],
        timeout: Optional[float],
    ) -> tuple[list[ReleaseSummary], Optional[str]]:
        params: dict[str, str | int] = {}
        if page_token is not None:
            params["page_token"] = page_token
        if page_size is not None:
            params["page_size"] = page_size

        envelope = await self._execute(
            "list_releases",
            "GET",
            self._url(package, "releases"),
            ReleasePage,
            params=params,
            cancel=cancel,
            timeout=timeout,
        )

        summaries = envelope.payload.releases
        for summary in summaries:
            self._check_received("list_releases", summary)
            if summary.package != package:
                raise FatalTransportError(
                    f"Listing for {package} contained a release of {summary.package}",
                    "list_releases",
                    FailureReason.INVALID_RESPONSE,
                )

        logger.debug(
            "Release page fetched",
            package=package,
            releases=len(summaries),
            has_next=bool(envelope.next_page_token),
        )
        return summaries, envelope.next_page_token

    def _check_received(self, operation: str, instance: BaseModel) -> None:
        """Validate a received payload; violations are the service's fault, not the caller's."""
        try:
            self.validator.validate(instance)
        except ValidationError as e:
            logger.error(
                "Received invalid data from hosting service",
                operation=operation,
                field=e.field,
                rule=e.rule.value,
            )
            raise FatalTransportError(
                f"Hosting service returned an invalid {type(instance).__name__}: {e.message}",
                operation,
                FailureReason.INVALID_RESPONSE,
                errors=[e.message],
            ) from e

    # === Request execution ===

    async def _execute(
        self,
        operation: str,
        method: str,
        url: str,
        payload_type: type[ModelT],
        *,
        content: Optional[bytes] = None,
        params: Optional[dict] = None,
        headers: Optional[dict[str, str]] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> SchemaEnvelope[ModelT]:
        """
        Run one logical call: attempts, classification, backoff.

        Raises:
            FatalTransportError, GaveUpAfterRetries, TransportCancelled
        """
        request_headers = {
            **self._headers,
            GENERATION_HEADER: str(SCHEMA_GENERATION),
            "Accept": "application/json",
            **(headers or {}),
        }
        if content is not None:
            request_headers["Content-Type"] = "application/json"

        state = _CallState(operation)
        call = self._attempt_until_done(
            state, method, url, payload_type, content, params, request_headers, cancel
        )
        if timeout is None:
            return await call

        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            logger.warning(
                "Hosting request timed out",
                operation=operation,
                timeout=timeout,
                attempts=state.attempts,
            )
            raise TransportCancelled(operation, state.attempts, cause="timeout") from e

    async def _attempt_until_done(
        self,
        state: _CallState,
        method: str,
        url: str,
        payload_type: type[ModelT],
        content: Optional[bytes],
        params: Optional[dict],
        headers: dict[str, str],
        cancel: Optional[asyncio.Event],
    ) -> SchemaEnvelope[ModelT]:
        operation = state.operation
        history: list[str] = []

        while True:
            if cancel is not None and cancel.is_set():
                raise TransportCancelled(operation, state.attempts)

            state.attempts += 1
            outcome = await self._attempt(
                state, method, url, payload_type, content, params, headers, cancel
            )

            if isinstance(outcome, Success):
                hosting_requests_total.labels(operation=operation, outcome="success").inc()
                logger.debug(
                    "Hosting request succeeded",
                    operation=operation,
                    status_code=outcome.status_code,
                    attempt=state.attempts,
                )
                return outcome.envelope

            history.append(outcome.reason.value)

            if isinstance(outcome, Fatal):
                hosting_requests_total.labels(operation=operation, outcome="fatal").inc()
                logger.error(
                    "Hosting request failed",
                    operation=operation,
                    reason=outcome.reason.value,
                    status_code=outcome.status_code,
                    errors=list(outcome.errors),
                    attempt=state.attempts,
                )
                raise FatalTransportError(
                    outcome.detail,
                    operation,
                    outcome.reason,
                    status_code=outcome.status_code,
                    errors=list(outcome.errors),
                    schema_error=outcome.schema_error,
                )

            hosting_requests_total.labels(operation=operation, outcome="retryable").inc()
            decision = self.retry_policy.next_action(state.attempts, outcome)

            if isinstance(decision, GiveUp):
                logger.error(
                    "Giving up on hosting request",
                    operation=operation,
                    attempts=state.attempts,
                    last_reason=outcome.reason.value,
                    history=history,
                )
                raise GaveUpAfterRetries(
                    operation,
                    attempts=state.attempts,
                    last_reason=outcome.reason,
                    last_detail=outcome.detail,
                    history=history,
                )

            hosting_retries_total.labels(operation=operation, reason=outcome.reason.value).inc()
            logger.warning(
                "Retrying hosting request",
                operation=operation,
                attempt=state.attempts,
                max_attempts=self.retry_policy.max_attempts,
                reason=outcome.reason.value,
                delay=decision.delay,
            )

            if await self._sleep(decision.delay, cancel):
                logger.info("Hosting request cancelled during backoff", operation=operation)
                raise TransportCancelled(operation, state.attempts)

    async def _attempt(
        self,
        state: _CallState,
        method: str,
        url: str,
        payload_type: type[ModelT],
        content: Optional[bytes],
        params: Optional[dict],
        headers: dict[str, str],
        cancel: Optional[asyncio.Event],
    ) -> Outcome:
        """Send one request and classify what came back."""
        client = await self._get_client()
        request = client.build_request(method, url, content=content, params=params, headers=headers)

        start_time = time.time()
        try:
            response = await self._send(client, request, cancel, state)
        except httpx.HTTPError as e:
            logger.warning(
                "Hosting request raised",
                operation=state.operation,
                attempt=state.attempts,
                error_type=type(e).__name__,
                error=str(e),
            )
            return classify_exception(e)
        finally:
            hosting_request_latency_seconds.labels(operation=state.operation).observe(
                time.time() - start_time
            )

        return classify_response(response, payload_type)

    async def _send(
        self,
        client: httpx.AsyncClient,
        request: httpx.Request,
        cancel: Optional[asyncio.Event],
        state: _CallState,
    ) -> httpx.Response:
        """Send a request, abandoning it as soon as ``cancel`` is set."""
        if cancel is None:
            return await client.send(request)

        send = asyncio.ensure_future(client.send(request))
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({send, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (send, cancelled):
                if not task.done():
                    task.cancel()
            await asyncio.gather(send, cancelled, return_exceptions=True)

        if send.done() and not send.cancelled():
            return send.result()
        raise TransportCancelled(state.operation, state.attempts)

    async def _sleep(self, delay: float, cancel: Optional[asyncio.Event]) -> bool:
        """
        Wait out a backoff delay.

        Returns:
            True if ``cancel`` was set before the delay elapsed
        """
        if cancel is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed hosting client")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"namespace={self.source_host}/{self.owner}, "
            f"authenticated={self.authenticated})"
        )
