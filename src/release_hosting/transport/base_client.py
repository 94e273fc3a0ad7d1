"""
Abstract base client for the release-hosting service.

Defines the interface the resolution engine and the facade rely on, so an
alternative transport (another HTTP stack, an in-memory service for tests)
can be swapped in without touching resolution logic.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from release_hosting.models.entities import Ack, Package, Release, ReleaseSummary
from release_hosting.transport.listing import ReleaseListing

logger = structlog.get_logger(__name__)


class BaseTransportClient(ABC):
    """
    Abstract base class for hosting-service clients.

    Responsibilities:
    - Send requests scoped to one (source_host, owner) namespace
    - Decode and validate every received payload
    - Retry retryable failures under a RetryPolicy
    - Honor caller cancellation and overall timeouts

    Does NOT handle:
    - Choosing a release or artifact (that's ResolutionEngine's job)

    Every operation accepts ``cancel`` (an asyncio.Event) and ``timeout``
    (seconds, covering all attempts and backoff waits of that call).
    """

    def __init__(self, base_url: str, source_host: str, owner: str):
        """
        Initialize base client.

        Args:
            base_url: Hosting service API root (e.g. https://api.releases.example.com)
            source_host: Source forge the namespace lives on (e.g. "github")
            owner: Owner of the namespace (user or organization)
        """
        self.base_url = base_url.rstrip("/")
        self.source_host = source_host
        self.owner = owner

        logger.info(
            "Initialized hosting client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            source_host=source_host,
            owner=owner,
        )

    @abstractmethod
    async def announce_release(
        self,
        release: Release,
        *,
        idempotency_key: Optional[str] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Ack:
        """
        Publish a release with its artifacts.

        The release is validated before any request is sent.

        Raises:
            ValidationError: The release breaks a validation rule
            FatalTransportError: Rejected by the service or unusable response
            GaveUpAfterRetries: Retryable failures exhausted the policy
            TransportCancelled: Cancelled or timed out
        """

    @abstractmethod
    async def fetch_release(
        self,
        package: str,
        version: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Release:
        """
        Fetch one release with all of its artifacts.

        Raises:
            ValidationError: Invalid package name or version
            FatalTransportError: Not found (status_code 404), rejected, or invalid data received
            GaveUpAfterRetries: Retryable failures exhausted the policy
            TransportCancelled: Cancelled or timed out
        """

    @abstractmethod
    def list_releases(
        self,
        package: str,
        *,
        page_size: Optional[int] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> ReleaseListing:
        """
        Lazily list release summaries of a package.

        Returns immediately; pages are fetched during iteration. ``timeout``
        applies to each page fetch.

        Raises:
            ValidationError: Invalid package name (raised on call, not on iteration)
        """

    @abstractmethod
    async def fetch_package(
        self,
        package: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Package:
        """Fetch a package with the ordered versions it owns."""

    async def list_releases_many(
        self,
        packages: list[str],
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, list[ReleaseSummary]]:
        """
        List several packages concurrently.

        Returns:
            package -> summaries, in the order of ``packages``

        Raises:
            The first failure among the listings; the others are cancelled
            and awaited before it propagates
        """
        listings = [self.list_releases(package, cancel=cancel, timeout=timeout) for package in packages]
        tasks = [asyncio.ensure_future(listing.collect()) for listing in listings]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug("Cancelled sibling listings", cancelled=len(pending))
            raise
        return dict(zip(packages, results))

    async def close(self) -> None:
        """
        Close client connections and cleanup resources.

        Default implementation does nothing. Subclasses holding persistent
        connections override it.
        """
        logger.debug("Closing hosting client", client_class=self.__class__.__name__)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"namespace={self.source_host}/{self.owner})"
        )
