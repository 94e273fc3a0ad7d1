"""
ReleaseHostingClient: the full client.

Extends the network-free SchemaCodec with the hosting transport, retry
policy and resolution engine. Construct it explicitly (or from Settings);
the credential and connection pool live as long as the client and are
released by close() / ``async with``.

Usage:
    async with ReleaseHostingClient.connect(
        "https://api.releases.example.com", "github", "axodotdev", credential=token
    ) as client:
        ack = await client.announce_release(release)
        artifact = await client.resolve(
            ResolutionQuery(package="axolotlsay", selector=VersionSelector.latest(), target="linux-x64")
        )
"""

import asyncio
from typing import Optional

import httpx
import structlog
from pydantic import SecretStr

from release_hosting.config import Settings
from release_hosting.models.entities import Ack, Artifact, Package, Release, ReleaseSummary
from release_hosting.models.query import ResolutionQuery
from release_hosting.resolution.engine import ResolutionEngine
from release_hosting.retry.policy import RetryPolicy
from release_hosting.schema.codec import SchemaCodec
from release_hosting.transport.base_client import BaseTransportClient
from release_hosting.transport.client import HostingClient
from release_hosting.transport.listing import ReleaseListing
from release_hosting.validation.pipeline import ValidationPipeline

logger = structlog.get_logger(__name__)


class ReleaseHostingClient(SchemaCodec):
    """
    Facade over codec, validation, transport and resolution.

    Every schema-only operation (encode, decode, validate, json_schema) is
    inherited from SchemaCodec and shares one ValidationPipeline with the
    transport and the resolution engine.
    """

    def __init__(
        self,
        transport: BaseTransportClient,
        *,
        validator: Optional[ValidationPipeline] = None,
        allow_target_fallback: bool = False,
    ):
        super().__init__(validator or getattr(transport, "validator", None))
        self.transport = transport
        self.resolver = ResolutionEngine(
            transport,
            validator=self.validator,
            allow_fallback=allow_target_fallback,
        )

    @classmethod
    def connect(
        cls,
        base_url: str,
        source_host: str,
        owner: str,
        credential: Optional[str | SecretStr] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 10.0,
        page_size: Optional[int] = None,
        allow_target_fallback: bool = False,
    ) -> "ReleaseHostingClient":
        """Build a client backed by HostingClient."""
        validator = ValidationPipeline()
        transport = HostingClient(
            base_url,
            source_host,
            owner,
            credential,
            http_client=http_client,
            retry_policy=retry_policy,
            validator=validator,
            request_timeout=request_timeout,
            page_size=page_size,
        )
        return cls(transport, validator=validator, allow_target_fallback=allow_target_fallback)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "ReleaseHostingClient":
        """
        Build a client from Settings.

        A missing RELEASE_HOSTING_TOKEN yields an unauthenticated client.
        """
        validator = ValidationPipeline()
        transport = HostingClient(
            settings.API_BASE_URL,
            settings.SOURCE_HOST,
            settings.OWNER,
            settings.TOKEN,
            http_client=http_client,
            retry_policy=RetryPolicy.from_settings(settings),
            validator=validator,
            request_timeout=settings.REQUEST_TIMEOUT,
            connection_limits=httpx.Limits(
                max_keepalive_connections=min(5, settings.MAX_CONNECTIONS),
                max_connections=settings.MAX_CONNECTIONS,
                keepalive_expiry=30.0,
            ),
            page_size=settings.PAGE_SIZE,
        )
        logger.info(
            "Release hosting client configured",
            base_url=settings.API_BASE_URL,
            namespace=f"{settings.SOURCE_HOST}/{settings.OWNER}",
            authenticated=settings.TOKEN is not None,
            environment=settings.ENVIRONMENT,
        )
        return cls(
            transport,
            validator=validator,
            allow_target_fallback=settings.ALLOW_TARGET_FALLBACK,
        )

    # === Producer ===

    async def announce_release(
        self,
        release: Release,
        *,
        idempotency_key: Optional[str] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Ack:
        return await self.transport.announce_release(
            release, idempotency_key=idempotency_key, cancel=cancel, timeout=timeout
        )

    # === Consumer ===

    async def fetch_release(
        self,
        package: str,
        version: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Release:
        return await self.transport.fetch_release(package, version, cancel=cancel, timeout=timeout)

    async def fetch_package(
        self,
        package: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Package:
        return await self.transport.fetch_package(package, cancel=cancel, timeout=timeout)

    def list_releases(
        self,
        package: str,
        *,
        page_size: Optional[int] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> ReleaseListing:
        return self.transport.list_releases(
            package, page_size=page_size, cancel=cancel, timeout=timeout
        )

    async def list_releases_many(
        self,
        packages: list[str],
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, list[ReleaseSummary]]:
        """List several packages concurrently; the first failure propagates."""
        return await self.transport.list_releases_many(packages, cancel=cancel, timeout=timeout)

    async def resolve(
        self,
        query: ResolutionQuery,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Artifact:
        return await self.resolver.resolve(query, cancel=cancel, timeout=timeout)

    # === Lifecycle ===

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "ReleaseHostingClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(transport={self.transport!r})"
