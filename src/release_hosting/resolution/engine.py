"""
Resolution engine: "the best artifact for package P, selector V, target T".

Composes the transport (fetching) with the pure selection rules.
"""

import asyncio
from typing import Optional

import structlog

from release_hosting.models.entities import Artifact, Release
from release_hosting.models.enums import SelectorKind
from release_hosting.models.query import ResolutionQuery
from release_hosting.resolution.exceptions import NoMatchingRelease
from release_hosting.resolution.selection import select_artifact, select_release
from release_hosting.transport.base_client import BaseTransportClient
from release_hosting.transport.exceptions import FatalTransportError
from release_hosting.validation.pipeline import ValidationPipeline

logger = structlog.get_logger(__name__)


class ResolutionEngine:
    """
    Resolves queries against a hosting transport.

    Flow:
    1. Validate the query (before any request)
    2. Exact selector: fetch that release. Latest/range: list summaries,
       pick the maximum satisfying version, fetch it
    3. Pick the artifact for the target (fallback only when enabled)

    Attributes:
        transport: Any BaseTransportClient
        allow_fallback: Default target-fallback policy for queries that do not override it
    """

    def __init__(
        self,
        transport: BaseTransportClient,
        validator: Optional[ValidationPipeline] = None,
        allow_fallback: bool = False,
    ):
        self.transport = transport
        self.validator = validator or ValidationPipeline()
        self.allow_fallback = allow_fallback

    async def resolve(
        self,
        query: ResolutionQuery,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Artifact:
        """
        Resolve a query to exactly one artifact.

        ``cancel`` and ``timeout`` are passed to every transport call.

        Raises:
            ValidationError: Malformed query
            NoMatchingRelease: No release satisfies the selector
            NoMatchingArtifact: Chosen release has nothing for the target/label
            Ambiguous: Several artifacts remain
            TransportError: The service could not be reached or answered badly
        """
        self.validator.validate(query)

        release = await self._choose_release(query, cancel, timeout)

        allow_fallback = self.allow_fallback if query.allow_fallback is None else query.allow_fallback
        artifact = select_artifact(release, query.target, query.label, allow_fallback)

        logger.info(
            "Resolved artifact",
            package=query.package,
            selector=str(query.selector),
            version=release.version,
            target=query.target,
            artifact_target=artifact.target,
            label=artifact.label,
        )
        return artifact

    async def _choose_release(
        self,
        query: ResolutionQuery,
        cancel: Optional[asyncio.Event],
        timeout: Optional[float],
    ) -> Release:
        selector = query.selector

        if selector.kind is SelectorKind.EXACT:
            return await self._fetch_or_no_match(
                query.package, selector.version, str(selector), cancel, timeout
            )

        try:
            summaries = await self.transport.list_releases(
                query.package, cancel=cancel, timeout=timeout
            ).collect()
        except FatalTransportError as e:
            if e.status_code == 404:
                raise NoMatchingRelease(query.package, str(selector)) from e
            raise

        summary = select_release(query.package, summaries, selector)
        return await self._fetch_or_no_match(
            query.package, summary.version, str(selector), cancel, timeout
        )

    async def _fetch_or_no_match(
        self,
        package: str,
        version: str,
        selector: str,
        cancel: Optional[asyncio.Event],
        timeout: Optional[float],
    ) -> Release:
        try:
            return await self.transport.fetch_release(package, version, cancel=cancel, timeout=timeout)
        except FatalTransportError as e:
            if e.status_code == 404:
                raise NoMatchingRelease(package, selector) from e
            raise
