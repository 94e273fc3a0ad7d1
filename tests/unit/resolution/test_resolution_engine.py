"""Unit tests for ResolutionEngine with a mocked transport."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from release_hosting.models.query import ResolutionQuery, VersionSelector
from release_hosting.resolution.engine import ResolutionEngine
from release_hosting.resolution.exceptions import NoMatchingArtifact, NoMatchingRelease
from release_hosting.retry.failures import FailureReason
from release_hosting.transport.base_client import BaseTransportClient
from release_hosting.transport.exceptions import FatalTransportError, GaveUpAfterRetries
from release_hosting.validation.exceptions import Rule, ValidationError


@pytest.fixture
def transport(sample_release, create_summary):
    """Mock transport serving axolotlsay 1.2.0 and a listing around it."""
    mock = MagicMock(spec=BaseTransportClient)
    mock.fetch_release = AsyncMock(return_value=sample_release)
    listing = MagicMock()
    listing.collect = AsyncMock(
        return_value=[create_summary("1.1.0"), create_summary("1.2.0"), create_summary("2.0.0-beta.1")]
    )
    mock.list_releases.return_value = listing
    return mock


def _query(selector, target="linux-x64", **kwargs):
    return ResolutionQuery(package="axolotlsay", selector=selector, target=target, **kwargs)


def _not_found(operation="fetch_release"):
    return FatalTransportError("not found", operation, FailureReason.CLIENT_ERROR, status_code=404)


class TestResolutionEngine:
    """Tests for ResolutionEngine.resolve."""

    @pytest.mark.asyncio
    async def test_latest_lists_then_fetches(self, transport):
        engine = ResolutionEngine(transport)

        artifact = await engine.resolve(_query(VersionSelector.latest()))

        assert artifact.target == "linux-x64"
        transport.list_releases.assert_called_once_with("axolotlsay", cancel=None, timeout=None)
        transport.fetch_release.assert_awaited_once_with(
            "axolotlsay", "1.2.0", cancel=None, timeout=None
        )

    @pytest.mark.asyncio
    async def test_exact_skips_listing(self, transport):
        engine = ResolutionEngine(transport)

        await engine.resolve(_query(VersionSelector.exact("1.2.0")))

        transport.list_releases.assert_not_called()
        transport.fetch_release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_and_timeout_forwarded(self, transport):
        engine = ResolutionEngine(transport)
        cancel = MagicMock()

        await engine.resolve(_query(VersionSelector.exact("1.2.0")), cancel=cancel, timeout=3.0)

        transport.fetch_release.assert_awaited_once_with(
            "axolotlsay", "1.2.0", cancel=cancel, timeout=3.0
        )

    @pytest.mark.asyncio
    async def test_invalid_query_sends_nothing(self, transport):
        engine = ResolutionEngine(transport)

        with pytest.raises(ValidationError) as exc_info:
            await engine.resolve(_query(VersionSelector.latest(), target="linux"))

        assert exc_info.value.rule is Rule.TARGET_GRAMMAR
        transport.list_releases.assert_not_called()
        transport.fetch_release.assert_not_called()

    @pytest.mark.asyncio
    async def test_exact_not_found(self, transport):
        transport.fetch_release.side_effect = _not_found()
        engine = ResolutionEngine(transport)

        with pytest.raises(NoMatchingRelease) as exc_info:
            await engine.resolve(_query(VersionSelector.exact("9.9.9")))
        assert isinstance(exc_info.value.__cause__, FatalTransportError)

    @pytest.mark.asyncio
    async def test_unknown_package(self, transport):
        transport.list_releases.return_value.collect.side_effect = _not_found("list_releases")
        engine = ResolutionEngine(transport)

        with pytest.raises(NoMatchingRelease):
            await engine.resolve(_query(VersionSelector.latest()))

    @pytest.mark.asyncio
    async def test_transport_failures_propagate(self, transport):
        transport.fetch_release.side_effect = GaveUpAfterRetries(
            "fetch_release", 4, FailureReason.SERVER_ERROR, "HTTP 503", ["server_error"] * 4
        )
        engine = ResolutionEngine(transport)

        with pytest.raises(GaveUpAfterRetries):
            await engine.resolve(_query(VersionSelector.exact("1.2.0")))

    @pytest.mark.asyncio
    async def test_engine_fallback_default(self, transport):
        query = _query(VersionSelector.exact("1.2.0"), target="linux-arm64")

        with pytest.raises(NoMatchingArtifact):
            await ResolutionEngine(transport).resolve(query)

        with pytest.raises(NoMatchingArtifact):
            # linux-any and any-arm64 are absent too
            await ResolutionEngine(transport, allow_fallback=True).resolve(query)

    @pytest.mark.asyncio
    async def test_query_overrides_fallback(self, transport):
        query = _query(VersionSelector.exact("1.2.0"), target="linux-x64-gnu", allow_fallback=True)

        artifact = await ResolutionEngine(transport, allow_fallback=False).resolve(query)

        assert artifact.target == "linux-x64"

    @pytest.mark.asyncio
    async def test_query_disables_fallback(self, transport):
        query = _query(VersionSelector.exact("1.2.0"), target="linux-x64-gnu", allow_fallback=False)

        with pytest.raises(NoMatchingArtifact):
            await ResolutionEngine(transport, allow_fallback=True).resolve(query)
