"""
Unit tests for entity models and the schema envelope.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from release_hosting.models.entities import Artifact, Checksum, Package, Release
from release_hosting.models.enums import ChecksumAlgorithm, SelectorKind
from release_hosting.models.envelope import (
    OLDEST_READABLE_GENERATION,
    SCHEMA_GENERATION,
    SchemaEnvelope,
    supported_generations,
)
from release_hosting.models.query import ResolutionQuery, VersionSelector


class TestEntities:
    """Test suite for Package / Release / Artifact models."""

    def test_release_from_fixture(self, sample_release):
        """Fixture parses with nested artifacts and checksums."""
        assert sample_release.key == ("axolotlsay", "1.2.0")
        assert len(sample_release.artifacts) == 4
        assert sample_release.artifacts[2].checksum.algorithm == "sha512"
        assert sample_release.published_at == datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)

    def test_unknown_fields_are_preserved(self, sample_release):
        """Unknown fields land in model_extra and survive model_dump."""
        notarized = sample_release.artifacts[3]
        assert notarized.model_extra == {"notarized": True}
        assert notarized.model_dump()["notarized"] is True

    def test_artifacts_default_to_empty(self):
        release = Release(
            package="axolotlsay",
            version="0.1.0",
            published_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        assert release.artifacts == []
        assert release.tag is None

    def test_missing_required_field_raises(self):
        """Structure is enforced by the model (checksum is required)."""
        with pytest.raises(PydanticValidationError):
            Artifact(target="linux-x64", url="https://example.com/a", size=1)

    def test_package_releases_keep_order(self):
        package = Package(name="axolotlsay", releases=["0.1.0", "0.2.0", "1.0.0"])
        assert package.releases == ["0.1.0", "0.2.0", "1.0.0"]

    def test_checksum_algorithm_digest_lengths(self):
        assert ChecksumAlgorithm.SHA256.digest_length == 64
        assert ChecksumAlgorithm.SHA384.digest_length == 96
        assert ChecksumAlgorithm.SHA512.digest_length == 128

    def test_checksum_is_plain_data(self):
        """Models carry structure only; allow-list checks live in validation."""
        checksum = Checksum(algorithm="md5", digest="abc")
        assert checksum.algorithm == "md5"


class TestEnvelope:
    """Test suite for SchemaEnvelope."""

    def test_defaults_to_current_generation(self):
        envelope = SchemaEnvelope[Package](payload=Package(name="axolotlsay"))
        assert envelope.schema_generation == SCHEMA_GENERATION
        assert envelope.success is True
        assert envelope.errors == []
        assert envelope.next_page_token is None

    def test_supported_generations_range(self):
        generations = supported_generations()
        assert OLDEST_READABLE_GENERATION in generations
        assert SCHEMA_GENERATION in generations
        assert SCHEMA_GENERATION + 1 not in generations

    def test_typed_payload_is_parsed(self):
        envelope = SchemaEnvelope[Package].model_validate(
            {"schema_generation": 1, "payload": {"name": "axolotlsay", "releases": ["1.0.0"]}}
        )
        assert isinstance(envelope.payload, Package)
        assert envelope.payload.releases == ["1.0.0"]


class TestQueries:
    """Test suite for VersionSelector / ResolutionQuery."""

    def test_selector_constructors(self):
        assert VersionSelector.exact("1.2.0").kind is SelectorKind.EXACT
        assert VersionSelector.latest().allow_prerelease is False
        ranged = VersionSelector.range(">=1.0.0, <2.0.0", allow_prerelease=True)
        assert ranged.kind is SelectorKind.RANGE
        assert ranged.allow_prerelease is True

    def test_selector_str(self):
        assert str(VersionSelector.exact("1.2.0")) == "==1.2.0"
        assert str(VersionSelector.latest()) == "latest"
        assert str(VersionSelector.range(">=1.0.0")) == ">=1.0.0"

    def test_query_is_frozen(self):
        query = ResolutionQuery(
            package="axolotlsay", selector=VersionSelector.latest(), target="linux-x64"
        )
        with pytest.raises(PydanticValidationError):
            query.target = "windows-x64"

    def test_fallback_override_defaults_to_engine_policy(self):
        query = ResolutionQuery(
            package="axolotlsay", selector=VersionSelector.latest(), target="linux-x64"
        )
        assert query.allow_fallback is None
        assert query.label is None
