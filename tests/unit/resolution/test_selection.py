"""Unit tests for release and artifact selection."""

import pytest

from release_hosting.models.query import VersionSelector
from release_hosting.resolution.exceptions import Ambiguous, NoMatchingArtifact, NoMatchingRelease
from release_hosting.resolution.selection import select_artifact, select_release


@pytest.fixture
def summaries(create_summary):
    return [
        create_summary("1.0.0"),
        create_summary("1.2.0"),
        create_summary("1.10.0"),
        create_summary("2.0.0-beta.1"),
    ]


class TestSelectRelease:
    """Tests for select_release."""

    def test_latest_skips_prereleases(self, summaries):
        chosen = select_release("axolotlsay", summaries, VersionSelector.latest())
        assert chosen.version == "1.10.0"

    def test_latest_with_prereleases(self, summaries):
        chosen = select_release("axolotlsay", summaries, VersionSelector.latest(allow_prerelease=True))
        assert chosen.version == "2.0.0-beta.1"

    def test_range_picks_highest_inside(self, summaries):
        chosen = select_release("axolotlsay", summaries, VersionSelector.range(">=1.0.0, <1.5.0"))
        assert chosen.version == "1.2.0"

    def test_exact(self, summaries):
        chosen = select_release("axolotlsay", summaries, VersionSelector.exact("1.0.0"))
        assert chosen.version == "1.0.0"

    def test_exact_ignores_build_metadata(self, create_summary):
        chosen = select_release(
            "axolotlsay", [create_summary("1.0.0+build.7")], VersionSelector.exact("1.0.0")
        )
        assert chosen.version == "1.0.0+build.7"

    def test_nothing_in_range(self, summaries):
        with pytest.raises(NoMatchingRelease) as exc_info:
            select_release("axolotlsay", summaries, VersionSelector.range(">=3.0.0"))

        assert exc_info.value.selector == ">=3.0.0"
        assert "1.10.0" in exc_info.value.available

    def test_only_prereleases(self, create_summary):
        with pytest.raises(NoMatchingRelease):
            select_release("axolotlsay", [create_summary("1.0.0-rc.1")], VersionSelector.latest())

    def test_empty_listing(self):
        with pytest.raises(NoMatchingRelease):
            select_release("axolotlsay", [], VersionSelector.latest())


class TestSelectArtifact:
    """Tests for select_artifact."""

    def test_exact_target(self, sample_release):
        artifact = select_artifact(sample_release, "linux-x64")

        assert artifact.target == "linux-x64"
        assert artifact.url.endswith("axolotlsay-linux-x64.tar.xz")

    def test_abi_specific_target(self, sample_release):
        assert select_artifact(sample_release, "linux-x64-musl").target == "linux-x64-musl"

    def test_ambiguous_without_label(self, create_release, create_artifact):
        release = create_release(
            artifacts=[
                create_artifact(label="archive"),
                create_artifact(label="installer"),
            ]
        )

        with pytest.raises(Ambiguous) as exc_info:
            select_artifact(release, "linux-x64")

        assert len(exc_info.value.candidates) == 2
        assert exc_info.value.details["labels"] == ["archive", "installer"]

    def test_label_disambiguates(self, create_release, create_artifact):
        release = create_release(
            artifacts=[
                create_artifact(label="archive"),
                create_artifact(label="installer"),
            ]
        )
        assert select_artifact(release, "linux-x64", label="installer").label == "installer"

    def test_label_mismatch(self, sample_release):
        with pytest.raises(NoMatchingArtifact) as exc_info:
            select_artifact(sample_release, "linux-x64", label="installer")

        assert exc_info.value.label == "installer"
        assert "linux-x64" in exc_info.value.available_targets

    def test_no_fallback_by_default(self, create_release, create_artifact):
        release = create_release(artifacts=[create_artifact(target="linux-x64")])

        with pytest.raises(NoMatchingArtifact):
            select_artifact(release, "linux-x64-musl")

    def test_fallback_drops_abi(self, create_release, create_artifact):
        release = create_release(artifacts=[create_artifact(target="linux-x64")])
        artifact = select_artifact(release, "linux-x64-musl", allow_fallback=True)
        assert artifact.target == "linux-x64"

    def test_fallback_prefers_specific(self, create_release, create_artifact):
        release = create_release(
            artifacts=[
                create_artifact(target="any-any"),
                create_artifact(target="linux-any"),
            ]
        )
        artifact = select_artifact(release, "linux-x64", allow_fallback=True)
        assert artifact.target == "linux-any"

    def test_fallback_to_generic(self, create_release, create_artifact):
        release = create_release(artifacts=[create_artifact(target="any-any")])
        assert select_artifact(release, "freebsd-x64", allow_fallback=True).target == "any-any"

    def test_fallback_exhausted(self, create_release, create_artifact):
        release = create_release(artifacts=[create_artifact(target="windows-x64")])
        with pytest.raises(NoMatchingArtifact):
            select_artifact(release, "linux-arm64", allow_fallback=True)


def test_latest_stable_among_beta(create_summary):
    summaries = [create_summary(v) for v in ("1.0.0", "1.2.0", "2.0.0-beta")]
    assert select_release("axolotlsay", summaries, VersionSelector.latest()).version == "1.2.0"


def test_linux_pick_among_two_targets(create_release, create_artifact):
    release = create_release(
        artifacts=[create_artifact(target="linux-x64"), create_artifact(target="windows-x64")]
    )
    assert select_artifact(release, "linux-x64").target == "linux-x64"


class TestFallbackWithLabel:
    """Label filter combined with target fallback."""

    def test_label_mismatch_not_substituted(self, create_release, create_artifact):
        release = create_release(
            artifacts=[
                create_artifact(target="linux-x64", label="archive"),
                create_artifact(target="any-any", label="installer"),
            ]
        )

        with pytest.raises(NoMatchingArtifact) as exc_info:
            select_artifact(release, "linux-x64", label="installer", allow_fallback=True)
        assert exc_info.value.label == "installer"

    def test_label_on_generic_target_after_fallback(self, create_release, create_artifact):
        release = create_release(
            artifacts=[
                create_artifact(target="windows-x64", label="installer"),
                create_artifact(target="any-any", label="installer"),
            ]
        )

        artifact = select_artifact(release, "linux-x64", label="installer", allow_fallback=True)
        assert artifact.target == "any-any"
