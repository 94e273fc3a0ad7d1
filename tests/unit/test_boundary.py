"""
The schema-only surface must import without the networking stack.

Runs in a fresh interpreter so modules loaded by other tests do not leak in.
"""

import subprocess
import sys
import textwrap

import pytest

CLIENT_ONLY_MODULES = ["httpx", "structlog", "pydantic_settings", "prometheus_client"]


def _run(code: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-c", textwrap.dedent(code)],
        capture_output=True,
        text=True,
        timeout=60,
    )


class TestSchemaOnlyBoundary:
    """Import-time isolation of models, codec and validation."""

    def test_schema_surface_loads_no_client_stack(self):
        result = _run(
            f"""
            import sys
            import release_hosting
            from release_hosting import Release, ValidationPipeline, encode, json_schema
            from release_hosting.validation.version import parse_version

            json_schema(Release)
            loaded = [name for name in {CLIENT_ONLY_MODULES!r} if name in sys.modules]
            print(",".join(loaded))
            """
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == ""

    def test_client_names_load_on_access(self):
        result = _run(
            """
            import sys
            import release_hosting

            assert "httpx" not in sys.modules
            client_class = release_hosting.ReleaseHostingClient
            assert "httpx" in sys.modules
            assert client_class.__name__ == "ReleaseHostingClient"
            """
        )

        assert result.returncode == 0, result.stderr


def test_unknown_attribute():
    import release_hosting

    with pytest.raises(AttributeError):
        release_hosting.DoesNotExist


def test_dir_lists_client_names():
    import release_hosting

    names = dir(release_hosting)
    assert "ReleaseHostingClient" in names
    assert "Release" in names
