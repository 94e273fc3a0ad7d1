"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests:
model factories, wire-envelope builders and a scripted hosting service
plugged into httpx.MockTransport.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
import pytest
from pydantic import BaseModel

from release_hosting.config import Settings
from release_hosting.models.entities import Artifact, Checksum, Release, ReleaseSummary
from release_hosting.retry.policy import RetryPolicy
from release_hosting.transport.client import HostingClient

SHA256_DIGEST = "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
BASE_URL = "https://hosting.test/api"
TOKEN = "tok_live_1234567890"


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults (no .env, no real service)."""
    return Settings(
        _env_file=None,
        API_BASE_URL=BASE_URL,
        SOURCE_HOST="github",
        OWNER="axodotdev",
        TOKEN=TOKEN,
        REQUEST_TIMEOUT=5.0,
        MAX_ATTEMPTS=3,
        BACKOFF_BASE=0.0,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_release_data(fixtures_dir: Path) -> Dict[str, Any]:
    """Load the sample release fixture as a raw dict."""
    with open(fixtures_dir / "release_axolotlsay.json") as f:
        return json.load(f)


@pytest.fixture
def sample_release(sample_release_data: Dict[str, Any]) -> Release:
    """Parsed Release from the sample fixture (axolotlsay 1.2.0, four artifacts)."""
    return Release.model_validate(sample_release_data)


@pytest.fixture
def create_artifact():
    """Factory fixture to create an Artifact.

    Usage:
        def test_something(create_artifact):
            artifact = create_artifact(target="windows-x64", label="installer")
    """
    def _create(
        target: str = "linux-x64",
        label: Optional[str] = None,
        algorithm: str = "sha256",
        digest: str = SHA256_DIGEST,
        size: int = 1024,
        url: Optional[str] = None,
    ) -> Artifact:
        return Artifact(
            target=target,
            url=url or f"https://downloads.example.com/pkg-{target}{'-' + label if label else ''}.tar.gz",
            checksum=Checksum(algorithm=algorithm, digest=digest),
            size=size,
            label=label,
        )

    return _create


@pytest.fixture
def create_release(create_artifact):
    """Factory fixture to create a Release.

    Usage:
        def test_something(create_release, create_artifact):
            release = create_release(version="2.0.0", artifacts=[create_artifact()])
    """
    def _create(
        package: str = "axolotlsay",
        version: str = "1.0.0",
        artifacts: Optional[list[Artifact]] = None,
        **extra: Any,
    ) -> Release:
        return Release(
            package=package,
            version=version,
            published_at=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
            artifacts=artifacts if artifacts is not None else [create_artifact()],
            **extra,
        )

    return _create


@pytest.fixture
def create_summary():
    """Factory fixture to create a ReleaseSummary."""
    def _create(version: str, package: str = "axolotlsay") -> ReleaseSummary:
        return ReleaseSummary(
            package=package,
            version=version,
            published_at=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
        )

    return _create


def _jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    return payload


@pytest.fixture
def envelope_response() -> Callable[..., httpx.Response]:
    """Build an httpx.Response carrying a generation-tagged envelope.

    Usage:
        envelope_response(release)                       # 200, success
        envelope_response(None, success=False, errors=["nope"])
        envelope_response(page, next_page_token="p2")
        envelope_response(ack, schema_generation=7)
    """
    def _build(
        payload: Any = None,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
        **fields: Any,
    ) -> httpx.Response:
        body = {
            "schema_generation": 1,
            "success": True,
            "payload": _jsonable(payload),
            "errors": [],
        }
        body.update(fields)
        return httpx.Response(status_code, content=json.dumps(body).encode(), headers=headers)

    return _build


class ScriptedService:
    """Replays scripted responses in order and records every request.

    Script steps are httpx.Response objects, exceptions (raised from the
    transport), or callables taking the request and returning either.
    """

    def __init__(self, script: list):
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.script:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")

        step = self.script.pop(0)
        if callable(step) and not isinstance(step, httpx.Response):
            step = step(request)
            if hasattr(step, "__await__"):
                step = await step
        if isinstance(step, Exception):
            raise step
        return step


@pytest.fixture
def make_hosting_client():
    """Factory fixture: HostingClient wired to a ScriptedService.

    Retries use zero backoff unless a policy is passed.

    Usage:
        client, service = make_hosting_client([response_1, response_2])
    """
    def _create(
        script: list,
        retry_policy: Optional[RetryPolicy] = None,
        credential: Optional[str] = TOKEN,
        **kwargs: Any,
    ) -> tuple[HostingClient, ScriptedService]:
        service = ScriptedService(script)
        client = HostingClient(
            BASE_URL,
            "github",
            "axodotdev",
            credential,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(service)),
            retry_policy=retry_policy or RetryPolicy(max_attempts=4, base_delay=0.0),
            **kwargs,
        )
        return client, service

    return _create
