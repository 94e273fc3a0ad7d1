"""Integration test fixtures: an in-memory hosting service.

FakeHostingService implements the hosting API on top of dicts and is
mounted into httpx.MockTransport, so full client flows (announce, list,
fetch, resolve) run end to end without a network.
"""

import json
from typing import Optional

import httpx
import pytest
import pytest_asyncio

from release_hosting.client import ReleaseHostingClient
from release_hosting.models.entities import Ack, Package, Release, ReleasePage, ReleaseSummary
from release_hosting.retry.policy import RetryPolicy
from release_hosting.schema.codec import decode_envelope
from release_hosting.schema.exceptions import SchemaError
from release_hosting.validation.version import parse_version

BASE_URL = "https://hosting.test/api"
NAMESPACE = ("github", "axodotdev")


def _summary(release: Release) -> ReleaseSummary:
    return ReleaseSummary(
        package=release.package,
        version=release.version,
        published_at=release.published_at,
        artifact_count=len(release.artifacts),
    )


class FakeHostingService:
    """Stores announced releases and serves them back, page by page.

    Attributes:
        releases: package -> version -> Release
        requests: Every request received, in order
        fail_next: Status codes to answer the next requests with, before serving normally
    """

    def __init__(self, page_size: int = 2, token: Optional[str] = "tok_live_1234567890"):
        self.page_size = page_size
        self.token = token
        self.releases: dict[str, dict[str, Release]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_next: list[int] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_next:
            return httpx.Response(self.fail_next.pop(0))

        if self.token is not None and request.headers.get("Authorization") != f"Bearer {self.token}":
            return self._reply(None, status_code=401, success=False, errors=["bad credentials"])

        prefix = "/api/" + "/".join(NAMESPACE) + "/"
        if not request.url.path.startswith(prefix):
            return self._reply(None, status_code=404, success=False, errors=["unknown namespace"])
        segments = request.url.path[len(prefix):].split("/")

        if len(segments) == 1 and request.method == "GET":
            return self._package(segments[0])
        if len(segments) == 2 and segments[1] == "releases":
            if request.method == "POST":
                return self._announce(segments[0], request)
            return self._list(segments[0], request)
        if len(segments) == 3 and segments[1] == "releases" and request.method == "GET":
            return self._fetch(segments[0], segments[2])
        return self._reply(None, status_code=405, success=False, errors=["unsupported route"])

    def _reply(self, payload=None, status_code: int = 200, **fields) -> httpx.Response:
        body = {
            "schema_generation": 1,
            "success": True,
            "payload": payload.model_dump(mode="json") if payload is not None else None,
            "errors": [],
        }
        body.update(fields)
        return httpx.Response(status_code, content=json.dumps(body).encode())

    def _sorted(self, package: str) -> list[Release]:
        return sorted(
            self.releases.get(package, {}).values(),
            key=lambda release: parse_version(release.version),
        )

    def _announce(self, package: str, request: httpx.Request) -> httpx.Response:
        try:
            release = decode_envelope(request.content, Release).payload
        except SchemaError as e:
            return self._reply(None, status_code=400, success=False, errors=[e.message])

        versions = self.releases.setdefault(package, {})
        if release.version in versions:
            return self._reply(None, success=False, errors=[f"{package} {release.version} already exists"])

        versions[release.version] = release
        return self._reply(
            Ack(
                package=package,
                version=release.version,
                release_url=f"https://releases.example.com/{package}/{release.version}",
            )
        )

    def _list(self, package: str, request: httpx.Request) -> httpx.Response:
        if package not in self.releases:
            return self._reply(None, status_code=404, success=False, errors=["unknown package"])

        start = int(request.url.params.get("page_token", "0"))
        size = int(request.url.params.get("page_size", self.page_size))
        releases = self._sorted(package)
        page = releases[start:start + size]
        next_token = str(start + size) if start + size < len(releases) else None
        return self._reply(
            ReleasePage(releases=[_summary(release) for release in page]),
            next_page_token=next_token,
        )

    def _fetch(self, package: str, version: str) -> httpx.Response:
        release = self.releases.get(package, {}).get(version)
        if release is None:
            return self._reply(None, status_code=404, success=False, errors=["release not found"])
        return self._reply(release)

    def _package(self, package: str) -> httpx.Response:
        if package not in self.releases:
            return self._reply(None, status_code=404, success=False, errors=["unknown package"])
        versions = [release.version for release in self._sorted(package)]
        return self._reply(Package(name=package, releases=versions))


@pytest.fixture
def hosting_service() -> FakeHostingService:
    return FakeHostingService()


@pytest_asyncio.fixture
async def hosting_client(hosting_service):
    """ReleaseHostingClient talking to the in-memory service."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(hosting_service))
    client = ReleaseHostingClient.connect(
        BASE_URL,
        *NAMESPACE,
        credential=hosting_service.token,
        http_client=http_client,
        retry_policy=RetryPolicy(max_attempts=3, base_delay=0.0),
    )
    yield client
    await client.close()
    await http_client.aclose()
