"""Lazy, restartable iteration over paginated release listings."""

from typing import AsyncIterator, Awaitable, Callable, Optional

import structlog

from release_hosting.models.entities import ReleaseSummary
from release_hosting.retry.failures import FailureReason
from release_hosting.transport.exceptions import FatalTransportError

logger = structlog.get_logger(__name__)

PageFetcher = Callable[[Optional[str]], Awaitable[tuple[list[ReleaseSummary], Optional[str]]]]


class ReleaseListing:
    """
    Release summaries of one package, fetched page by page.

    Nothing is requested until iteration starts. Each ``async for`` starts
    again from the first page. A page token the service already handed out
    during the same pass aborts iteration with FatalTransportError instead
    of looping forever.

    Usage:
        async for summary in client.list_releases("axolotlsay"):
            ...
        summaries = await client.list_releases("axolotlsay").collect()
    """

    def __init__(self, package: str, fetch_page: PageFetcher):
        self.package = package
        self._fetch_page = fetch_page

    def __aiter__(self) -> AsyncIterator[ReleaseSummary]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ReleaseSummary]:
        token: Optional[str] = None
        seen: set[str] = set()
        pages = 0

        while True:
            summaries, next_token = await self._fetch_page(token)
            pages += 1
            for summary in summaries:
                yield summary

            if not next_token:
                logger.debug("Release listing exhausted", package=self.package, pages=pages)
                return

            if next_token in seen:
                raise FatalTransportError(
                    f"Pagination for {self.package} repeated page token '{next_token}'",
                    "list_releases",
                    FailureReason.PAGINATION_LOOP,
                )
            seen.add(next_token)
            token = next_token

    async def collect(self) -> list[ReleaseSummary]:
        """Fetch every page and return all summaries in service order."""
        return [summary async for summary in self]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(package={self.package!r})"
