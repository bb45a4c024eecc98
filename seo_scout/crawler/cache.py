"""
Per-session response cache.

The cache is the single place where "check → fetch → store" happens. Within one
event loop the check and the registration of an in-flight future run without a
suspension point between them, so concurrent callers asking for the same URL
share one fetch: the first caller runs the loader, later callers await its
future. The result is stored before the future is resolved.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Iterator, Optional

from seo_scout.crawler.models import PageContent
from seo_scout.logger import get_logger

__all__ = ("ResponseCache",)

log = get_logger("cache")

Loader = Callable[[str], Awaitable[PageContent]]


class ResponseCache:
    """Maps a normalized URL to its :class:`PageContent` for one session."""

    def __init__(self) -> None:
        self._pages: Dict[str, PageContent] = {}
        self._inflight: Dict[str, asyncio.Future[PageContent]] = {}
        self.hits = 0
        self.misses = 0

    async def get_or_fetch(self, url: str, loader: Loader) -> PageContent:
        """Return the cached page for *url*, running *loader* at most once.

        *loader* must not raise; if it does anyway, the exception is passed to
        every waiter and nothing is cached.
        """
        cached = self._pages.get(url)
        if cached is not None:
            self.hits += 1
            log.debug("Using cached response for: %s", url)
            return cached

        pending = self._inflight.get(url)
        if pending is not None:
            self.hits += 1
            log.debug("Joining in-flight fetch for: %s", url)
            return await asyncio.shield(pending)

        self.misses += 1
        future: asyncio.Future[PageContent] = asyncio.get_running_loop().create_future()
        self._inflight[url] = future
        try:
            page = await loader(url)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # retrieve so an unawaited future does not log "never retrieved"
            future.exception()
            raise
        else:
            self._pages[url] = page
            future.set_result(page)
            return page
        finally:
            self._inflight.pop(url, None)

    def get(self, url: str) -> Optional[PageContent]:
        return self._pages.get(url)

    def put(self, url: str, page: PageContent) -> None:
        self._pages[url] = page

    def clear(self) -> None:
        self._pages.clear()
        self._inflight.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, url: object) -> bool:
        return url in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)
