"""
Site crawl orchestrator.

``IDLE → SEEDING → BATCH_FETCHING → DRAINING → COMPLETED`` (or ``FAILED`` when
the homepage itself cannot be fetched). Fetches run concurrently inside a batch
of at most ``concurrency`` URLs; the frontier, visited set and counters are
only touched by the control loop between batches.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional
from urllib.parse import urljoin

from aiohttp import ClientSession
from aiohttp.abc import AbstractResolver

from seo_scout.config import CrawlerConfig
from seo_scout.crawler.dns import DnsResolverCache
from seo_scout.crawler.fetcher import PageFetcher
from seo_scout.crawler.link_verifier import LinkVerifier
from seo_scout.crawler.models import CrawlResult, CrawlState, PageContent
from seo_scout.crawler.session import CrawlSession
from seo_scout.crawler.url import hostname_of, normalize_url
from seo_scout.errors import CrawlInProgressError, DnsError, NormalizationError
from seo_scout.logger import get_logger
from seo_scout.parser.html_parser import extract_page
from seo_scout.parser.sitemap_parser import is_sitemap_index, parse_robots_sitemaps, parse_sitemap

__all__ = ("SiteCrawler",)

log = get_logger("crawler")


class SiteCrawler:
    """Асинхронный краулер сайта для SEO-аудита.

    One instance runs one top-level crawl at a time. Use it as an async
    context manager, or call :meth:`close` when done::

        async with SiteCrawler(config) as crawler:
            result = await crawler.crawl_site("example.com")
    """

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        *,
        resolver: Optional[AbstractResolver] = None,
    ) -> None:
        self.config = config or CrawlerConfig()
        self.session = CrawlSession(dns_cache=DnsResolverCache(resolver))
        self.http: Optional[ClientSession] = None
        self.fetcher: Optional[PageFetcher] = None
        self.verifier: Optional[LinkVerifier] = None
        self._busy = False
        self._cancelled = asyncio.Event()

    async def __aenter__(self) -> SiteCrawler:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        if self.http is not None and not self.http.closed:
            return
        self.http = ClientSession(
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.fetcher = PageFetcher(self.http, self.config)
        self.verifier = LinkVerifier(self.fetcher, self.config, self.session.broken_links)

    async def close(self) -> None:
        if self.http and not self.http.closed:
            await self.http.close()
        await self.session.dns_cache.close()

    def cancel(self) -> None:
        """Stop after the batch currently in flight; the result is still returned."""
        self._cancelled.set()

    # ------------------------------------------------------------------ #
    # Single page                                                        #
    # ------------------------------------------------------------------ #

    async def crawl_page(self, url: str) -> PageContent:
        """Fetch and parse one URL. Never raises for fetch or parse failures."""
        try:
            normalized = normalize_url(url)
        except NormalizationError as exc:
            log.warning("Rejected URL %r: %s", url, exc)
            return PageContent.error_page(
                url if isinstance(url, str) else "unknown-url", "Error Page", 0, str(exc)
            )
        await self.open()
        return await self.session.response_cache.get_or_fetch(normalized, self._load_page)

    async def _load_page(self, url: str) -> PageContent:
        log.info("Crawling page: %s", url)
        host = hostname_of(url) or ""
        try:
            resolution = await self.session.dns_cache.resolve(host)
            if not resolution.available:
                raise DnsError(host, resolution.reason or "unknown error")

            outcome = await self.fetcher.fetch(url)
            if not outcome.ok:
                return outcome.to_error_page()

            page = extract_page(
                outcome.html,
                url,
                status_code=outcome.status_code,
                headers=outcome.headers,
                load_time_ms=outcome.load_time_ms,
                content_length=outcome.content_length,
            )
            await self.verifier.verify_sample(page.internal_links, host)
            return page
        except DnsError as exc:
            return PageContent.error_page(url, "DNS Error", -1, str(exc))
        except Exception as exc:
            log.exception("Error crawling page %s", url)
            return PageContent.error_page(
                url, "Error Page", 0, str(exc) or "Unknown error occurred while crawling"
            )

    async def _crawl_isolated(self, url: str) -> PageContent:
        # one failing task must not cancel its siblings in asyncio.gather
        try:
            return await self.crawl_page(url)
        except Exception as exc:
            log.error("Crawl task for %s failed: %s", url, exc)
            return PageContent.error_page(url, "Crawl Error", -1, str(exc) or exc.__class__.__name__)

    # ------------------------------------------------------------------ #
    # Whole site                                                         #
    # ------------------------------------------------------------------ #

    async def crawl_site(self, url: str, budget: Optional[int] = None) -> CrawlResult:
        """Crawl a site starting from its homepage within a page *budget*."""
        if budget is not None and budget < 1:
            raise ValueError("budget must be >= 1")
        self._acquire()
        try:
            return await self._crawl_site(url, budget or self.config.max_pages)
        finally:
            self._busy = False

    async def continue_crawl(self, url: str, budget: Optional[int] = None) -> CrawlResult:
        """Resume the previous crawl of *url* if its frontier still has URLs.

        Without such state this is the same as :meth:`crawl_site`. The result
        holds the cached homepage and only the pages fetched by this call.
        """
        session = self.session
        try:
            same_site = session.can_resume and hostname_of(normalize_url(url)) == session.seed_host
        except NormalizationError:
            same_site = False
        if not same_site:
            return await self.crawl_site(url, budget)

        self._acquire()
        try:
            session.budget = budget or session.budget
            homepage = session.response_cache.get(session.seed_url)
            log.info("Continuing site crawl for: %s", session.seed_url)
            session.stats.finished_at = 0.0
            other_pages = await self._run_batches()
            return await self._drain(homepage, other_pages)
        finally:
            self._busy = False

    def _acquire(self) -> None:
        if self._busy:
            raise CrawlInProgressError("A crawl is already running on this SiteCrawler instance")
        self._busy = True
        self._cancelled.clear()

    async def _crawl_site(self, url: str, budget: int) -> CrawlResult:
        session = self.session
        try:
            seed = normalize_url(url)
        except NormalizationError as exc:
            log.error("Cannot crawl %r: %s", url, exc)
            session.state = CrawlState.FAILED
            homepage = PageContent.error_page(str(url), "Error Page", 0, str(exc))
            return CrawlResult(homepage, state=CrawlState.FAILED)

        session.reset(seed, budget)
        session.stats.start()
        session.state = CrawlState.SEEDING
        log.info("Starting site crawl for: %s (budget %d)", seed, budget)

        homepage = await self.crawl_page(seed)
        session.frontier.mark_visited(seed)
        session.stats.pages_crawled += 1

        if homepage.error:
            log.error("Failed to crawl homepage: %s", homepage.error)
            session.stats.errors_encountered += 1
            session.stats.finish()
            session.state = CrawlState.FAILED
            return CrawlResult(homepage, stats=session.snapshot_stats(), state=CrawlState.FAILED)

        session.check_duplicate(homepage)
        session.frontier.enqueue((link.url for link in homepage.internal_links), limit=budget - 1)
        if self.config.follow_sitemap:
            room = budget - 1 - len(session.frontier)
            if room > 0:
                session.frontier.enqueue(await self._sitemap_urls(room), limit=room)

        other_pages = await self._run_batches()
        return await self._drain(homepage, other_pages)

    async def _run_batches(self) -> List[PageContent]:
        session = self.session
        frontier = session.frontier
        session.state = CrawlState.BATCH_FETCHING
        pages: List[PageContent] = []

        while frontier and frontier.visited_count < session.budget:
            if self._cancelled.is_set():
                log.info("Crawl cancelled with %d URL(s) pending", len(frontier))
                break
            room = session.budget - frontier.visited_count
            batch = frontier.dequeue_batch(min(self.config.concurrency, room))
            if not batch:
                break

            done = frontier.visited_count
            log.info(
                "Processing %d pages in parallel (%d-%d/%d)",
                len(batch), done + 1, done + len(batch), session.budget,
            )
            results = await asyncio.gather(*(self._crawl_isolated(u) for u in batch))

            new_links = 0
            for url, page in zip(batch, results):
                frontier.mark_visited(url)
                if page.error:
                    session.stats.errors_encountered += 1
                    log.warning("Error crawling %s: %s", url, page.error)
                    continue
                pages.append(page)
                session.stats.pages_crawled += 1
                if session.check_duplicate(page):
                    log.info("Duplicate content: %s (same as %s)", url, page.duplicate_of)
                candidates = [link.url for link in page.internal_links]
                new_links += len(frontier.enqueue(candidates, limit=self.config.links_per_page))

            log.info("Found %d new links, %d URLs remaining in queue", new_links, len(frontier))
            if not new_links and not frontier:
                break

        return pages

    async def _drain(self, homepage: PageContent, other_pages: List[PageContent]) -> CrawlResult:
        session = self.session
        session.state = CrawlState.DRAINING
        has_sitemap = await self._check_sitemap()
        session.stats.finish()
        session.state = CrawlState.COMPLETED
        stats = session.snapshot_stats()
        log.info(
            "Site crawl completed. Pages crawled: %d, Errors: %d",
            stats.pages_crawled, stats.errors_encountered,
        )
        return CrawlResult(
            homepage=homepage,
            other_pages=other_pages,
            reached_page_budget=session.visited_count >= session.budget,
            has_sitemap=has_sitemap,
            stats=stats,
            state=CrawlState.COMPLETED,
        )

    # ------------------------------------------------------------------ #
    # sitemap.xml                                                        #
    # ------------------------------------------------------------------ #

    def _sitemap_url(self) -> str:
        return urljoin(self.session.seed_origin + "/", "/sitemap.xml")

    async def _check_sitemap(self) -> bool:
        status = await self.fetcher.probe(
            self._sitemap_url(),
            timeout=self.config.sitemap_timeout,
            max_redirects=self.config.max_redirects,
        )
        return status == 200

    async def _sitemap_sources(self) -> List[str]:
        """``/sitemap.xml`` followed by same-host ``Sitemap:`` entries of robots.txt."""
        sources = [self._sitemap_url()]
        robots = await self.fetcher.get_text(
            urljoin(self.session.seed_origin + "/", "/robots.txt"),
            timeout=self.config.sitemap_timeout,
        )
        if robots:
            for url in parse_robots_sitemaps(robots):
                if hostname_of(url) == self.session.seed_host and url not in sources:
                    sources.append(url)
        return sources

    async def _sitemap_urls(self, limit: int) -> List[str]:
        """Up to *limit* same-host page URLs listed in the site's sitemaps.

        One level of sitemap index is followed. Every document fetched after
        ``/sitemap.xml`` itself counts against ``max_child_sitemaps``.
        """
        seed_host = self.session.seed_host
        timeout = self.config.sitemap_timeout
        urls: List[str] = []
        extra_fetches = 0

        def collect(text: str) -> None:
            for loc in parse_sitemap(text):
                if len(urls) >= limit:
                    return
                if hostname_of(loc) == seed_host and loc not in urls:
                    urls.append(loc)

        for position, source in enumerate(await self._sitemap_sources()):
            if len(urls) >= limit:
                break
            if position:
                if extra_fetches >= self.config.max_child_sitemaps:
                    break
                extra_fetches += 1
            text = await self.fetcher.get_text(source, timeout=timeout)
            if not text:
                continue
            if not is_sitemap_index(text):
                collect(text)
                continue
            for child in parse_sitemap(text):
                if len(urls) >= limit or extra_fetches >= self.config.max_child_sitemaps:
                    break
                if hostname_of(child) != seed_host:
                    continue
                extra_fetches += 1
                child_text = await self.fetcher.get_text(child, timeout=timeout)
                if child_text:
                    collect(child_text)

        log.info("Sitemaps list %d URL(s) (%d nested sitemap(s) fetched)", len(urls), extra_fetches)
        return urls
