"""
Sampled broken-link verification.

Only the first few internal links of a page are probed with HEAD requests;
probing every link of every page would cost more than the crawl itself.

The session's ``broken_links`` set is the one piece of session state written
from inside batch tasks rather than by the orchestrator loop. Additions happen
between awaits on a single event loop, so sibling tasks only ever see a
consistent set; a concurrent sibling may still probe a URL that is about to be
added.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional, Set

from seo_scout.config import CrawlerConfig
from seo_scout.crawler.fetcher import PageFetcher
from seo_scout.crawler.models import InternalLink
from seo_scout.crawler.url import hostname_of
from seo_scout.logger import get_logger

__all__ = ("LinkVerifier",)

log = get_logger("links")


class LinkVerifier:
    """Marks sampled internal links as broken, sharing a per-session broken set."""

    def __init__(
        self,
        fetcher: PageFetcher,
        config: CrawlerConfig,
        broken_links: Optional[Set[str]] = None,
    ) -> None:
        self.fetcher = fetcher
        self.config = config
        self.broken_links: Set[str] = broken_links if broken_links is not None else set()
        self.probes = 0

    async def verify_sample(self, links: List[InternalLink], base_domain: str) -> None:
        """Probe up to ``link_sample_size`` links of *links*, mutating ``broken`` in place.

        Never raises: any failure while probing marks the link broken.
        """
        base_domain = base_domain.lower()
        for link in links[: self.config.link_sample_size]:
            if link.broken:
                continue
            if link.url in self.broken_links:
                link.broken = True
                continue
            if hostname_of(link.url) != base_domain:
                continue

            try:
                status = await self.fetcher.probe(
                    link.url,
                    timeout=self.config.link_check_timeout,
                    max_redirects=self.config.link_check_redirects,
                )
            except Exception as exc:  # probe() already maps client errors to 0
                log.debug("Link probe for %s raised: %s", link.url, exc)
                status = 0
            self.probes += 1

            if status == 0 or status >= 400:
                link.broken = True
                self.broken_links.add(link.url)
                log.debug("Broken link %s (status %s)", link.url, status)

            if self.config.link_check_delay:
                await asyncio.sleep(self.config.link_check_delay)
