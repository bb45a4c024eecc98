"""
Mutable state of one site traversal.

All caches live here rather than at module level, so two crawler instances
(or two test cases) never see each other's URLs.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Set

from seo_scout.crawler.cache import ResponseCache
from seo_scout.crawler.dns import DnsResolverCache
from seo_scout.crawler.frontier import Frontier
from seo_scout.crawler.models import CrawlState, CrawlStats, PageContent
from seo_scout.crawler.url import hostname_of, origin_of

__all__ = ("CrawlSession",)


@dataclass(slots=True)
class CrawlSession:
    dns_cache: DnsResolverCache
    seed_url: Optional[str] = None
    seed_origin: str = ""
    seed_host: str = ""
    budget: int = 0
    frontier: Frontier = field(default_factory=lambda: Frontier(""))
    response_cache: ResponseCache = field(default_factory=ResponseCache)
    broken_links: Set[str] = field(default_factory=set)
    content_hashes: Dict[str, str] = field(default_factory=dict)
    stats: CrawlStats = field(default_factory=CrawlStats)
    state: CrawlState = CrawlState.IDLE

    def reset(self, seed_url: str, budget: int) -> None:
        """Forget everything from the previous crawl and bind to *seed_url*."""
        self.seed_url = seed_url
        self.seed_origin = origin_of(seed_url)
        self.seed_host = hostname_of(seed_url) or ""
        self.budget = budget
        self.frontier = Frontier(self.seed_host)
        self.response_cache.clear()
        self.dns_cache.clear()
        # verifier holds a reference to this set; clear in place
        self.broken_links.clear()
        self.content_hashes.clear()
        self.stats = CrawlStats()
        self.state = CrawlState.IDLE

    def check_duplicate(self, page: PageContent) -> bool:
        """Flag *page* when its body text matches an earlier page of this session.

        Text is compared after lower-casing and collapsing whitespace; pages
        without body text are never duplicates.
        """
        text = " ".join(page.body_text.lower().split())
        if not text:
            return False
        digest = hashlib.sha1(text.encode("utf-8")).hexdigest()
        first = self.content_hashes.setdefault(digest, page.url)
        if first == page.url:
            return False
        page.is_duplicate = True
        page.duplicate_of = first
        self.stats.duplicate_pages += 1
        return True

    @property
    def visited_count(self) -> int:
        return self.frontier.visited_count

    @property
    def can_resume(self) -> bool:
        return self.seed_url is not None and len(self.frontier) > 0

    def snapshot_stats(self) -> CrawlStats:
        self.stats.pages_skipped = self.frontier.rejected
        self.stats.cache_size = len(self.response_cache)
        self.stats.dns_cache_size = len(self.dns_cache)
        return replace(self.stats)
