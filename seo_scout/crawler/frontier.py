"""
Crawl frontier: the pending-URL queue, the visited set and the admission policy.

Every URL is normalized before it touches either collection. The page budget is
not enforced here; the orchestrator checks ``len(visited)`` before dequeuing.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, List, Optional, Set
from urllib.parse import urlsplit

from seo_scout.crawler.url import hostname_of, normalize_url
from seo_scout.errors import NormalizationError
from seo_scout.logger import get_logger

__all__ = ("Frontier", "SKIP_EXTENSIONS", "SKIP_PATH_SEGMENTS")

log = get_logger("frontier")

SKIP_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png", ".gif", ".css", ".js", ".zip", ".doc", ".docx")
SKIP_PATH_SEGMENTS = ("/admin", "/wp-admin", "/login", "/register", "/cart", "/checkout")


class Frontier:
    """Same-domain FIFO of URLs awaiting fetch."""

    def __init__(self, seed_host: str) -> None:
        self.seed_host = seed_host.lower()
        self._pending: Deque[str] = deque()
        self._pending_set: Set[str] = set()
        self._visited: Set[str] = set()
        self.rejected = 0

    def should_crawl(self, url: str) -> bool:
        """Admission rule: same host, HTML-looking path, no admin/auth area."""
        try:
            normalized = normalize_url(url)
        except NormalizationError:
            return False
        if hostname_of(normalized) != self.seed_host:
            return False
        path = urlsplit(normalized).path.lower()
        if path.endswith(SKIP_EXTENSIONS):
            return False
        if any(segment in path for segment in SKIP_PATH_SEGMENTS):
            return False
        return True

    def enqueue(self, urls: Iterable[str], limit: Optional[int] = None) -> List[str]:
        """Append admissible, unseen URLs in order; return the ones actually added."""
        added: List[str] = []
        for url in urls:
            if limit is not None and len(added) >= limit:
                break
            if not self.should_crawl(url):
                self.rejected += 1
                continue
            normalized = normalize_url(url)
            if normalized in self._visited or normalized in self._pending_set:
                continue
            self._pending.append(normalized)
            self._pending_set.add(normalized)
            added.append(normalized)
        if added:
            log.debug("Enqueued %d URL(s), %d pending", len(added), len(self._pending))
        return added

    def dequeue_batch(self, n: int) -> List[str]:
        """Pop up to *n* URLs from the front, dropping any already visited."""
        batch: List[str] = []
        while self._pending and len(batch) < n:
            url = self._pending.popleft()
            self._pending_set.discard(url)
            if url in self._visited:
                continue
            batch.append(url)
        return batch

    def mark_visited(self, url: str) -> None:
        normalized = normalize_url(url)
        self._visited.add(normalized)
        if normalized in self._pending_set:
            self._pending_set.discard(normalized)
            self._pending.remove(normalized)

    def is_visited(self, url: str) -> bool:
        try:
            return normalize_url(url) in self._visited
        except NormalizationError:
            return False

    @property
    def pending(self) -> List[str]:
        return list(self._pending)

    @property
    def visited(self) -> Set[str]:
        return set(self._visited)

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def clear(self) -> None:
        self._pending.clear()
        self._pending_set.clear()
        self._visited.clear()
        self.rejected = 0

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)
