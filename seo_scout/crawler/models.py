"""
Data models for the SeoScout crawler.

Every collection field defaults to an empty container so an error page has the
same shape as a successful one and consumers never meet ``None`` where they
expect a list or a mapping.
"""
from __future__ import annotations

import enum
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class CrawlState(str, enum.Enum):
    """Lifecycle of one site traversal."""

    IDLE = "idle"
    SEEDING = "seeding"
    BATCH_FETCHING = "batch_fetching"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class InternalLink:
    url: str
    text: str = ""
    broken: bool = False


@dataclass(slots=True)
class ExternalLink:
    url: str
    text: str = ""


@dataclass(slots=True)
class ImageRef:
    url: str
    alt: Optional[str] = None


@dataclass(slots=True)
class SchemaBlock:
    """Declared schema.org types plus the raw markup they came from."""

    types: List[str] = field(default_factory=list)
    json: str = ""


@dataclass(slots=True)
class Headings:
    h1: List[str] = field(default_factory=list)
    h2: List[str] = field(default_factory=list)
    h3: List[str] = field(default_factory=list)
    h4: List[str] = field(default_factory=list)
    h5: List[str] = field(default_factory=list)
    h6: List[str] = field(default_factory=list)

    def level(self, n: int) -> List[str]:
        return getattr(self, f"h{n}")


@dataclass(slots=True)
class MetaTags:
    description: Optional[str] = None
    robots: Optional[str] = None
    viewport: Optional[str] = None
    canonical: Optional[str] = None
    og_tags: Dict[str, str] = field(default_factory=dict)
    twitter_tags: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class PageContent:
    """Structured extraction result for one fetched URL."""

    url: str
    status_code: int = 0
    title: str = ""
    meta_description: str = ""
    meta: MetaTags = field(default_factory=MetaTags)
    headings: Headings = field(default_factory=Headings)
    body_text: str = ""
    word_count: int = 0
    paragraphs: List[str] = field(default_factory=list)
    internal_links: List[InternalLink] = field(default_factory=list)
    external_links: List[ExternalLink] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    schema_blocks: List[SchemaBlock] = field(default_factory=list)
    is_https: bool = False
    has_mixed_content: bool = False
    has_security_headers: bool = False
    is_mobile_viewport_present: bool = False
    has_noindex_directive: bool = False
    x_robots_tag: Optional[str] = None
    missing_alt_count: int = 0
    has_duplicate_meta_tags: bool = False
    is_duplicate: bool = False
    duplicate_of: Optional[str] = None
    load_time_ms: int = 0
    resource_count: int = 0
    approx_resource_bytes: int = 0
    error: Optional[str] = None

    @classmethod
    def error_page(cls, url: str, title: str, status_code: int, message: str) -> PageContent:
        """Build an error record that keeps every field populated."""
        text = f"Error: {message}"
        return cls(
            url=url,
            status_code=status_code,
            title=title,
            meta_description="Error accessing page content",
            meta=MetaTags(description="Error accessing page content"),
            headings=Headings(h1=[title]),
            body_text=text,
            word_count=len(text.split()),
            paragraphs=[text],
            is_https=url.startswith("https://"),
            error=message or "Unknown error",
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def broken_link_count(self) -> int:
        return sum(1 for link in self.internal_links if link.broken)

    @property
    def schema_types(self) -> List[str]:
        seen: Dict[str, None] = {}
        for block in self.schema_blocks:
            for t in block.types:
                seen.setdefault(t, None)
        return list(seen)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["broken_link_count"] = self.broken_link_count
        return data


@dataclass(slots=True)
class FetchOutcome:
    """Raw result of one GET before parsing."""

    url: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    html: str = ""
    load_time_ms: int = 0
    content_length: int = 0
    error_title: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_message is None

    @classmethod
    def failure(cls, url: str, title: str, status_code: int, message: str) -> FetchOutcome:
        return cls(url=url, status_code=status_code, error_title=title, error_message=message)

    def to_error_page(self) -> PageContent:
        return PageContent.error_page(
            self.url, self.error_title or "Error Page", self.status_code, self.error_message or ""
        )


@dataclass(slots=True)
class CrawlStats:
    pages_crawled: int = 0
    pages_skipped: int = 0
    errors_encountered: int = 0
    duplicate_pages: int = 0
    started_at: float = 0.0
    finished_at: float = 0.0
    cache_size: int = 0
    dns_cache_size: int = 0

    def start(self) -> None:
        self.started_at = time.time()
        self.finished_at = 0.0

    def finish(self) -> None:
        self.finished_at = time.time()

    @property
    def duration(self) -> float:
        if not self.finished_at:
            return 0.0
        return self.finished_at - self.started_at

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["duration"] = round(self.duration, 3)
        return data


@dataclass(slots=True)
class CrawlResult:
    """Engine's return value, handed to classification and scoring stages."""

    homepage: PageContent
    other_pages: List[PageContent] = field(default_factory=list)
    reached_page_budget: bool = False
    has_sitemap: bool = False
    stats: CrawlStats = field(default_factory=CrawlStats)
    state: CrawlState = CrawlState.COMPLETED

    @property
    def pages(self) -> List[PageContent]:
        return [self.homepage, *self.other_pages]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "homepage": self.homepage.to_dict(),
            "other_pages": [p.to_dict() for p in self.other_pages],
            "reached_page_budget": self.reached_page_budget,
            "has_sitemap": self.has_sitemap,
            "stats": self.stats.to_dict(),
            "state": self.state.value,
        }


__all__ = (
    "CrawlState",
    "InternalLink",
    "ExternalLink",
    "ImageRef",
    "SchemaBlock",
    "Headings",
    "MetaTags",
    "PageContent",
    "FetchOutcome",
    "CrawlStats",
    "CrawlResult",
)
