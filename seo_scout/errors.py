"""Exception taxonomy shared by the crawler components.

Only :class:`CrawlInProgressError` and config errors ever reach callers of the
public API; the rest are raised internally and converted into error
:class:`~seo_scout.crawler.models.PageContent` records by the orchestrator.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    "SeoScoutError",
    "NormalizationError",
    "DnsError",
    "HttpError",
    "ContentTypeError",
    "ParseError",
    "CrawlInProgressError",
)


class SeoScoutError(Exception):
    """Base class for all SeoScout errors."""


class NormalizationError(SeoScoutError, ValueError):
    """Raised when a raw string cannot be turned into a valid http(s) URL."""

    def __init__(self, raw: str, reason: str = "") -> None:
        self.raw = raw
        self.reason = reason
        message = f"Invalid URL: {raw}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DnsError(SeoScoutError):
    """Host could not be resolved. Terminal for the URL within a session."""

    def __init__(self, hostname: str, reason: str) -> None:
        self.hostname = hostname
        self.reason = reason
        super().__init__(f"Domain not available: {reason}")


class HttpError(SeoScoutError):
    """Network failure or a status code the crawler does not analyze."""

    def __init__(self, message: str, status_code: int = 0, title: Optional[str] = None) -> None:
        self.status_code = status_code
        self.title = title or ("Not Found" if status_code == 404 else "Error Page")
        super().__init__(message)


class ContentTypeError(SeoScoutError):
    """Response body is not HTML."""

    def __init__(self, content_type: str, status_code: int = 200) -> None:
        self.content_type = content_type
        self.status_code = status_code
        super().__init__(f"Content type is {content_type or 'unknown'}, not HTML")


class ParseError(SeoScoutError):
    """A structured-data block could not be decoded."""


class CrawlInProgressError(SeoScoutError, RuntimeError):
    """A second top-level crawl was started on a busy crawler instance."""
