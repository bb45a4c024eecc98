"""
Fetcher module: performs page GETs and lightweight HEAD probes.

TLS certificates are not validated unless ``verify_ssl`` is enabled: an audit
should still cover sites with self-signed or expired certificates.
"""
from __future__ import annotations

import asyncio
import time
from typing import Optional

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout, TooManyRedirects

from seo_scout.config import CrawlerConfig
from seo_scout.crawler.models import FetchOutcome
from seo_scout.errors import ContentTypeError, HttpError
from seo_scout.logger import get_logger

__all__ = ("PageFetcher", "describe_status", "HTML_CONTENT_TYPES")

log = get_logger("fetcher")

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

_ACCEPT = "text/html,application/xhtml+xml,application/xml"
_ACCEPT_LANGUAGE = "en-US,en;q=0.9"
_CHUNK = 64 * 1024

_STATUS_DESCRIPTIONS = {
    400: "Bad Request - The server could not understand the request",
    401: "Unauthorized - Authentication is required to access this resource",
    403: "Forbidden - The server refuses to fulfill the request",
    404: "Not Found - The requested resource could not be found",
    405: "Method Not Allowed - The request method is not supported",
    406: "Not Acceptable - The server cannot produce a response matching the list of acceptable values",
    407: "Proxy Authentication Required - Authentication with the proxy is required",
    408: "Request Timeout - The server timed out waiting for the request",
    409: "Conflict - The request could not be completed due to a conflict",
    410: "Gone - The requested resource is no longer available",
    429: "Too Many Requests - The user has sent too many requests in a given amount of time",
    500: "Internal Server Error - The server encountered an unexpected condition",
    501: "Not Implemented - The server does not support the functionality required",
    502: "Bad Gateway - The server received an invalid response from an upstream server",
    503: "Service Unavailable - The server is currently unable to handle the request",
    504: "Gateway Timeout - The server did not receive a timely response from an upstream server",
}


def describe_status(status_code: Optional[int]) -> str:
    """Human-readable description of an HTTP status code."""
    if not status_code:
        return "Unknown error: No status code returned"
    return _STATUS_DESCRIPTIONS.get(status_code, f"HTTP error {status_code}")


class PageFetcher:
    """Issues HTTP requests on a shared session and classifies the outcome."""

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config
        self._ssl = None if config.verify_ssl else False
        self.requests_made = 0

    async def fetch(self, url: str) -> FetchOutcome:
        """
        GET an already normalized URL whose host is known to resolve.

        Never raises for network or HTTP problems; they come back as a failed
        :class:`FetchOutcome`.
        """
        started = time.perf_counter()
        try:
            outcome = await self._get(url, started)
        except ContentTypeError as exc:
            return FetchOutcome.failure(url, "Non-HTML Content", exc.status_code, str(exc))
        except HttpError as exc:
            log.warning("Error fetching page %s: %s", url, exc)
            return FetchOutcome.failure(url, exc.title, exc.status_code, str(exc))

        if self.config.crawl_delay:
            await asyncio.sleep(self.config.crawl_delay)
        return outcome

    async def _get(self, url: str, started: float) -> FetchOutcome:
        self.requests_made += 1
        timeout = ClientTimeout(total=self.config.request_timeout)
        headers = {"Accept": _ACCEPT, "Accept-Language": _ACCEPT_LANGUAGE}
        try:
            async with self.session.get(
                url,
                headers=headers,
                timeout=timeout,
                allow_redirects=True,
                max_redirects=self.config.max_redirects,
                ssl=self._ssl,
            ) as resp:
                status = resp.status
                if status >= 500:
                    raise HttpError(describe_status(status), status, resp.reason or "Error Page")

                content_type = resp.headers.get("Content-Type", "")
                if not any(ct in content_type.lower() for ct in HTML_CONTENT_TYPES):
                    raise ContentTypeError(content_type, status)

                body = await self._read_capped(resp)
                load_time_ms = int((time.perf_counter() - started) * 1000)
                declared = resp.headers.get("Content-Length", "")
                return FetchOutcome(
                    url=url,
                    status_code=status,
                    headers=dict(resp.headers),
                    html=_decode(body, resp.charset),
                    load_time_ms=load_time_ms,
                    content_length=int(declared) if declared.isdigit() else len(body),
                )
        except TooManyRedirects as exc:
            raise HttpError(f"Maximum number of redirects exceeded ({self.config.max_redirects})") from exc
        except asyncio.TimeoutError as exc:
            raise HttpError(f"timeout of {self.config.request_timeout:g}s exceeded") from exc
        except ClientError as exc:
            raise HttpError(str(exc) or exc.__class__.__name__, getattr(exc, "status", 0) or 0) from exc

    async def _read_capped(self, resp: ClientResponse) -> bytes:
        limit = self.config.max_content_size
        chunks = []
        size = 0
        async for chunk in resp.content.iter_chunked(_CHUNK):
            size += len(chunk)
            if size > limit:
                raise HttpError(f"maxContentLength size of {limit} exceeded")
            chunks.append(chunk)
        return b"".join(chunks)

    async def probe(self, url: str, *, timeout: float, max_redirects: int) -> int:
        """HEAD *url* and return its status, ``0`` when the request fails."""
        try:
            async with self.session.head(
                url,
                timeout=ClientTimeout(total=timeout),
                allow_redirects=max_redirects > 0,
                max_redirects=max(max_redirects, 1),
                ssl=self._ssl,
            ) as resp:
                return resp.status
        except (ClientError, asyncio.TimeoutError) as exc:
            log.debug("HEAD %s failed: %s", url, exc)
            return 0

    async def get_text(self, url: str, *, timeout: float) -> Optional[str]:
        """GET a small auxiliary document (e.g. sitemap.xml); ``None`` unless HTTP 200."""
        try:
            async with self.session.get(
                url, timeout=ClientTimeout(total=timeout), ssl=self._ssl
            ) as resp:
                if resp.status != 200:
                    return None
                body = await self._read_capped(resp)
                return _decode(body, resp.charset)
        except (ClientError, HttpError, asyncio.TimeoutError) as exc:
            log.debug("GET %s failed: %s", url, exc)
            return None


def _decode(body: bytes, charset: Optional[str]) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")
