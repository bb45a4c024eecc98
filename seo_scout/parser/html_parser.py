"""HTML parsing for SeoScout.

:func:`extract_page` turns the markup of one page into a
:class:`~seo_scout.crawler.models.PageContent`. It is a pure function: the same
HTML, base URL and response metadata always produce the same record. Timing
values are measured by the fetcher and passed in.

Everything that looks at scripts, iframes or objects (schema, mixed content,
resource counts) runs on the untouched tree; those elements are removed only
for the final body-text pass.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from seo_scout.crawler.models import (
    ExternalLink,
    Headings,
    ImageRef,
    InternalLink,
    MetaTags,
    PageContent,
)
from seo_scout.crawler.url import hostname_of, is_http_url, normalize_url
from seo_scout.errors import NormalizationError
from seo_scout.parser.schema_parser import extract_schema

__all__: Sequence[str] = ("extract_page", "extract_links", "has_security_headers")

SECURITY_HEADERS = (
    "content-security-policy",
    "x-content-type-options",
    "x-frame-options",
    "strict-transport-security",
    "x-xss-protection",
)
_NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe", "object", "embed"]
_MIXED_CONTENT_SELECTOR = ", ".join(
    (
        'img[src^="http:"]',
        'script[src^="http:"]',
        'link[href^="http:"]',
        'iframe[src^="http:"]',
        'object[data^="http:"]',
        'form[action^="http:"]',
    )
)
_RESOURCE_SELECTOR = 'img, script, link[rel~="stylesheet"], source, iframe'
_SKIP_HREF_PREFIXES = ("#", "javascript:", "mailto:")


def _text(el: Tag) -> str:
    return " ".join(el.get_text(" ").split())


def _attr(el: Optional[Tag], name: str) -> Optional[str]:
    if el is None:
        return None
    value = el.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value


def _meta(soup: BeautifulSoup, key: str, value: str) -> List[Tag]:
    return [
        tag
        for tag in soup.find_all("meta")
        if (_attr(tag, key) or "").strip().lower() == value
    ]


def _meta_content(soup: BeautifulSoup, key: str, value: str) -> Optional[str]:
    tags = _meta(soup, key, value)
    return _attr(tags[0], "content") if tags else None


def _prefixed_meta(soup: BeautifulSoup, key: str, prefix: str) -> Dict[str, str]:
    tags: Dict[str, str] = {}
    for tag in soup.find_all("meta"):
        name = _attr(tag, key) or ""
        content = _attr(tag, "content")
        if name.startswith(prefix) and content:
            tags[name[len(prefix):]] = content
    return tags


def extract_meta(soup: BeautifulSoup) -> MetaTags:
    canonical = soup.find("link", rel="canonical")
    return MetaTags(
        description=_meta_content(soup, "name", "description")
        or _meta_content(soup, "property", "og:description"),
        robots=_meta_content(soup, "name", "robots"),
        viewport=_meta_content(soup, "name", "viewport"),
        canonical=_attr(canonical, "href"),
        og_tags=_prefixed_meta(soup, "property", "og:"),
        twitter_tags=_prefixed_meta(soup, "name", "twitter:"),
    )


def extract_headings(soup: BeautifulSoup) -> Headings:
    headings = Headings()
    for level in range(1, 7):
        target = headings.level(level)
        for el in soup.find_all(f"h{level}"):
            text = _text(el)
            if text:
                target.append(text)
    return headings


def extract_links(soup: BeautifulSoup, base_url: str) -> Tuple[List[InternalLink], List[ExternalLink]]:
    """Split ``<a href>`` targets into internal and external links.

    An href that cannot be resolved is kept as an internal link already marked
    broken.
    """
    base_host = hostname_of(base_url)
    internal: List[InternalLink] = []
    external: List[ExternalLink] = []
    for a in soup.find_all("a", href=True):
        href = (_attr(a, "href") or "").strip()
        if not href or href.lower().startswith(_SKIP_HREF_PREFIXES):
            continue
        text = _text(a)
        try:
            resolved = urljoin(base_url, href)
            if not is_http_url(resolved):
                # tel:, ftp: and friends never share the page's host
                external.append(ExternalLink(resolved, text))
                continue
            resolved = normalize_url(resolved)
        except (ValueError, NormalizationError):
            internal.append(InternalLink(href, text, broken=True))
            continue
        if hostname_of(resolved) == base_host:
            internal.append(InternalLink(resolved, text))
        else:
            external.append(ExternalLink(resolved, text))
    return internal, external


def extract_images(soup: BeautifulSoup, base_url: str) -> List[ImageRef]:
    images = []
    for img in soup.find_all("img"):
        src = _attr(img, "src") or _attr(img, "data-src")
        if not src:
            continue
        try:
            url = urljoin(base_url, src.strip())
        except ValueError:
            url = src
        images.append(ImageRef(url, _attr(img, "alt")))
    return images


def has_security_headers(headers: Mapping[str, str]) -> bool:
    """At least two of the well-known security headers are present."""
    present = {name.lower() for name in headers}
    return sum(1 for h in SECURITY_HEADERS if h in present) >= 2


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _has_noindex(soup: BeautifulSoup) -> bool:
    for name in ("robots", "googlebot"):
        for tag in _meta(soup, "name", name):
            if "noindex" in (_attr(tag, "content") or "").lower():
                return True
    return False


def _missing_alt(soup: BeautifulSoup) -> int:
    return sum(1 for img in soup.find_all("img") if not (_attr(img, "alt") or "").strip())


def _body_text(soup: BeautifulSoup) -> Tuple[str, List[str]]:
    for el in soup(_NON_CONTENT_TAGS):
        el.decompose()
    paragraphs = [text for text in (_text(p) for p in soup.find_all("p")) if text]
    root = soup.body or soup
    return " ".join(root.get_text(" ").split()), paragraphs


def extract_page(
    html: str,
    base_url: str,
    *,
    status_code: int = 200,
    headers: Optional[Mapping[str, str]] = None,
    load_time_ms: int = 0,
    content_length: Optional[int] = None,
) -> PageContent:
    """Parse *html* served at *base_url* into a :class:`PageContent`."""
    headers = headers or {}
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    meta = extract_meta(soup)
    internal, external = extract_links(soup, base_url)
    is_https = base_url.lower().startswith("https://")
    viewport = (meta.viewport or "").lower()

    page = PageContent(
        url=base_url,
        status_code=status_code,
        title=_text(title_tag) if title_tag else "",
        meta_description=meta.description or "",
        meta=meta,
        headings=extract_headings(soup),
        internal_links=internal,
        external_links=external,
        images=extract_images(soup, base_url),
        schema_blocks=extract_schema(soup),
        is_https=is_https,
        has_mixed_content=is_https and soup.select_one(_MIXED_CONTENT_SELECTOR) is not None,
        has_security_headers=has_security_headers(headers),
        is_mobile_viewport_present="width=device-width" in viewport,
        has_noindex_directive=_has_noindex(soup),
        x_robots_tag=_header(headers, "x-robots-tag"),
        missing_alt_count=_missing_alt(soup),
        has_duplicate_meta_tags=len(soup.find_all("title")) > 1
        or len(_meta(soup, "name", "description")) > 1,
        load_time_ms=load_time_ms,
        resource_count=len(soup.select(_RESOURCE_SELECTOR)),
        approx_resource_bytes=content_length
        if content_length is not None
        else len(html.encode("utf-8")),
    )

    page.body_text, page.paragraphs = _body_text(soup)
    page.word_count = len(page.body_text.split())
    return page
