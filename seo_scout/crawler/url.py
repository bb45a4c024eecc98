"""
URL normalization utilities for SeoScout.

:func:`normalize_url` is the single canonical form used for every cache key,
frontier entry and visited-set member. It guarantees a parseable, single-scheme
http(s) string; it does not strip trailing slashes or reorder query parameters,
so ``/a`` and ``/a/`` stay distinct pages.
"""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, urlsplit

from seo_scout.errors import NormalizationError

__all__ = ("normalize_url", "hostname_of", "origin_of", "is_http_url")

_REPEATED_SCHEME_RE = re.compile(r"^(https?://)+", re.IGNORECASE)
_ANY_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*)://")
_BAD_HOST_CHARS = frozenset(' <>"{}|\\^`/\t\r\n')
_DEFAULT_PORTS = {"http": 80, "https": 443}

# RFC 3986 reserved + unreserved characters, plus "%" so escapes survive
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_SAFE = "/?%:@!$&'()*+,;=-._~"


def normalize_url(raw: str) -> str:
    """Return the canonical form of *raw* or raise :class:`NormalizationError`.

    * surrounding whitespace is trimmed;
    * ``https://https://host`` collapses to a single scheme;
    * a missing scheme becomes ``https://``;
    * scheme and host are lower-cased, default ports and fragments dropped,
      an empty path becomes ``/`` and unsafe characters are percent-quoted.
    """
    if not isinstance(raw, str):
        raise NormalizationError(repr(raw), "not a string")
    url = raw.strip()
    if not url:
        raise NormalizationError(raw, "empty")

    url = _REPEATED_SCHEME_RE.sub(lambda m: m.group(1), url, count=1)
    match = _ANY_SCHEME_RE.match(url)
    if match is None:
        url = "https://" + url
    elif match.group(1).lower() not in _DEFAULT_PORTS:
        raise NormalizationError(raw, f"unsupported scheme {match.group(1)!r}")

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise NormalizationError(raw, str(exc)) from exc

    host = parts.hostname
    if not host:
        raise NormalizationError(raw, "missing host")
    if any(ch in _BAD_HOST_CHARS for ch in host):
        raise NormalizationError(raw, "invalid host")
    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError as exc:
            raise NormalizationError(raw, "invalid host") from exc
    if ":" in host:
        host = f"[{host}]"

    scheme = parts.scheme.lower()
    netloc = host
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"
    if "@" in parts.netloc:
        userinfo = parts.netloc.rsplit("@", 1)[0]
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path or "/", safe=_PATH_SAFE)
    query = quote(parts.query, safe=_QUERY_SAFE)
    normalized = f"{scheme}://{netloc}{path}"
    if query:
        normalized = f"{normalized}?{query}"
    return normalized


def hostname_of(url: str) -> Optional[str]:
    """Lower-cased hostname of *url*, ``None`` if it has none or cannot be parsed."""
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def origin_of(url: str) -> str:
    """``scheme://netloc`` part of an already normalized URL."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def is_http_url(url: str) -> bool:
    try:
        return urlsplit(url).scheme in _DEFAULT_PORTS
    except ValueError:
        return False
