# File: tests/test_url.py
import pytest

from seo_scout.crawler.url import hostname_of, is_http_url, normalize_url, origin_of
from seo_scout.errors import NormalizationError


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("example.com", "https://example.com/"),
        ("  https://example.com/about  ", "https://example.com/about"),
        ("https://https://example.com/a", "https://example.com/a"),
        ("http://http://example.com", "http://example.com/"),
        ("HTTPS://Example.COM/Path", "https://example.com/Path"),
        ("https://example.com:443/x", "https://example.com/x"),
        ("http://example.com:8080/x", "http://example.com:8080/x"),
        ("https://example.com/a#section", "https://example.com/a"),
        ("https://example.com/a b", "https://example.com/a%20b"),
        ("https://example.com/a%20b", "https://example.com/a%20b"),
        ("https://example.com/search?q=a b&x=1", "https://example.com/search?q=a%20b&x=1"),
        ("https://example.com/dir/", "https://example.com/dir/"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "example.com",
        "https://https://example.com/a?b=c d",
        "HTTP://EXAMPLE.com:80/ü/path",
        "https://bücher.example/x",
        "http://[::1]:8080/x",
        "https://user:pw@example.com/",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize_url(raw)
    assert normalize_url(once) == once


def test_trailing_slash_is_not_canonicalized():
    assert normalize_url("https://example.com/a") != normalize_url("https://example.com/a/")


def test_query_order_is_kept():
    assert normalize_url("https://example.com/?b=2&a=1").endswith("?b=2&a=1")


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "https://", "https://exa mple.com/", "http://example.com:notaport/", "ftp://example.com/file"],
)
def test_normalize_rejects_invalid(raw):
    with pytest.raises(NormalizationError):
        normalize_url(raw)


def test_normalization_error_is_value_error():
    with pytest.raises(ValueError):
        normalize_url("https://")


def test_helpers():
    url = normalize_url("Example.com:8443/a")
    assert hostname_of(url) == "example.com"
    assert origin_of(url) == "https://example.com:8443"
    assert is_http_url(url)
    assert not is_http_url("mailto:someone@example.com")
    assert hostname_of("http://[broken") is None
