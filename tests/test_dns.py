# File: tests/test_dns.py
import asyncio

import pytest

from seo_scout.crawler.dns import DnsResolverCache


@pytest.mark.asyncio()
async def test_success_is_cached(static_resolver):
    cache = DnsResolverCache(static_resolver)
    first = await cache.resolve("Example.COM")
    second = await cache.resolve("example.com")
    assert first.available and second.available
    assert first.address == "127.0.0.1"
    assert static_resolver.calls == ["example.com"]
    assert cache.lookups == 1
    assert "example.com" in cache
    assert len(cache) == 1


@pytest.mark.asyncio()
async def test_failure_is_cached(failing_resolver):
    cache = DnsResolverCache(failing_resolver)
    first = await cache.resolve("nowhere.invalid")
    second = await cache.resolve("nowhere.invalid")
    assert not first.available
    assert "ENOTFOUND" in first.reason
    assert second == first
    assert failing_resolver.calls == ["nowhere.invalid"]
    assert len(cache) == 0


@pytest.mark.asyncio()
async def test_timeout(static_resolver):
    class SlowResolver(type(static_resolver)):
        async def resolve(self, host, port=0, family=0):
            await asyncio.sleep(5)

    cache = DnsResolverCache(SlowResolver(), timeout=0.05)
    result = await cache.resolve("slow.example")
    assert not result.available
    assert "timed out" in result.reason


@pytest.mark.asyncio()
async def test_clear_forgets_answers(static_resolver):
    cache = DnsResolverCache(static_resolver)
    await cache.resolve("example.com")
    cache.clear()
    await cache.resolve("example.com")
    assert cache.lookups == 2


@pytest.mark.asyncio()
async def test_concurrent_first_lookups_share_one_resolution(static_resolver):
    class SlowResolver(type(static_resolver)):
        async def resolve(self, host, port=0, family=0):
            await asyncio.sleep(0.05)
            return await super().resolve(host, port, family)

    resolver = SlowResolver()
    cache = DnsResolverCache(resolver)
    results = await asyncio.gather(*(cache.resolve("example.com") for _ in range(5)))

    assert all(result.available for result in results)
    assert resolver.calls == ["example.com"]
    assert cache.lookups == 1
