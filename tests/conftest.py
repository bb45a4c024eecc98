# File: tests/conftest.py
import asyncio
import socket
from typing import Awaitable, Callable, List

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.abc import AbstractResolver

from seo_scout.config import CrawlerConfig


class FailingResolver(AbstractResolver):
    """Resolver that never finds a host; counts how often it was asked."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def resolve(self, host, port=0, family=socket.AF_INET):
        self.calls.append(host)
        raise OSError(f"getaddrinfo ENOTFOUND {host}")

    async def close(self) -> None:
        pass


class StaticResolver(AbstractResolver):
    """Resolver that maps every host to 127.0.0.1 without touching the network."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def resolve(self, host, port=0, family=socket.AF_INET):
        self.calls.append(host)
        return [
            {
                "hostname": host,
                "host": "127.0.0.1",
                "port": port,
                "family": socket.AF_INET,
                "proto": 0,
                "flags": socket.AI_NUMERICHOST,
            }
        ]

    async def close(self) -> None:
        pass


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """
    Config with politeness delays switched off so tests stay quick.
    """
    return CrawlerConfig(
        crawl_delay=0,
        link_check_delay=0,
        request_timeout=5.0,
        link_check_timeout=2.0,
        sitemap_timeout=2.0,
    )


@pytest.fixture()
def failing_resolver() -> FailingResolver:
    return FailingResolver()


@pytest.fixture()
def static_resolver() -> StaticResolver:
    return StaticResolver()


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> Callable[[web.Application], Awaitable[str]]:
    """Start aiohttp applications on free ports, yield a starter, clean up afterwards."""
    runners: List[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield _serve

    for runner in runners:
        await runner.cleanup()


def html(body: str, head: str = "") -> web.Response:
    return web.Response(
        text=f"<html><head>{head}</head><body>{body}</body></html>",
        content_type="text/html",
    )


@pytest.fixture()
def html_response():
    return html


@pytest.fixture()
def recorded_sleeps(monkeypatch) -> List[float]:
    """Record every asyncio.sleep delay while still sleeping for real."""
    delays: List[float] = []
    real_sleep = asyncio.sleep

    async def sleep(delay, *args, **kwargs):
        delays.append(delay)
        return await real_sleep(delay, *args, **kwargs)

    monkeypatch.setattr(asyncio, "sleep", sleep)
    return delays
