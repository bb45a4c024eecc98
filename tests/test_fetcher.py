# File: tests/test_fetcher.py
import pytest
from aiohttp import ClientSession, web

from seo_scout.config import CrawlerConfig
from seo_scout.crawler.fetcher import PageFetcher, describe_status


def _app(html_response) -> web.Application:
    async def ok(request):
        return html_response("<h1>Hello</h1>", head="<title>Hi</title>")

    async def missing(request):
        return web.Response(status=404, text="<h1>Nothing here</h1>", content_type="text/html")

    async def boom(request):
        return web.Response(status=500, text="oops", content_type="text/html")

    async def data(request):
        return web.json_response({"a": 1})

    async def huge(request):
        return web.Response(text="<p>" + "x" * 5000 + "</p>", content_type="text/html")

    async def hop(request):
        raise web.HTTPFound("/ok")

    async def loop(request):
        raise web.HTTPFound("/loop")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/missing", missing)
    app.router.add_get("/boom", boom)
    app.router.add_get("/data", data)
    app.router.add_get("/huge", huge)
    app.router.add_get("/hop", hop)
    app.router.add_get("/loop", loop)
    return app


@pytest.mark.asyncio()
async def test_fetch_html(serve, html_response, fast_config):
    base = await serve(_app(html_response))
    async with ClientSession() as session:
        fetcher = PageFetcher(session, fast_config)
        outcome = await fetcher.fetch(f"{base}/ok")
    assert outcome.ok
    assert outcome.status_code == 200
    assert "<h1>Hello</h1>" in outcome.html
    assert outcome.content_length > 0
    assert outcome.load_time_ms >= 0
    assert fetcher.requests_made == 1


@pytest.mark.asyncio()
async def test_client_errors_are_still_analyzed(serve, html_response, fast_config):
    base = await serve(_app(html_response))
    async with ClientSession() as session:
        outcome = await PageFetcher(session, fast_config).fetch(f"{base}/missing")
    assert outcome.ok
    assert outcome.status_code == 404
    assert "Nothing here" in outcome.html


@pytest.mark.asyncio()
async def test_server_error_becomes_error_page(serve, html_response, fast_config):
    base = await serve(_app(html_response))
    async with ClientSession() as session:
        outcome = await PageFetcher(session, fast_config).fetch(f"{base}/boom")
    assert not outcome.ok
    page = outcome.to_error_page()
    assert page.status_code == 500
    assert page.title == "Internal Server Error"
    assert page.headings.h1 == ["Internal Server Error"]
    assert page.error.startswith("Internal Server Error")


@pytest.mark.asyncio()
async def test_non_html_content(serve, html_response, fast_config):
    base = await serve(_app(html_response))
    async with ClientSession() as session:
        outcome = await PageFetcher(session, fast_config).fetch(f"{base}/data")
    assert not outcome.ok
    assert outcome.error_title == "Non-HTML Content"
    assert "application/json" in outcome.error_message
    assert outcome.status_code == 200


@pytest.mark.asyncio()
async def test_body_size_cap(serve, html_response, fast_config):
    base = await serve(_app(html_response))
    config = fast_config.model_copy(update={"max_content_size": 100})
    async with ClientSession() as session:
        outcome = await PageFetcher(session, config).fetch(f"{base}/huge")
    assert not outcome.ok
    assert outcome.error_message == "maxContentLength size of 100 exceeded"


@pytest.mark.asyncio()
async def test_redirects(serve, html_response, fast_config):
    base = await serve(_app(html_response))
    config = fast_config.model_copy(update={"max_redirects": 2})
    async with ClientSession() as session:
        fetcher = PageFetcher(session, config)
        followed = await fetcher.fetch(f"{base}/hop")
        looping = await fetcher.fetch(f"{base}/loop")
    assert followed.ok
    assert "Hello" in followed.html
    assert not looping.ok
    assert "redirects" in looping.error_message


@pytest.mark.asyncio()
async def test_connection_refused(unused_tcp_port_factory, fast_config):
    port = unused_tcp_port_factory()
    async with ClientSession() as session:
        outcome = await PageFetcher(session, fast_config).fetch(f"http://127.0.0.1:{port}/")
    assert not outcome.ok
    assert outcome.status_code == 0
    assert outcome.to_error_page().title == "Error Page"


@pytest.mark.asyncio()
async def test_probe_and_get_text(serve, html_response, fast_config, unused_tcp_port_factory):
    base = await serve(_app(html_response))
    async with ClientSession() as session:
        fetcher = PageFetcher(session, fast_config)
        assert await fetcher.probe(f"{base}/ok", timeout=2, max_redirects=3) == 200
        assert await fetcher.probe(f"{base}/nope", timeout=2, max_redirects=3) == 404
        dead = f"http://127.0.0.1:{unused_tcp_port_factory()}/"
        assert await fetcher.probe(dead, timeout=2, max_redirects=3) == 0
        assert "Hello" in await fetcher.get_text(f"{base}/ok", timeout=2)
        assert await fetcher.get_text(f"{base}/missing", timeout=2) is None


@pytest.mark.parametrize(
    "status,expected",
    [
        (404, "Not Found - The requested resource could not be found"),
        (503, "Service Unavailable - The server is currently unable to handle the request"),
        (418, "HTTP error 418"),
        (0, "Unknown error: No status code returned"),
        (None, "Unknown error: No status code returned"),
    ],
)
def test_describe_status(status, expected):
    assert describe_status(status) == expected


@pytest.mark.asyncio()
async def test_crawl_delay_follows_successful_fetches_only(serve, html_response, recorded_sleeps):
    base = await serve(_app(html_response))
    config = CrawlerConfig()
    async with ClientSession() as session:
        fetcher = PageFetcher(session, config)
        await fetcher.fetch(f"{base}/ok")
        await fetcher.fetch(f"{base}/boom")
        await fetcher.fetch(f"{base}/data")
    assert config.crawl_delay == 0.5
    assert recorded_sleeps.count(0.5) == 1


@pytest.mark.asyncio()
async def test_no_sleep_when_delay_disabled(serve, html_response, fast_config, recorded_sleeps):
    base = await serve(_app(html_response))
    async with ClientSession() as session:
        await PageFetcher(session, fast_config).fetch(f"{base}/ok")
    assert 0.5 not in recorded_sleeps
