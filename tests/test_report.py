# File: tests/test_report.py
import json

import pytest

from seo_scout.crawler.models import CrawlResult, CrawlState, InternalLink, PageContent, SchemaBlock
from seo_scout.report import render_html, render_json, result_to_json


@pytest.fixture()
def result() -> CrawlResult:
    homepage = PageContent(
        url="https://example.com/",
        status_code=200,
        title="Главная <script>",
        internal_links=[InternalLink("https://example.com/a"), InternalLink("https://example.com/x", broken=True)],
        schema_blocks=[SchemaBlock(["LocalBusiness"], '{"@type": "LocalBusiness"}')],
        is_https=True,
    )
    failed = PageContent.error_page("https://example.com/b", "Not Found", 404, "gone")
    return CrawlResult(homepage, [failed], reached_page_budget=True, has_sitemap=True)


def test_result_to_json(result):
    data = json.loads(result_to_json(result))
    assert data["state"] == CrawlState.COMPLETED.value
    assert data["has_sitemap"] is True
    assert data["homepage"]["title"] == "Главная <script>"
    assert data["homepage"]["broken_link_count"] == 1
    assert data["other_pages"][0]["error"] == "gone"
    assert "duration" in data["stats"]


def test_pretty_json_keeps_unicode(result):
    text = result_to_json(result, pretty=True)
    assert "Главная" in text
    assert "\n  " in text


def test_render_json_creates_parents(tmp_path, result):
    path = render_json(result, tmp_path / "nested" / "report.json")
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))["homepage"]["url"] == "https://example.com/"


def test_render_html(tmp_path, result):
    path = render_html(result, tmp_path / "report.html")
    html = path.read_text(encoding="utf-8")
    assert "https://example.com/b" in html
    assert "LocalBusiness" in html
    assert "&lt;script&gt;" in html
    assert "<script>" not in html


def test_render_html_custom_template(tmp_path, result):
    (tmp_path / "tpl").mkdir()
    (tmp_path / "tpl" / "report.html.j2").write_text(
        "{% for page in pages %}{{ page.status_code }};{% endfor %}", encoding="utf-8"
    )
    path = render_html(result, tmp_path / "out.html", tmp_path / "tpl")
    assert path.read_text(encoding="utf-8") == "200;404;"
