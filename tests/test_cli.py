# File: tests/test_cli.py
"""Тесты для CLI (`seo_scout/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `crawl`, `page`, `config`, `--version`, а также обработку ошибок.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import seo_scout.cli as cli_module
from seo_scout.cli import cli
from seo_scout.crawler.models import CrawlResult, PageContent


@pytest.fixture()
def dummy_result() -> CrawlResult:
    homepage = PageContent(url="https://example.com/", status_code=200, title="Home")
    return CrawlResult(homepage, [PageContent(url="https://example.com/a", status_code=200)])


@pytest.fixture(autouse=True)
def patch_engine(monkeypatch, dummy_result):
    """Патчим start_crawl и start_page_audit, чтобы не ходить в сеть."""
    calls = []

    async def fake_crawl(cfg, url, budget=None):
        calls.append((url, budget))
        return dummy_result

    async def fake_page(cfg, url):
        calls.append((url, None))
        if "broken" in url:
            return PageContent.error_page(url, "Error Page", 0, "boom")
        return PageContent(url=url, status_code=200, title="Page")

    monkeypatch.setattr(cli_module, "start_crawl", fake_crawl)
    monkeypatch.setattr(cli_module, "start_page_audit", fake_page)
    return calls


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SeoScout" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "custom.yaml"
    cfg_file.write_text("max_pages: 12\nuser_agent: Agent/1.0\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["max_pages"] == 12
    assert data["user_agent"] == "Agent/1.0"


def test_invalid_config_exits(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("max_pages: -1\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_crawl_stdout(patch_engine):
    result = CliRunner().invoke(cli, ["crawl", "example.com", "--budget", "3"])
    assert result.exit_code == 0
    # the JSON document is the last line; progress goes to stderr
    data = json.loads(result.output.strip().splitlines()[-1])
    assert data["homepage"]["title"] == "Home"
    assert [p["url"] for p in data["other_pages"]] == ["https://example.com/a"]
    assert patch_engine == [("example.com", 3)]


def test_crawl_rejects_zero_budget():
    result = CliRunner().invoke(cli, ["crawl", "example.com", "--budget", "0"])
    assert result.exit_code == 2


def test_crawl_writes_reports(tmp_path, monkeypatch):
    written = {}
    monkeypatch.setattr(cli_module, "render_json", lambda data, path: written.setdefault("json", path))
    monkeypatch.setattr(
        cli_module, "render_html", lambda data, path, tpl=None: written.setdefault("html", path)
    )

    result = CliRunner().invoke(
        cli,
        ["crawl", "example.com", "--json", str(tmp_path / "r.json"), "--html", str(tmp_path / "r.html")],
    )
    assert result.exit_code == 0
    assert "JSON report:" in result.output
    assert "HTML report:" in result.output
    assert written["json"] == tmp_path / "r.json"
    assert written["html"] == tmp_path / "r.html"


def test_crawl_timeout(monkeypatch):
    async def slow_crawl(cfg, url, budget=None):
        await asyncio.sleep(5)

    monkeypatch.setattr(cli_module, "start_crawl", slow_crawl)
    result = CliRunner().invoke(cli, ["crawl", "example.com", "--crawl-timeout", "0.05"])
    assert result.exit_code == 1
    assert "Обход не завершён" in result.output


def test_crawl_failure_exits(monkeypatch):
    async def broken_crawl(cfg, url, budget=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_module, "start_crawl", broken_crawl)
    result = CliRunner().invoke(cli, ["crawl", "example.com"])
    assert result.exit_code == 1
    assert "Ошибка при обходе: boom" in result.output


def test_page_command():
    result = CliRunner().invoke(cli, ["page", "https://example.com/x", "--pretty"])
    assert result.exit_code == 0
    assert '"title": "Page"' in result.output


def test_page_error_exit_code():
    result = CliRunner().invoke(cli, ["page", "https://broken.example/"])
    assert result.exit_code == 2
    assert "boom" in result.output
