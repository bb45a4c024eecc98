# File: seo_scout/engine.py
"""seo_scout.engine: слой оркестрации для запуска обхода из CLI и тестов."""

from __future__ import annotations

import asyncio
from typing import Optional

from seo_scout.config import CrawlerConfig, load_config
from seo_scout.crawler.crawler import SiteCrawler
from seo_scout.crawler.models import CrawlResult, PageContent
from seo_scout.logger import logger

__all__ = ["Engine", "start_crawl", "start_page_audit"]


async def start_crawl(cfg: CrawlerConfig, url: str, budget: Optional[int] = None) -> CrawlResult:
    """Запускает полный обход сайта в отдельном краулере и возвращает CrawlResult."""
    async with SiteCrawler(cfg) as crawler:
        return await crawler.crawl_site(url, budget)


async def start_page_audit(cfg: CrawlerConfig, url: str) -> PageContent:
    """Загружает и разбирает одну страницу (быстрый аудит)."""
    async with SiteCrawler(cfg) as crawler:
        return await crawler.crawl_page(url)


class Engine:
    """Фасад для синхронного кода: загрузка конфига и запуск обхода."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlerConfig:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(self, config: Optional[CrawlerConfig] = None) -> None:
        self.config = config or CrawlerConfig()

    def crawl_site(
        self, url: str, budget: Optional[int] = None, *, timeout: Optional[float] = None
    ) -> CrawlResult:
        """Запускает обход с необязательным общим таймаутом и возвращает результат."""
        logger.info("Starting crawl of %s", url)
        try:
            return asyncio.run(asyncio.wait_for(start_crawl(self.config, url, budget), timeout=timeout))
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", timeout)
            raise

    def crawl_page(self, url: str, *, timeout: Optional[float] = None) -> PageContent:
        """Аудит одной страницы."""
        return asyncio.run(asyncio.wait_for(start_page_audit(self.config, url), timeout=timeout))
