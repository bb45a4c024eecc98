"""
SeoScout package initializer.
Defines package version and exposes the crawler API.
"""
__version__ = "0.1.0"

from seo_scout.config import CrawlerConfig, load_config
from seo_scout.crawler.crawler import SiteCrawler
from seo_scout.crawler.models import CrawlResult, CrawlState, PageContent
from seo_scout.crawler.url import normalize_url
from seo_scout.engine import Engine
from seo_scout.errors import NormalizationError, SeoScoutError

__all__ = [
    "__version__",
    "CrawlerConfig",
    "CrawlResult",
    "CrawlState",
    "Engine",
    "NormalizationError",
    "PageContent",
    "SeoScoutError",
    "SiteCrawler",
    "load_config",
    "normalize_url",
]
