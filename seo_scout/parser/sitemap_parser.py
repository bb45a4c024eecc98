"""seo_scout.parser.sitemap_parser: парсинг sitemap.xml и извлечение URL."""

from __future__ import annotations

from typing import List

from lxml import etree


def parse_sitemap(xml_content: str) -> List[str]:
    """Разбирает XML sitemap и возвращает список URL из тегов <loc>.

    Работает и для обычного sitemap, и для sitemap index (там <loc> указывают
    на вложенные sitemap). Битый XML разбирается в режиме recover; пустой или
    нечитаемый документ даёт пустой список.

    Пример:
    ```python
    from seo_scout.parser.sitemap_parser import parse_sitemap

    urls = parse_sitemap(xml_text)
    ```
    """
    if not xml_content or not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    root = etree.fromstring(xml_content.encode("utf-8"), parser=parser)
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]


def is_sitemap_index(xml_content: str) -> bool:
    """True, если документ является <sitemapindex>, а не <urlset>."""
    return "<sitemapindex" in xml_content[:2048].lower()


def parse_robots_sitemaps(robots_txt: str) -> List[str]:
    """URL из строк ``Sitemap:`` файла robots.txt, в порядке появления.

    Директива регистронезависима и может стоять в любой группе User-agent.
    """
    urls: List[str] = []
    for line in robots_txt.splitlines():
        line = line.split("#", 1)[0].strip()
        if line[:8].lower() != "sitemap:":
            continue
        url = line[8:].strip()
        if url.lower().startswith(("http://", "https://")) and url not in urls:
            urls.append(url)
    return urls
