"""seo_scout.report.html_report: генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from seo_scout.crawler.models import CrawlResult

TEMPLATE_NAME = "report.html.j2"
DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


def render_html(
    result: CrawlResult,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Рендерит HTML-отчёт по CrawlResult и сохраняет его по указанному пути.

    Args:
        result: результат обхода сайта.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с шаблоном ``report.html.j2``; по умолчанию
            встроенный шаблон пакета.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "homepage": result.homepage,
        "pages": result.pages,
        "stats": result.stats,
        "has_sitemap": result.has_sitemap,
        "reached_page_budget": result.reached_page_budget,
        "state": result.state.value,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
