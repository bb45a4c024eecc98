# seo_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта SeoScout.

Сериализация CrawlResult или отдельной PageContent в строку или файл.
"""
import json
from pathlib import Path
from typing import Union

from seo_scout.crawler.models import CrawlResult, PageContent

_Reportable = Union[CrawlResult, PageContent]


def result_to_json(result: _Reportable, *, pretty: bool = False) -> str:
    """Возвращает JSON-представление результата обхода."""
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def render_json(result: _Reportable, output_path: Union[Path, str]) -> Path:
    """
    Сохраняет результат в формате JSON по указанному пути.

    :param result: CrawlResult или PageContent
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from seo_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/report.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

    return output
