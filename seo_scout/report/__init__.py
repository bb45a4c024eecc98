"""seo_scout.report: JSON- и HTML-отчёты по результату обхода."""

from __future__ import annotations

from seo_scout.report.html_report import render_html
from seo_scout.report.json_report import render_json, result_to_json

__all__ = ["render_json", "render_html", "result_to_json"]
