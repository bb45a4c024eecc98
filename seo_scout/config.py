"""
Модуль для загрузки и валидации конфигурации краулера SeoScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_USER_AGENT = "SEO-Best-Practices-Assessment-Tool/1.0"


class CrawlerConfig(BaseModel):
    """Конфигурация одного краулера (одной сессии обхода)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: int = Field(50, ge=1, description="Бюджет страниц на сайт, включая главную.")
    concurrency: int = Field(5, ge=1, description="Максимум одновременных загрузок в пакете.")
    links_per_page: int = Field(5, ge=0, description="Сколько новых ссылок брать с каждой страницы.")

    request_timeout: float = Field(45.0, gt=0, description="Таймаут загрузки страницы (секунд).")
    max_redirects: int = Field(10, ge=0, description="Максимум редиректов при загрузке страницы.")
    max_content_size: int = Field(10 * 1024 * 1024, gt=0, description="Максимальный размер тела ответа (байт).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    verify_ssl: bool = Field(False, description="Проверять TLS-сертификаты (по умолчанию нет).")
    crawl_delay: float = Field(0.5, ge=0, description="Пауза после каждой успешной загрузки (секунд).")

    link_sample_size: int = Field(5, ge=0, description="Сколько внутренних ссылок страницы проверять HEAD-запросом.")
    link_check_timeout: float = Field(5.0, gt=0, description="Таймаут HEAD-проверки ссылки (секунд).")
    link_check_redirects: int = Field(3, ge=0, description="Максимум редиректов при проверке ссылки.")
    link_check_delay: float = Field(0.1, ge=0, description="Пауза между проверками ссылок (секунд).")

    sitemap_timeout: float = Field(5.0, gt=0, description="Таймаут проверки sitemap.xml (секунд).")
    follow_sitemap: bool = Field(False, description="Добавлять в очередь URL из sitemap.xml.")
    max_child_sitemaps: int = Field(
        10, ge=0, description="Сколько вложенных sitemap (из sitemap index и robots.txt) загружать."
    )

    @model_validator(mode="after")
    def _check_budget(self) -> CrawlerConfig:
        if self.links_per_page > self.max_pages:
            raise ValueError("links_per_page не может превышать max_pages")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.
    Без пути использует configs/default.yaml, а если его нет, значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlerConfig(**data)


__all__ = ["CrawlerConfig", "load_config", "DEFAULT_USER_AGENT"]
