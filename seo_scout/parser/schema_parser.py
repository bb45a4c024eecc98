"""Structured-data (schema.org) extraction: JSON-LD, microdata and RDFa hints."""
from __future__ import annotations

import json
from typing import Any, Iterable, List, Optional

from bs4 import BeautifulSoup

from seo_scout.crawler.models import SchemaBlock
from seo_scout.errors import ParseError
from seo_scout.logger import get_logger

__all__ = ("parse_json_ld", "decode_json_ld", "declared_types", "extract_schema")

log = get_logger("parser.schema")

_JSON_LD = "application/ld+json"


def decode_json_ld(raw: str) -> Any:
    """Decode one JSON-LD block, raising :class:`ParseError` on malformed JSON."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ParseError(f"Malformed JSON-LD: {exc}") from exc


def parse_json_ld(raw: str) -> Optional[Any]:
    """Like :func:`decode_json_ld` but returns ``None`` for a malformed block.

    A bad block is logged and skipped; it never fails the page.
    """
    try:
        return decode_json_ld(raw)
    except ParseError as exc:
        log.warning("Skipping JSON-LD block: %s", exc)
        return None


def _as_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def declared_types(data: Any) -> List[str]:
    """``@type`` values of a decoded JSON-LD document (top level, else ``@graph``)."""
    if isinstance(data, list):
        types: List[str] = []
        for item in data:
            types.extend(declared_types(item))
        return types
    if not isinstance(data, dict):
        return []
    if data.get("@type"):
        return _as_list(data["@type"])
    types = []
    graph = data.get("@graph")
    if isinstance(graph, list):
        for item in graph:
            if isinstance(item, dict):
                types.extend(_as_list(item.get("@type")))
    return types


def _dedupe(types: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(t.strip() for t in types if t and t.strip()))


def _last_segment(value: str) -> str:
    return value.rstrip("/").rsplit("/", 1)[-1] or value


def _microdata_types(soup: BeautifulSoup) -> List[str]:
    types = []
    for el in soup.find_all(attrs={"itemscope": True}):
        itemtype = el.get("itemtype")
        if isinstance(itemtype, str) and itemtype.strip():
            # itemtype may hold several space separated URLs
            types.extend(_last_segment(t) for t in itemtype.split())
    return _dedupe(types)


def _rdfa_blocks(soup: BeautifulSoup) -> List[SchemaBlock]:
    blocks = []
    for el in soup.select("[property], [typeof]"):
        type_value = el.get("typeof")
        prop = el.get("property")
        types = [type_value] if isinstance(type_value, str) and type_value else []
        if isinstance(prop, str) and "schema.org" in prop:
            types.append(_last_segment(prop))
        types = _dedupe(types)
        if types:
            content = " ".join(el.get_text().split())
            blocks.append(SchemaBlock(types, json.dumps({"@type": types[0], "content": content})))
    return blocks


def extract_schema(soup: BeautifulSoup) -> List[SchemaBlock]:
    """Collect schema blocks from an unmodified document tree."""
    blocks: List[SchemaBlock] = []
    json_ld_types = 0
    for script in soup.find_all("script"):
        if (script.get("type") or "").strip().lower() != _JSON_LD:
            continue
        raw = script.string if script.string is not None else script.get_text()
        if not raw or not raw.strip():
            continue
        data = parse_json_ld(raw)
        if data is None:
            continue
        types = _dedupe(declared_types(data))
        json_ld_types += len(types)
        blocks.append(SchemaBlock(types, raw.strip()))

    if not json_ld_types:
        microdata = _microdata_types(soup)
        if microdata:
            blocks.append(SchemaBlock(microdata, json.dumps({"@type": microdata})))

    blocks.extend(_rdfa_blocks(soup))
    return blocks
