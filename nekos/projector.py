# nekos/projector.py
# Shapes a (record, category) pair into the public response item.

from __future__ import annotations

from typing import Any, Dict, List, Tuple, TypedDict

from .catalog import CatalogRecord, kind_of
from .intent import IntentGate

__all__ = ["BASE_URL", "ResponseItem", "build_url", "project", "project_all"]

BASE_URL = "https://nekos.best/api/v2"


class ResponseItem(TypedDict, total=False):
    url: str
    action: str
    type: int
    artist_href: str
    artist_name: str
    source_url: str
    anime_name: str


def build_url(suffix: str) -> str:
    return f"{BASE_URL}{suffix}"


def project(record: CatalogRecord, category: str, gate: IntentGate) -> ResponseItem:
    kind = kind_of(category)
    item: Dict[str, Any] = {
        "url": build_url(record.url),
        "action": category,
        "type": int(kind),
    }
    allowed = gate.projected_fields(kind)
    # absent fields are omitted, never emitted as null
    for name in record.present_fields():
        if name in allowed:
            item[name] = getattr(record, name)
    return item  # type: ignore[return-value]


def project_all(picks: List[Tuple[CatalogRecord, str]], gate: IntentGate) -> List[ResponseItem]:
    return [project(rec, cat, gate) for rec, cat in picks]
