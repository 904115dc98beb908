# nekos/catalog.py
# Static category tables plus the in-memory record store.
# The dataset is loaded once per process; the only mutation after load is the
# one-time shrink performed when the intent gate locks (see nekos/intent.py).

from __future__ import annotations

import json, os, logging
from dataclasses import dataclass, fields as dc_fields
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Tuple

__all__ = [
    "VALID_ACTIONS", "IMAGE_CATEGORIES", "METADATA_FIELDS", "ALL_METADATA_FIELDS",
    "ContentKind", "ContentType", "kind_of", "resolve_content_type",
    "CatalogRecord", "Catalog", "DEFAULT_DATA_PATH",
]

ROOT = os.path.dirname(__file__)
DEFAULT_DATA_PATH = os.path.join(ROOT, "data", "catalog.json")
log = logging.getLogger("nekos.catalog")

# ------------------------------------------------------------
# Static lookup tables
# ------------------------------------------------------------

VALID_ACTIONS: Tuple[str, ...] = (
    "angry", "baka", "bite", "blush", "bored", "cry", "cuddle", "dance",
    "facepalm", "feed", "handhold", "handshake", "happy", "highfive", "hug",
    "husbando", "kick", "kiss", "kitsune", "laugh", "lurk", "neko", "nod",
    "nom", "nope", "pat", "peck", "poke", "pout", "punch", "run", "shoot",
    "shrug", "slap", "sleep", "smile", "smug", "stare", "think", "thumbsup",
    "tickle", "waifu", "wave", "wink", "yawn", "yeet",
)
_ACTION_SET = frozenset(VALID_ACTIONS)

# Everything not listed here is a GIF category
IMAGE_CATEGORIES = frozenset({"husbando", "kitsune", "neko", "waifu"})


class ContentKind(IntEnum):
    """Kind of a single record. The value doubles as the public `type` tag."""
    IMAGE = 1
    GIF = 2


class ContentType(IntEnum):
    """Content-type filter accepted by the intent gate and by requests."""
    IMAGE = 1
    GIF = 2
    BOTH = 3

    def admits(self, kind: ContentKind) -> bool:
        return self is ContentType.BOTH or int(self) == int(kind)

    @property
    def label(self) -> str:
        return {ContentType.IMAGE: "images", ContentType.GIF: "GIFs"}.get(self, "both")


METADATA_FIELDS: Dict[ContentKind, Tuple[str, ...]] = {
    ContentKind.IMAGE: ("artist_href", "artist_name", "source_url"),
    ContentKind.GIF: ("anime_name",),
}
ALL_METADATA_FIELDS: Tuple[str, ...] = METADATA_FIELDS[ContentKind.IMAGE] + METADATA_FIELDS[ContentKind.GIF]

# Field matched by search terms, per kind
SEARCH_FIELD = {ContentKind.IMAGE: "artist_name", ContentKind.GIF: "anime_name"}

TYPE_ALIASES: Dict[str, ContentType] = {
    "1": ContentType.IMAGE,
    "2": ContentType.GIF,
    "3": ContentType.BOTH,
    "image": ContentType.IMAGE,
    "images": ContentType.IMAGE,
    "gif": ContentType.GIF,
    "gifs": ContentType.GIF,
    "animated": ContentType.GIF,
    "both": ContentType.BOTH,
}


def kind_of(category: str) -> ContentKind:
    return ContentKind.IMAGE if category in IMAGE_CATEGORIES else ContentKind.GIF


def resolve_content_type(raw: Any) -> ContentType:
    """Map 1/2/3, their string forms or a name alias to a ContentType. Unknown values mean BOTH."""
    if isinstance(raw, ContentType):
        return raw
    # bool is an int subclass; True must not read as IMAGE
    if raw is None or isinstance(raw, bool):
        return ContentType.BOTH
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, int):
        return TYPE_ALIASES.get(str(int(raw)), ContentType.BOTH)
    if isinstance(raw, str):
        return TYPE_ALIASES.get(raw.strip().lower(), ContentType.BOTH)
    return ContentType.BOTH


# ------------------------------------------------------------
# Records
# ------------------------------------------------------------

@dataclass(frozen=True)
class CatalogRecord:
    """One raw dataset entry. `url` is the path suffix, e.g. /hug/<uuid>.gif."""
    url: str
    artist_href: Optional[str] = None
    artist_name: Optional[str] = None
    source_url: Optional[str] = None
    anime_name: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], kind: ContentKind) -> "CatalogRecord":
        # Only keep the metadata valid for the category's kind
        meta = {k: raw[k] for k in METADATA_FIELDS[kind] if isinstance(raw.get(k), str)}
        return cls(url=raw["url"], **meta)

    def present_fields(self) -> Tuple[str, ...]:
        return tuple(f.name for f in dc_fields(self) if f.name != "url" and getattr(self, f.name) is not None)


# ------------------------------------------------------------
# Catalog
# ------------------------------------------------------------

def _load_json(path: str, default: Any) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        log.warning(f"Failed to load {path}: {e}")
        return default


class Catalog:
    """
    Category name -> ordered tuple of CatalogRecord.

    Categories are kept in canonical VALID_ACTIONS order. A category that is
    missing from the dataset simply has no records.
    """

    def __init__(self, records: Optional[Dict[str, Iterable[CatalogRecord]]] = None):
        records = records or {}
        self._records: Dict[str, Tuple[CatalogRecord, ...]] = {
            c: tuple(records[c]) for c in VALID_ACTIONS if c in records
        }

    @classmethod
    def from_mapping(cls, data: Any) -> "Catalog":
        """Build a catalog from the parsed dataset (category -> list of raw dicts)."""
        if not isinstance(data, dict):
            log.critical("Catalog root must be an object of category -> records")
            raise RuntimeError("Invalid catalog format")

        records: Dict[str, List[CatalogRecord]] = {}
        for category, items in data.items():
            if category not in _ACTION_SET:
                log.warning(f"Unknown category '{category}' in dataset - skipped")
                continue
            if not isinstance(items, list):
                log.warning(f"Category '{category}' is not a list - skipped")
                continue
            kind = kind_of(category)
            kept = []
            for i, raw in enumerate(items):
                if not isinstance(raw, dict) or not isinstance(raw.get("url"), str) or not raw["url"]:
                    log.warning(f"Record {i} in '{category}' has no url - skipped")
                    continue
                kept.append(CatalogRecord.from_raw(raw, kind))
            records[category] = kept

        catalog = cls(records)
        log.info(f"Catalog loaded: {catalog.total()} records across {len(catalog)} categories")
        return catalog

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Catalog":
        return cls.from_mapping(_load_json(path or DEFAULT_DATA_PATH, {}))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, category: object) -> bool:
        return category in self._records

    def categories(self) -> List[str]:
        return list(self._records)

    def records(self, category: str) -> Tuple[CatalogRecord, ...]:
        return self._records.get(category, ())

    def size(self, category: str) -> int:
        return len(self._records.get(category, ()))

    def total(self) -> int:
        return sum(len(v) for v in self._records.values())

    def retain(self, allowed: Iterable[str]) -> None:
        """Drop every category outside `allowed`. Irreversible."""
        keep = set(allowed)
        dropped = [c for c in self._records if c not in keep]
        self._records = {c: v for c, v in self._records.items() if c in keep}
        if dropped:
            log.info(f"Catalog pruned: dropped {len(dropped)} categories, {len(self._records)} kept")
