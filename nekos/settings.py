# nekos/settings.py
"""
Environment-driven configuration.

Environment Variables:
- NEKOS_DATA_PATH: dataset file (default: bundled nekos/data/catalog.json)
- NEKOS_INTENT_TYPE: intent content type applied when the API starts
- NEKOS_INTENT_METADATA: "0", "1" or a comma-separated field list
- ALLOWED_ORIGINS: CORS origins, comma-separated (default "*")
- RATE_LIMIT_PER_MIN: per-client request limit (default 60)

Feature Flags (all OFF by default):
- INTENT_ENDPOINT_ENABLED: expose POST /api/intent
"""

from __future__ import annotations

import os
import logging
from typing import Any, List, Optional, Tuple

from .catalog import DEFAULT_DATA_PATH

log = logging.getLogger("nekos.settings")


def _flag_on(name: str) -> bool:
    """Check if a feature flag is enabled. Default: off."""
    val = os.getenv(name, "off").lower()
    return val in ("on", "true", "1", "yes")


def is_intent_endpoint_enabled() -> bool:
    return _flag_on("INTENT_ENDPOINT_ENABLED")


def get_data_path() -> str:
    return os.getenv("NEKOS_DATA_PATH", "").strip() or DEFAULT_DATA_PATH


def get_allowed_origins() -> List[str]:
    raw = os.getenv("ALLOWED_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]


def get_rate_limit_per_min() -> int:
    raw = os.getenv("RATE_LIMIT_PER_MIN", "60")
    try:
        return max(1, int(raw))
    except ValueError:
        log.warning("RATE_LIMIT_PER_MIN=%r is not an integer - using 60", raw)
        return 60


def _parse_metadata(raw: str) -> Any:
    if raw in ("0", "false", "none"):
        return 0
    if raw in ("1", "true", "all"):
        return 1
    return [f.strip() for f in raw.split(",") if f.strip()]


def get_startup_intent() -> Optional[Tuple[Any, Any]]:
    """
    (metadata, content_type) to lock at API startup, or None when neither
    NEKOS_INTENT_TYPE nor NEKOS_INTENT_METADATA is set.
    """
    ctype = os.getenv("NEKOS_INTENT_TYPE", "").strip()
    meta = os.getenv("NEKOS_INTENT_METADATA", "").strip().lower()
    if not ctype and not meta:
        return None
    return (_parse_metadata(meta) if meta else None), (ctype or None)
