# nekos/facade.py
"""
Query facade: normalizer -> selection engine -> projector.

`NekoClient` owns one catalog, its intent gate and a random source. The
module-level functions delegate to a process-wide default client loaded from
NEKOS_DATA_PATH on first use.

Usage:
```python
from nekos import configure_intent, fetch

configure_intent(metadata=["anime_name"], content_type="gif")
hug = fetch(actions="hug")                      # single item
mixed = fetch(amount=6, actions=["hug", "pat"], mode="each")
```
"""

from __future__ import annotations

import logging
import random
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from .catalog import Catalog
from .intent import IntentConfig, IntentGate
from .normalizer import normalize_request
from .projector import ResponseItem, project, project_all
from .selection_engine import selection_engine
from .settings import get_data_path

__all__ = [
    "NekoClient", "get_client",
    "configure_intent", "fetch", "list_actions", "count", "load_all",
]

log = logging.getLogger("nekos.facade")


class NekoClient:

    def __init__(self, catalog: Catalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.gate = IntentGate(catalog)
        self.rng = rng or random.Random()

    def configure_intent(self, metadata: Any = None, content_type: Any = None) -> IntentConfig:
        """Lock the intent. Raises ConfigurationError on any second call."""
        return self.gate.configure(metadata=metadata, content_type=content_type)

    def fetch(
        self,
        amount: Any = 1,
        actions: Any = None,
        search: Any = None,
        content_type: Any = None,
        mode: Any = None,
        allow_duplicates: bool = False,
    ) -> Union[ResponseItem, List[ResponseItem]]:
        """
        Returns a single item when amount == 1 and exactly one item was
        selected; otherwise the list, which may be empty or shorter than
        `amount` (no search match, small pools, unique-draw exhaustion).
        """
        request = normalize_request(
            self.gate, amount=amount, actions=actions, search=search,
            content_type=content_type, mode=mode, allow_duplicates=allow_duplicates,
        )
        items = project_all(selection_engine(request, self.catalog, self.rng), self.gate)
        if request.amount == 1 and len(items) == 1:
            return items[0]
        return items

    def list_actions(self) -> List[str]:
        return list(self.gate.visible_categories())

    def count(self) -> Dict[str, Any]:
        counts = {c: self.catalog.size(c) for c in self.gate.visible_categories() if c in self.catalog}
        # sorted() is stable: ties keep canonical category order
        ordered = dict(sorted(counts.items(), key=lambda kv: kv[1], reverse=True))
        return {"total": sum(ordered.values()), "categories": ordered}

    def load_all(self) -> Dict[str, List[ResponseItem]]:
        return {
            c: [project(r, c, self.gate) for r in self.catalog.records(c)]
            for c in self.gate.visible_categories() if c in self.catalog
        }


# ============================================================
# Process-wide default client
# ============================================================

@lru_cache(maxsize=1)
def get_client() -> NekoClient:
    """Singleton client over the configured dataset (lru_cache)."""
    path = get_data_path()
    log.info("Loading catalog from %s", path)
    return NekoClient(Catalog.load(path))


def configure_intent(metadata: Any = None, content_type: Any = None) -> IntentConfig:
    return get_client().configure_intent(metadata=metadata, content_type=content_type)


def fetch(amount: Any = 1, actions: Any = None, search: Any = None, content_type: Any = None,
          mode: Any = None, allow_duplicates: bool = False) -> Union[ResponseItem, List[ResponseItem]]:
    return get_client().fetch(amount=amount, actions=actions, search=search,
                              content_type=content_type, mode=mode, allow_duplicates=allow_duplicates)


def list_actions() -> List[str]:
    return get_client().list_actions()


def count() -> Dict[str, Any]:
    return get_client().count()


def load_all() -> Dict[str, List[ResponseItem]]:
    return get_client().load_all()
