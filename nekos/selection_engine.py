# nekos/selection_engine.py
# Pure selection logic: no I/O, no projection. Takes a validated
# SelectionRequest and returns ordered (record, category) pairs.
# Search filtering always runs before any mode-specific sampling.

from __future__ import annotations

import json, logging, random
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from .catalog import SEARCH_FIELD, Catalog, CatalogRecord, kind_of
from .normalizer import SelectionMode, SelectionRequest
from .projector import build_url

__all__ = [
    "MAX_RETRY_ATTEMPTS", "BoundedUniqueSampler", "build_pools", "sample",
    "select_random", "select_distributed", "select_each", "selection_engine",
]

log = logging.getLogger("nekos.engine")

Pick = Tuple[CatalogRecord, str]
Pools = Dict[str, List[CatalogRecord]]

MAX_RETRY_ATTEMPTS = 50

# ------------------------------------------------------------
# Pools
# ------------------------------------------------------------

def _matches_search(record: CatalogRecord, category: str, terms: Sequence[str]) -> bool:
    if not terms:
        return True
    value = getattr(record, SEARCH_FIELD[kind_of(category)])
    if not value:
        return False
    v = value.lower()
    return any(t.lower() in v for t in terms)


def build_pools(catalog: Catalog, categories: Sequence[str], terms: Sequence[str]) -> Pools:
    """Search-filtered pool per category, in request order. Empty pools are dropped."""
    pools: Pools = {}
    for category in categories:
        kept = [r for r in catalog.records(category) if _matches_search(r, category, terms)]
        if kept:
            pools[category] = kept
    return pools

# ------------------------------------------------------------
# Sampling primitives
# ------------------------------------------------------------

def sample(pool: Sequence[CatalogRecord], k: int, allow_duplicates: bool, rng: random.Random) -> List[CatalogRecord]:
    """
    k items from one pool:
      - no duplicates, k >= len(pool): the whole pool, shuffled
      - duplicates allowed: k independent uniform draws
      - otherwise: k distinct items drawn without replacement
    """
    n = len(pool)
    if n == 0 or k <= 0:
        return []
    if not allow_duplicates and k >= n:
        out = list(pool)
        rng.shuffle(out)
        return out
    if allow_duplicates:
        return [pool[rng.randrange(n)] for _ in range(k)]
    return rng.sample(list(pool), k)


class BoundedUniqueSampler:
    """
    Draws items one at a time while keeping results unique by key (full URL).

    Each draw retries up to `max_attempts` times. When a draw exhausts its
    attempts, `draw` returns None and the caller stops: the result is
    truncated rather than failing.
    """

    def __init__(self, rng: random.Random, max_attempts: int = MAX_RETRY_ATTEMPTS,
                 key: Callable[[CatalogRecord], str] = lambda r: build_url(r.url)):
        self.rng = rng
        self.max_attempts = max_attempts
        self.key = key
        self.used: Set[str] = set()

    def draw(self, pool: Sequence[CatalogRecord]) -> Optional[CatalogRecord]:
        if not pool:
            return None
        for _ in range(self.max_attempts):
            candidate = pool[self.rng.randrange(len(pool))]
            k = self.key(candidate)
            if k not in self.used:
                self.used.add(k)
                return candidate
        return None

# ------------------------------------------------------------
# Modes
# ------------------------------------------------------------

def select_random(pools: Pools, amount: int, allow_duplicates: bool, rng: random.Random) -> List[Pick]:
    names = list(pools)
    if not names:
        return []
    if len(names) == 1:
        only = names[0]
        return [(r, only) for r in sample(pools[only], amount, allow_duplicates, rng)]

    # Categories are picked uniformly, not weighted by pool size
    out: List[Pick] = []
    sampler = None if allow_duplicates else BoundedUniqueSampler(rng)
    for _ in range(amount):
        category = names[rng.randrange(len(names))]
        pool = pools[category]
        if sampler is None:
            out.append((pool[rng.randrange(len(pool))], category))
            continue
        picked = sampler.draw(pool)
        if picked is None:
            break
        out.append((picked, category))
    return out


def select_distributed(pools: Pools, amount: int, allow_duplicates: bool, rng: random.Random) -> List[Pick]:
    names = list(pools)
    if not names:
        return []
    base, remainder = divmod(amount, len(names))
    out: List[Pick] = []
    for i, category in enumerate(names):
        share = base + 1 if i < remainder else base
        out.extend((r, category) for r in sample(pools[category], share, allow_duplicates, rng))
    return out


def select_each(pools: Pools, amount: int, allow_duplicates: bool, rng: random.Random) -> List[Pick]:
    out: List[Pick] = []
    for category, pool in pools.items():
        out.extend((r, category) for r in sample(pool, amount, allow_duplicates, rng))
    return out


MODE_HANDLERS = {
    SelectionMode.RANDOM: select_random,
    SelectionMode.DISTRIBUTED: select_distributed,
    SelectionMode.EACH: select_each,
}


def selection_engine(request: SelectionRequest, catalog: Catalog, rng: Optional[random.Random] = None) -> List[Pick]:
    rng = rng or random.Random()
    pools = build_pools(catalog, request.actions, request.search)
    picks = MODE_HANDLERS[request.mode](pools, request.amount, request.allow_duplicates, rng)

    truncated = (
        request.mode is SelectionMode.RANDOM
        and not request.allow_duplicates
        and len(pools) > 1
        and len(picks) < request.amount
    )
    log_record = {
        "mode": request.mode.value,
        "amount": request.amount,
        "content_type": request.content_type.label,
        "categories": len(request.actions),
        "search": list(request.search),
        "pool_sizes": {c: len(p) for c, p in pools.items()},
        "allow_duplicates": request.allow_duplicates,
        "returned": len(picks),
        "truncated": truncated,
    }
    log.info("SELECTION_EVIDENCE: %s", json.dumps(log_record, ensure_ascii=False))
    return picks
