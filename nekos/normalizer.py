# nekos/normalizer.py
# Turns raw fetch() arguments into a validated SelectionRequest.
# Resolution order: search > type > actions > mode. Type and action resolution
# are finished here, before the engine ever runs.

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple

from .catalog import IMAGE_CATEGORIES, VALID_ACTIONS, ContentType, kind_of, resolve_content_type
from .errors import ValidationError
from .intent import IntentGate

__all__ = ["SelectionMode", "SelectionRequest", "resolve_mode", "normalize_request"]


class SelectionMode(str, Enum):
    RANDOM = "random"
    DISTRIBUTED = "distributed"
    EACH = "each"


MODE_ALIASES: Dict[str, SelectionMode] = {
    "1": SelectionMode.RANDOM,
    "2": SelectionMode.DISTRIBUTED,
    "3": SelectionMode.EACH,
    "random": SelectionMode.RANDOM,
    "distributed": SelectionMode.DISTRIBUTED,
    "each": SelectionMode.EACH,
}


def resolve_mode(raw: Any) -> SelectionMode:
    """Unknown or missing modes fall back to RANDOM."""
    if isinstance(raw, SelectionMode):
        return raw
    if raw is None or isinstance(raw, bool):
        return SelectionMode.RANDOM
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, int):
        return MODE_ALIASES.get(str(int(raw)), SelectionMode.RANDOM)
    if isinstance(raw, str):
        return MODE_ALIASES.get(raw.strip().lower(), SelectionMode.RANDOM)
    return SelectionMode.RANDOM


@dataclass(frozen=True)
class SelectionRequest:
    amount: int
    actions: Tuple[str, ...]
    search: Tuple[str, ...]
    content_type: ContentType
    mode: SelectionMode
    allow_duplicates: bool = False


def _validate_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationError("Amount must be a finite number greater than or equal to 1")
    # ints are exact; only floats can be inf or nan
    if (isinstance(amount, float) and not math.isfinite(amount)) or amount < 1:
        raise ValidationError("Amount must be a finite number greater than or equal to 1")
    return int(amount)


def _normalize_actions(actions: Any, gate: IntentGate) -> List[str]:
    if actions is None:
        return list(gate.visible_categories())

    requested = list(actions) if isinstance(actions, (list, tuple, set, frozenset)) else [actions]
    invalid = [a for a in requested if a not in VALID_ACTIONS]
    if invalid:
        raise ValidationError(
            f"Invalid actions: {', '.join(map(str, invalid))}. Valid actions: {', '.join(VALID_ACTIONS)}"
        )
    for a in requested:
        gate.guard(a)
    # repeated names collapse onto their first position
    return list(dict.fromkeys(requested))


def _normalize_search(search: Any) -> List[str]:
    if search is None or search == "":
        return []
    terms = list(search) if isinstance(search, (list, tuple)) else [search]
    return [t.strip() for t in terms if isinstance(t, str) and t.strip()]


def normalize_request(
    gate: IntentGate,
    amount: Any = 1,
    actions: Any = None,
    search: Any = None,
    content_type: Any = None,
    mode: Any = None,
    allow_duplicates: bool = False,
) -> SelectionRequest:
    count = _validate_amount(amount)
    requested = _normalize_actions(actions, gate)
    terms = _normalize_search(search)
    ctype = resolve_content_type(content_type)
    smode = resolve_mode(mode)

    matching = [a for a in requested if ctype.admits(kind_of(a))]
    if not matching:
        raise ValidationError(
            f"No categories match content type filter ({ctype.label}). "
            f"Image categories: {', '.join(sorted(IMAGE_CATEGORIES))}"
        )

    return SelectionRequest(
        amount=count,
        actions=tuple(matching),
        search=tuple(terms),
        content_type=ctype,
        mode=smode,
        allow_duplicates=bool(allow_duplicates),
    )
