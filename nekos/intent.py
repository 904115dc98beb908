# nekos/intent.py
"""
Intent gate: a one-time, irreversible restriction of the visible categories
and of the metadata fields emitted in responses.

State machine:
    Unconfigured --configure()--> Locked     (at most once per gate)

The lock transition and the catalog shrink run under a single mutex, so of
several concurrent configure() calls exactly one wins and the rest see
ConfigurationError.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional, Tuple

from .catalog import (
    ALL_METADATA_FIELDS, METADATA_FIELDS, VALID_ACTIONS,
    Catalog, ContentKind, ContentType, kind_of, resolve_content_type,
)
from .errors import ConfigurationError, IntentViolationError

__all__ = ["MetadataPolicy", "IntentConfig", "IntentGate"]

log = logging.getLogger("nekos.intent")


@dataclass(frozen=True)
class MetadataPolicy:
    """ALL, NONE, or an explicit field set (FIELDS)."""
    mode: str
    fields: FrozenSet[str] = frozenset()

    ALL_MODE = "all"
    NONE_MODE = "none"
    FIELDS_MODE = "fields"

    @classmethod
    def all(cls) -> "MetadataPolicy":
        return cls(cls.ALL_MODE)

    @classmethod
    def none(cls) -> "MetadataPolicy":
        return cls(cls.NONE_MODE)

    @classmethod
    def of(cls, fields) -> "MetadataPolicy":
        return cls(cls.FIELDS_MODE, frozenset(fields))

    def fields_for(self, kind: ContentKind) -> FrozenSet[str]:
        kind_fields = frozenset(METADATA_FIELDS[kind])
        if self.mode == self.ALL_MODE:
            return kind_fields
        if self.mode == self.NONE_MODE:
            return frozenset()
        return self.fields & kind_fields


@dataclass(frozen=True)
class IntentConfig:
    content_type: ContentType
    allowed_categories: Tuple[str, ...]
    metadata: MetadataPolicy


def _is_number(value: Any, n: int) -> bool:
    # 1.0 counts as 1; True and False are handled separately
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == n


def _normalize_metadata(metadata: Any, content_type: ContentType) -> MetadataPolicy:
    if metadata is None or metadata is True or _is_number(metadata, 1):
        policy = MetadataPolicy.all()
    elif metadata is False or _is_number(metadata, 0):
        return MetadataPolicy.none()
    elif isinstance(metadata, (list, tuple, set, frozenset)):
        if any(not isinstance(f, str) for f in metadata):
            raise ConfigurationError("metadata field names must be strings")
        requested = [f.strip() for f in metadata if f.strip()]
        invalid = [f for f in requested if f not in ALL_METADATA_FIELDS]
        if invalid:
            raise ConfigurationError(
                f"Invalid metadata fields: {', '.join(invalid)}. "
                f"Valid fields: {', '.join(ALL_METADATA_FIELDS)}"
            )
        # Fields belonging to the excluded kind are dropped, not rejected
        keep = {f for kind in ContentKind if content_type.admits(kind) for f in METADATA_FIELDS[kind]}
        return MetadataPolicy.of(f for f in requested if f in keep)
    else:
        raise ConfigurationError(
            "metadata must be 0/False (none), 1/True (all), or a list of field names"
        )

    # ALL narrowed to the single kind the gate lets through
    if content_type is ContentType.IMAGE:
        return MetadataPolicy.of(METADATA_FIELDS[ContentKind.IMAGE])
    if content_type is ContentType.GIF:
        return MetadataPolicy.of(METADATA_FIELDS[ContentKind.GIF])
    return policy


class IntentGate:
    """Holds the lock state for one catalog. Inject it; do not share it implicitly."""

    def __init__(self, catalog: Catalog):
        self._catalog = catalog
        self._config: Optional[IntentConfig] = None
        self._mutex = threading.Lock()

    @property
    def is_locked(self) -> bool:
        return self._config is not None

    @property
    def config(self) -> Optional[IntentConfig]:
        return self._config

    def configure(self, metadata: Any = None, content_type: Any = None) -> IntentConfig:
        with self._mutex:
            if self._config is not None:
                raise ConfigurationError(
                    "Intent already configured. configure_intent() can only be called once per process."
                )
            ctype = resolve_content_type(content_type)
            policy = _normalize_metadata(metadata, ctype)
            allowed = tuple(c for c in VALID_ACTIONS if ctype.admits(kind_of(c)))
            config = IntentConfig(content_type=ctype, allowed_categories=allowed, metadata=policy)

            self._catalog.retain(allowed)
            self._config = config

        log.info("Intent locked: type=%s categories=%d metadata=%s%s",
                 ctype.label, len(allowed), policy.mode,
                 f" {sorted(policy.fields)}" if policy.mode == MetadataPolicy.FIELDS_MODE else "")
        return config

    def visible_categories(self) -> Tuple[str, ...]:
        if self._config is None:
            return VALID_ACTIONS
        return self._config.allowed_categories

    def guard(self, category: str) -> None:
        cfg = self._config
        if cfg is None or category in cfg.allowed_categories:
            return
        kind = "image" if kind_of(category) is ContentKind.IMAGE else "gif"
        raise IntentViolationError(
            f'Action "{category}" (type: {kind}) was not specified in intent '
            f"(type: {cfg.content_type.label}). Intent only allows: {', '.join(cfg.allowed_categories)}"
        )

    def projected_fields(self, kind: ContentKind) -> FrozenSet[str]:
        if self._config is None:
            return frozenset(METADATA_FIELDS[kind])
        return self._config.metadata.fields_for(kind)
