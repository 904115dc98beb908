# nekos/__init__.py
"""
Local nekos selection engine.

Serves randomized, filtered selections of reaction images and GIFs from an
in-memory catalog, under an optional one-time intent that restricts the
visible categories and response metadata for the rest of the process.

Rails:
- Intent locks at most once; a second configure raises ConfigurationError
- Emitted metadata is always valid for the item's kind and allowed by the intent
- Unique draws in random mode are best-effort: exhaustion truncates, never fails

Submodules:
- catalog: static category tables, records, dataset loading
- intent: the one-time intent gate
- normalizer: request validation and alias resolution
- selection_engine: pools and the random / distributed / each strategies
- projector: record -> public response item
- facade: NekoClient and the module-level default client
- main: FastAPI app over the facade
"""

from __future__ import annotations

__all__ = [
    # Facade
    "NekoClient",
    "get_client",
    "configure_intent",
    "fetch",
    "list_actions",
    "count",
    "load_all",
    # Errors
    "NekosError",
    "ConfigurationError",
    "ValidationError",
    "IntentViolationError",
    # Catalog
    "Catalog",
    "ContentKind",
    "ContentType",
]


# Lazy imports keep `import nekos` free of dataset loading
def __getattr__(name: str):

    if name in ("NekoClient", "get_client", "configure_intent", "fetch",
                "list_actions", "count", "load_all"):
        from . import facade
        return getattr(facade, name)

    if name in ("NekosError", "ConfigurationError", "ValidationError", "IntentViolationError"):
        from . import errors
        return getattr(errors, name)

    if name in ("Catalog", "ContentKind", "ContentType"):
        from . import catalog
        return getattr(catalog, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
