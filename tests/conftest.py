# tests/conftest.py
"""
Pytest configuration and shared fixtures.

- In-memory catalogs built from small literal datasets (no file I/O)
- Seeded random sources so every mode is deterministic
- TestClient against the FastAPI app with the limiter disabled and the
  client dependency pointed at a fixture catalog
"""

import random
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make "from nekos... import ..." work when tests run from CI/workdir
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from nekos.catalog import Catalog  # noqa: E402
from nekos.facade import NekoClient  # noqa: E402
from nekos.main import app, get_neko_client, limiter  # noqa: E402


# ============================================================
# Rate Limiter Disabling
# ============================================================
# Disable rate limiting in tests only (prevents 429 when many requests run)
limiter.enabled = False


# ============================================================
# Sample Data
# ============================================================

def gif(category: str, n: int, anime: str = "Clannad") -> dict:
    return {"url": f"/{category}/{category}-{n:03d}.gif", "anime_name": anime}


def image(category: str, n: int, artist: str = "Rikuwo") -> dict:
    return {
        "url": f"/{category}/{category}-{n:03d}.png",
        "artist_href": f"https://www.pixiv.net/en/users/{1000 + n}",
        "artist_name": artist,
        "source_url": f"https://www.pixiv.net/en/artworks/{9000 + n}",
    }


SAMPLE_DATA = {
    "hug": [gif("hug", 1, "Toradora!"), gif("hug", 2, "K-On!"), gif("hug", 3, "Clannad"), gif("hug", 4, "Toradora!")],
    "pat": [gif("pat", 1, "Non Non Biyori"), gif("pat", 2, "Toradora!"), gif("pat", 3, "Yuru Camp")],
    "wave": [gif("wave", 1, "Lucky Star"), gif("wave", 2, "Yuru Camp")],
    "waifu": [image("waifu", 1, "Rikuwo"), image("waifu", 2, "Mikan"), image("waifu", 3, "Hiten")],
    "neko": [image("neko", 1, "Rikuwo"), image("neko", 2, "Nanahira")],
}


@pytest.fixture
def sample_data():
    """Fresh copy of the literal dataset."""
    return {k: [dict(r) for r in v] for k, v in SAMPLE_DATA.items()}


@pytest.fixture
def catalog(sample_data):
    return Catalog.from_mapping(sample_data)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def neko(catalog, rng):
    """NekoClient over the sample catalog with a seeded random source."""
    return NekoClient(catalog, rng=rng)


# ============================================================
# API Test Client
# ============================================================

@pytest.fixture
def api_neko(catalog):
    client = NekoClient(catalog, rng=random.Random(42))
    app.dependency_overrides[get_neko_client] = lambda: client
    yield client
    app.dependency_overrides.pop(get_neko_client, None)


@pytest.fixture
def test_client(api_neko):
    """TestClient against the FastAPI app (function-scoped for isolation)."""
    with TestClient(app) as c:
        yield c
