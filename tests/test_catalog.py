# tests/test_catalog.py
import json
import logging
from pathlib import Path

import pytest
from jsonschema import Draft202012Validator

from nekos.catalog import (
    DEFAULT_DATA_PATH, IMAGE_CATEGORIES, VALID_ACTIONS, Catalog, ContentKind, kind_of,
)

ROOT = Path(__file__).resolve().parents[1]
SCHEMA_PATH = ROOT / "docs" / "catalog.schema.json"


def _load(path):
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def test_static_tables():
    assert len(VALID_ACTIONS) == 46
    assert len(set(VALID_ACTIONS)) == 46
    assert IMAGE_CATEGORIES == {"husbando", "kitsune", "neko", "waifu"}
    assert kind_of("waifu") is ContentKind.IMAGE
    assert kind_of("hug") is ContentKind.GIF
    assert int(ContentKind.IMAGE) == 1 and int(ContentKind.GIF) == 2


def test_bundled_dataset_matches_schema():
    schema = _load(SCHEMA_PATH)
    Draft202012Validator.check_schema(schema)
    errors = list(Draft202012Validator(schema).iter_errors(_load(DEFAULT_DATA_PATH)))
    assert not errors, [e.message for e in errors]


def test_bundled_urls_live_under_their_category():
    for category, items in _load(DEFAULT_DATA_PATH).items():
        for it in items:
            assert it["url"].startswith(f"/{category}/"), f"{category}: {it['url']}"


def test_load_bundled_dataset():
    catalog = Catalog.load()
    assert catalog.total() > 0
    assert set(catalog.categories()) <= set(VALID_ACTIONS)


def test_missing_file_is_empty_catalog(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="nekos.catalog"):
        catalog = Catalog.load(str(tmp_path / "absent.json"))
    assert len(catalog) == 0
    assert "Failed to load" in caplog.text


def test_non_object_root_is_fatal():
    with pytest.raises(RuntimeError):
        Catalog.from_mapping([{"url": "/hug/a.gif"}])


def test_bad_entries_are_dropped(caplog):
    with caplog.at_level(logging.WARNING, logger="nekos.catalog"):
        catalog = Catalog.from_mapping({
            "hug": [{"url": "/hug/a.gif", "anime_name": "Clannad"}, {"anime_name": "no url"}, "junk"],
            "dab": [{"url": "/dab/a.gif"}],
            "pat": "not a list",
        })
    assert catalog.categories() == ["hug"]
    assert catalog.size("hug") == 1
    assert "dab" in caplog.text


def test_metadata_of_other_kind_is_not_kept():
    catalog = Catalog.from_mapping({
        "hug": [{"url": "/hug/a.gif", "anime_name": "Clannad", "artist_name": "stray"}],
        "neko": [{"url": "/neko/a.png", "artist_name": "Hiten", "anime_name": "stray"}],
    })
    assert catalog.records("hug")[0].present_fields() == ("anime_name",)
    assert catalog.records("neko")[0].present_fields() == ("artist_name",)


def test_categories_in_canonical_order():
    catalog = Catalog.from_mapping({"wave": [], "angry": [], "neko": []})
    assert catalog.categories() == ["angry", "neko", "wave"]


def test_retain_is_a_shrink(catalog):
    catalog.retain(["hug", "waifu", "kiss"])
    assert catalog.categories() == ["hug", "waifu"]
    assert catalog.records("pat") == ()
