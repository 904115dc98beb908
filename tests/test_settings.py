# tests/test_settings.py
import os
from unittest.mock import patch

from nekos import settings
from nekos.catalog import DEFAULT_DATA_PATH


def test_flags_default_off():
    with patch.dict(os.environ, {}, clear=True):
        assert settings.is_intent_endpoint_enabled() is False


def test_flag_values():
    for val in ("on", "TRUE", "1", "yes"):
        with patch.dict(os.environ, {"INTENT_ENDPOINT_ENABLED": val}):
            assert settings.is_intent_endpoint_enabled() is True
    with patch.dict(os.environ, {"INTENT_ENDPOINT_ENABLED": "nope"}):
        assert settings.is_intent_endpoint_enabled() is False


def test_data_path():
    with patch.dict(os.environ, {}, clear=True):
        assert settings.get_data_path() == DEFAULT_DATA_PATH
    with patch.dict(os.environ, {"NEKOS_DATA_PATH": "/srv/nekos/data.json"}):
        assert settings.get_data_path() == "/srv/nekos/data.json"


def test_rate_limit():
    with patch.dict(os.environ, {"RATE_LIMIT_PER_MIN": "abc"}):
        assert settings.get_rate_limit_per_min() == 60
    with patch.dict(os.environ, {"RATE_LIMIT_PER_MIN": "15"}):
        assert settings.get_rate_limit_per_min() == 15


def test_allowed_origins():
    with patch.dict(os.environ, {"ALLOWED_ORIGINS": "https://a.example, ,https://b.example"}):
        assert settings.get_allowed_origins() == ["https://a.example", "https://b.example"]


def test_startup_intent():
    with patch.dict(os.environ, {}, clear=True):
        assert settings.get_startup_intent() is None
    with patch.dict(os.environ, {"NEKOS_INTENT_TYPE": "gif"}, clear=True):
        assert settings.get_startup_intent() == (None, "gif")
    with patch.dict(os.environ, {"NEKOS_INTENT_METADATA": "0"}, clear=True):
        assert settings.get_startup_intent() == (0, None)
    with patch.dict(os.environ, {"NEKOS_INTENT_TYPE": "1", "NEKOS_INTENT_METADATA": "artist_name, source_url"}, clear=True):
        assert settings.get_startup_intent() == (["artist_name", "source_url"], "1")
