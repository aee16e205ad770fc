"""Tests for configuration helpers."""

from pathlib import Path

from audiosync import config


def test_defaults():
    assert config.LOOKAHEAD_MS == 400
    assert config.MERGE_THRESHOLD_MS == 20
    assert config.END_SENTINEL_MS == 5000
    assert config.SELECTION_TIMEOUT == 20
    assert {"J-Pop", "Kayokyoku", "J-Rock"} <= config.ORIGINAL_NAME_GENRES


def test_validate_config_passes_on_defaults():
    config.validate_config()


def test_cache_dir_from_env(monkeypatch, temp_dir):
    monkeypatch.setenv("AUDIOSYNC_CACHE_DIR", str(temp_dir))
    assert config.get_cache_dir() == temp_dir


def test_cache_dir_default(monkeypatch):
    monkeypatch.delenv("AUDIOSYNC_CACHE_DIR", raising=False)
    assert config.get_cache_dir() == Path.home() / ".cache" / "audiosync"


def test_api_key(monkeypatch):
    monkeypatch.delenv("AUDIOSYNC_SILICONFLOW_API_KEY", raising=False)
    assert config.get_siliconflow_api_key() is None
    monkeypatch.setenv("AUDIOSYNC_SILICONFLOW_API_KEY", "k")
    assert config.get_siliconflow_api_key() == "k"
