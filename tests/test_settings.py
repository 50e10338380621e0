from pathlib import Path

import pytest

from models import FeedSettings
from models.settings import DEFAULT_ENDPOINT


def test_defaults():
    settings = FeedSettings()

    assert settings.endpoint == DEFAULT_ENDPOINT
    assert settings.tick_interval == 1.0
    assert settings.poll_interval == 0.5
    assert settings.fallback_duration == 238.0
    assert settings.log_file.name == "feedplay.log"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FEEDPLAY_ENDPOINT", "http://localhost:8000/songs")
    monkeypatch.setenv("FEEDPLAY_TICK_INTERVAL", "0.25")
    monkeypatch.setenv("FEEDPLAY_FALLBACK_DURATION", "60")
    monkeypatch.setenv("FEEDPLAY_LOG_LEVEL", "debug")
    monkeypatch.setenv("FEEDPLAY_LOG_DIR", str(tmp_path))

    settings = FeedSettings.from_env()

    assert settings.endpoint == "http://localhost:8000/songs"
    assert settings.tick_interval == 0.25
    assert settings.fallback_duration == 60.0
    assert settings.log_level == "DEBUG"
    assert settings.log_dir == Path(tmp_path)


@pytest.mark.parametrize("kwargs", [
    {"endpoint": "ftp://example.com/songs"},
    {"request_timeout": 0},
    {"tick_interval": -1},
    {"poll_interval": 0},
    {"fallback_duration": 0},
    {"log_level": "LOUD"},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        FeedSettings(**kwargs)


def test_from_env_rejects_non_numeric(monkeypatch):
    monkeypatch.setenv("FEEDPLAY_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        FeedSettings.from_env()
