import pytest
from pydantic import ValidationError

from greenhouse.config import LogLevel, Settings, load_settings
from greenhouse.windows import TimeWindow


def test_defaults_from_minimal_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_URL", "https://greenhouse-demo.firebaseio.com")

    settings = load_settings()

    assert settings.feed_url == "https://greenhouse-demo.firebaseio.com"
    assert settings.feed_path == "sensorData"
    assert settings.feed_auth is None
    assert settings.poll_interval_secs == 30
    assert settings.request_timeout_secs == 10
    assert settings.default_window is TimeWindow.ONE_DAY
    assert settings.log_level is LogLevel.INFO
    assert settings.tz is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_URL", "https://x.firebaseio.com")
    monkeypatch.setenv("FEED_PATH", "greenhouse/a")
    monkeypatch.setenv("POLL_INTERVAL_SECS", "5")
    monkeypatch.setenv("DEFAULT_WINDOW", "3m")
    monkeypatch.setenv("DISPLAY_TZ", "Europe/Helsinki")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.feed_path == "greenhouse/a"
    assert settings.poll_interval_secs == 5
    assert settings.default_window is TimeWindow.THREE_MONTHS
    assert settings.log_level is LogLevel.DEBUG
    assert settings.tz is not None
    assert str(settings.tz) == "Europe/Helsinki"


def test_missing_feed_url_is_runtime_error() -> None:
    with pytest.raises(RuntimeError, match="FEED_URL"):
        load_settings()


def test_invalid_values_raise_validation_error() -> None:
    with pytest.raises(ValidationError):
        Settings.model_validate({"FEED_URL": "https://x", "DISPLAY_TZ": "Mars/Olympus"})
    with pytest.raises(ValidationError):
        Settings.model_validate({"FEED_URL": "https://x", "DEFAULT_WINDOW": "2w"})
    with pytest.raises(ValidationError):
        Settings.model_validate({"FEED_URL": "https://x", "POLL_INTERVAL_SECS": 0})
