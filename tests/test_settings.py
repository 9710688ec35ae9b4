"""Tests for environment parsing in the settings module."""

from aura.config import settings


def test_numbers_fall_back_on_garbage(monkeypatch):
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "soon")

    assert settings._parse_float("POLL_INTERVAL_SECONDS", 30.0) == 30.0


def test_numbers_are_read(monkeypatch):
    monkeypatch.setenv("DUE_WINDOW_MINUTES", "7.5")

    assert settings._parse_float("DUE_WINDOW_MINUTES", 5.0) == 7.5


def test_optional_coordinates(monkeypatch):
    monkeypatch.setenv("WEATHER_LATITUDE", "")
    monkeypatch.setenv("WEATHER_LONGITUDE", "77.59")

    assert settings._parse_optional_float("WEATHER_LATITUDE") is None
    assert settings._parse_optional_float("WEATHER_LONGITUDE") == 77.59


def test_booleans(monkeypatch):
    monkeypatch.setenv("ENABLE_ADMIN_HTTP", "off")
    monkeypatch.delenv("ENABLE_WEATHER_SUGGESTIONS", raising=False)

    assert settings._parse_bool("ENABLE_ADMIN_HTTP", True) is False
    assert settings._parse_bool("ENABLE_WEATHER_SUGGESTIONS", True) is True
