"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from deciduous.config import Settings


def test_defaults(monkeypatch):
    for name in ('THEME', 'ENGINE', 'PNG_DPI', 'LOG_LEVEL', 'WATCH_INTERVAL'):
        monkeypatch.delenv(f'DECIDUOUS_{name}', raising=False)
    settings = Settings()
    assert settings.theme == 'default'
    assert settings.engine == 'dot'
    assert settings.png_dpi == 144
    assert settings.log_level == 'WARNING'
    assert settings.watch_interval == 1.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('DECIDUOUS_THEME', 'accessible')
    monkeypatch.setenv('DECIDUOUS_PNG_DPI', '300')
    settings = Settings()
    assert settings.theme == 'accessible'
    assert settings.png_dpi == 300


def test_unknown_theme_is_rejected(monkeypatch):
    monkeypatch.setenv('DECIDUOUS_THEME', 'neon')
    with pytest.raises(ValidationError):
        Settings()
