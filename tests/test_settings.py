from __future__ import annotations

import pytest

from vidigenius.settings import DEFAULT_ANALYSIS_MODEL, DEFAULT_IMAGE_MODEL, Settings


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "abc")
    monkeypatch.setenv("VIDIGENIUS_IMAGE_MODEL", "custom-image-model")
    monkeypatch.setenv("VIDIGENIUS_ANALYSIS_TIMEOUT", "42")
    monkeypatch.setenv("VIDIGENIUS_IMAGE_TIMEOUT", "not-a-number")
    monkeypatch.delenv("VIDIGENIUS_ANALYSIS_MODEL", raising=False)

    settings = Settings.from_env()

    assert settings.gemini_api_key == "abc"
    assert settings.analysis_model == DEFAULT_ANALYSIS_MODEL
    assert settings.image_model == "custom-image-model"
    assert settings.analysis_timeout_s == 42.0
    assert settings.image_timeout_s == 120.0


def test_api_key_falls_back_to_generic_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "fallback")
    monkeypatch.delenv("VIDIGENIUS_IMAGE_MODEL", raising=False)

    settings = Settings.from_env()

    assert settings.gemini_api_key == "fallback"
    assert settings.image_model == DEFAULT_IMAGE_MODEL
