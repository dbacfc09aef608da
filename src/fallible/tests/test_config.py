"""Tests for settings and logging configuration."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from fallible import clear_settings_cache, configure_logging, get_settings


def test_defaults() -> None:
    settings = get_settings()
    assert settings.logging.level == "WARNING"
    assert settings.logging.suppressed is False
    assert settings.logging.include_trace is False


def test_settings_cached() -> None:
    assert get_settings() is get_settings()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FALLIBLE_LOG_LEVEL", "debug")
    monkeypatch.setenv("FALLIBLE_LOG_SUPPRESSED", "true")
    clear_settings_cache()

    settings = get_settings()
    assert settings.logging.level == "DEBUG"
    assert settings.logging.suppressed is True


def test_invalid_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FALLIBLE_LOG_LEVEL", "LOUD")
    clear_settings_cache()
    with pytest.raises(ValidationError):
        get_settings()


def test_configure_logging_idempotent() -> None:
    log = logging.getLogger("fallible")
    before = list(log.handlers)
    try:
        configure_logging("INFO")
        configure_logging("ERROR")
        added = [h for h in log.handlers if h not in before]
        assert len(added) == 1
        assert log.level == logging.ERROR
    finally:
        for h in log.handlers[:]:
            if h not in before:
                log.removeHandler(h)
        log.setLevel(logging.NOTSET)


def test_configure_logging_uses_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FALLIBLE_LOG_LEVEL", "INFO")
    clear_settings_cache()
    log = logging.getLogger("fallible")
    before = list(log.handlers)
    try:
        assert configure_logging().level == logging.INFO
    finally:
        for h in log.handlers[:]:
            if h not in before:
                log.removeHandler(h)
        log.setLevel(logging.NOTSET)
