"""Shared fixtures for fallible tests."""

import pytest

from fallible.config import clear_settings_cache


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Isolate each test from FALLIBLE_* environment and cached settings."""
    for var in ("FALLIBLE_LOG_LEVEL", "FALLIBLE_LOG_SUPPRESSED", "FALLIBLE_LOG_INCLUDE_TRACE"):
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
