# tests/unit/config/test_ledgerwatch_settings.py
from __future__ import annotations

import pytest
from pydantic import ValidationError

from ledgerwatch.config.settings import CacheBackend, Environment, Settings, get_settings
from ledgerwatch.infrastructure.external_apis.edgar.settings import EdgarSettings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("LEDGERWATCH_CACHE_BACKEND", "REDIS_URL", "LEDGERWATCH_DEFAULT_YEARS"):
        monkeypatch.delenv(key, raising=False)
    settings = Settings(_env_file=None)

    assert settings.environment is Environment.DEVELOPMENT
    assert settings.cache_backend is CacheBackend.MEMORY
    assert settings.default_years == 5
    assert settings.result_cache_ttl_s == 3600
    assert settings.weight_beneish == 0.30


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERWATCH_CACHE_BACKEND", "redis")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setenv("LEDGERWATCH_WEIGHT_BENFORD", "0.5")

    settings = Settings(_env_file=None)

    assert settings.cache_backend is CacheBackend.REDIS
    assert settings.redis_url == "redis://cache:6379/1"
    assert settings.weight_benford == 0.5


def test_redis_backend_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERWATCH_CACHE_BACKEND", "redis")
    monkeypatch.delenv("REDIS_URL", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_out_of_range_years_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERWATCH_DEFAULT_YEARS", "11")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERWATCH_RESULT_CACHE_TTL_S", "-1")
    get_settings.cache_clear()
    try:
        with pytest.raises(RuntimeError, match="Invalid configuration"):
            get_settings()
    finally:
        get_settings.cache_clear()


def test_edgar_settings_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EDGAR_MIN_INTERVAL_S", "0.25")
    monkeypatch.setenv("EDGAR_USER_AGENT", "Research Desk research@example.com")

    settings = EdgarSettings()

    assert settings.min_interval_s == 0.25
    assert settings.user_agent == "Research Desk research@example.com"
    assert settings.base_url == "https://data.sec.gov"
