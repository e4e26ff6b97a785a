# src/ledgerwatch/config/settings.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Ledgerwatch Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration for the analysis pipeline. This
    module centralizes environment parsing and validation and is safe to import
    from any layer; however, only Adapters/Infrastructure should read process
    environment at runtime. Other layers receive values via DI.

Design:
    - Pydantic v2 BaseSettings with explicit aliases per field.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor `get_settings()` with LRU cache.
    - Safe, structured logging (no secrets).

Notes:
    Transport settings for the EDGAR client live next to the client in
    ``ledgerwatch.infrastructure.external_apis.edgar.settings``.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    PRODUCTION = "production"


class CacheBackend(str, Enum):
    """Backing store for the shared JSON cache."""

    MEMORY = "memory"
    REDIS = "redis"


class Settings(BaseSettings):
    """Typed application configuration for Ledgerwatch."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="LEDGERWATCH_ENVIRONMENT",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level applied by configure_root_logging().",
        validation_alias="LOG_LEVEL",
    )

    # ---------------------------
    # Caching
    # ---------------------------
    cache_backend: CacheBackend = Field(
        default=CacheBackend.MEMORY,
        description="Cache implementation shared by the fetcher and the analysis use case.",
        validation_alias="LEDGERWATCH_CACHE_BACKEND",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL; required when cache_backend=redis.",
        validation_alias="REDIS_URL",
    )
    cache_namespace: str = Field(
        default="ledgerwatch:v1",
        min_length=1,
        description="Prefix applied to every cache key.",
        validation_alias="LEDGERWATCH_CACHE_NAMESPACE",
    )
    result_cache_ttl_s: int = Field(
        default=3600,
        ge=0,
        le=7 * 24 * 3600,
        description="TTL for computed analysis reports. 0 disables result caching.",
        validation_alias="LEDGERWATCH_RESULT_CACHE_TTL_S",
    )
    cache_sweep_interval_s: float = Field(
        default=300.0,
        ge=1.0,
        description="Interval for the periodic in-memory cache sweep.",
        validation_alias="LEDGERWATCH_CACHE_SWEEP_INTERVAL_S",
    )

    # ---------------------------
    # Analysis defaults
    # ---------------------------
    default_years: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Default year window when a request does not specify one.",
        validation_alias="LEDGERWATCH_DEFAULT_YEARS",
    )
    weight_beneish: float = Field(
        default=0.30, ge=0.0, validation_alias="LEDGERWATCH_WEIGHT_BENEISH"
    )
    weight_altman: float = Field(default=0.25, ge=0.0, validation_alias="LEDGERWATCH_WEIGHT_ALTMAN")
    weight_piotroski: float = Field(
        default=0.15, ge=0.0, validation_alias="LEDGERWATCH_WEIGHT_PIOTROSKI"
    )
    weight_fraud_triangle: float = Field(
        default=0.15, ge=0.0, validation_alias="LEDGERWATCH_WEIGHT_FRAUD_TRIANGLE"
    )
    weight_benford: float = Field(
        default=0.05, ge=0.0, validation_alias="LEDGERWATCH_WEIGHT_BENFORD"
    )
    weight_red_flags: float = Field(
        default=0.10, ge=0.0, validation_alias="LEDGERWATCH_WEIGHT_RED_FLAGS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _validate_cache_backend(self) -> Settings:
        """Require a Redis URL when the Redis backend is selected.

        Raises:
            ValueError: If cache_backend is redis and REDIS_URL is unset.
        """
        if self.cache_backend is CacheBackend.REDIS and not self.redis_url:
            raise ValueError("REDIS_URL is required when LEDGERWATCH_CACHE_BACKEND=redis.")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated application settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "environment": settings.environment.value,
                "cache_backend": settings.cache_backend.value,
                "redis_url_set": bool(settings.redis_url),
                "result_cache_ttl_s": settings.result_cache_ttl_s,
                "default_years": settings.default_years,
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
