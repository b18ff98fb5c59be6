"""Centralized configuration management for chat request conversion.

This module provides a single source of truth for all configuration values,
using pydantic-settings for environment variable loading and validation.

Design Principles:
    - Environment Variables: All settings can be overridden via environment variables
    - Sensible Defaults: Defaults reproduce the built-in conversion behavior
    - Validation: Pydantic validates all values at load time
    - Singleton Pattern: Cached settings instance via lru_cache

Configuration Sections:
    - ImageMaterializerConfig: Re-encoding target and model turn resize policy
    - ImageCacheConfig: Resize result cache settings
    - TelemetryConfig: Structured event log settings

Environment Variable Prefixes:
    - IMAGE_MATERIALIZER_*: Image materializer settings
    - IMAGE_CACHE_*: Resize cache settings
    - TELEMETRY_*: Telemetry settings

Usage:
    from chat_request.core.config import get_settings

    settings = get_settings()
    policy = settings.image_materializer.model_resize_policy
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_request.domain.value_objects import (
    MODEL_IMAGE_RESCALE_MIMETYPE,
    MODEL_IMAGE_RESCALE_QUALITY,
    MODEL_TURN_RESIZE_POLICY,
    ImageResizePolicy,
)


class ImageMaterializerConfig(BaseSettings):
    """Image materializer configuration.

    Attributes:
        target_mime_type: Mime type resized images are encoded to.
        quality: Lossy encoder quality in (0.0, 1.0].
        model_resize_policy: Resize policy applied to images on model turns.
        png_compression: PNG compression level (0-9) when encoding to PNG.
    """

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_MATERIALIZER_",
        case_sensitive=False,
        extra="ignore",
    )

    target_mime_type: Literal["image/webp", "image/jpeg", "image/png"] = Field(
        default=MODEL_IMAGE_RESCALE_MIMETYPE, description="Mime type of resized images"
    )
    quality: float = Field(
        default=MODEL_IMAGE_RESCALE_QUALITY, gt=0.0, le=1.0, description="Encoder quality"
    )
    model_resize_policy: ImageResizePolicy = Field(
        default=MODEL_TURN_RESIZE_POLICY, description="Resize policy for model turn images"
    )
    png_compression: int = Field(default=6, ge=0, le=9, description="PNG compression level")


class ImageCacheConfig(BaseSettings):
    """Resize result cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Cache resize results")
    max_size: int = Field(default=100, ge=1, le=10000, description="Max cached images")
    ttl_seconds: float = Field(
        default=3600.0, ge=60.0, le=86400.0, description="Cache TTL (seconds)"
    )


class TelemetryConfig(BaseSettings):
    """Structured event logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        case_sensitive=False,
        extra="ignore",
    )

    event_log_path: Path | None = Field(
        default=None, description="JSON Lines file for conversion events (None = disabled)"
    )
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Level of the conversion event logger"
    )

    @field_validator("event_log_path")
    @classmethod
    def validate_event_log_path(cls, v: Path | None) -> Path | None:
        """Reject directories as event log targets."""
        if v is not None and v.is_dir():
            msg = "event_log_path must be a file path, not a directory"
            raise ValueError(msg)
        return v


class Settings(BaseSettings):
    """Root settings class containing all configuration sections.

    Configuration is loaded from:
        1. Environment variables (with appropriate prefixes)
        2. .env file (if present in the working directory)
        3. Default values (if not set)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    image_materializer: ImageMaterializerConfig = Field(default_factory=ImageMaterializerConfig)
    image_cache: ImageCacheConfig = Field(default_factory=ImageCacheConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern).

    Note:
        Environment variable changes after the first call are not picked up
        unless ``get_settings.cache_clear()`` is called.
    """
    return Settings()


__all__ = [
    "ImageCacheConfig",
    "ImageMaterializerConfig",
    "Settings",
    "TelemetryConfig",
    "get_settings",
]
