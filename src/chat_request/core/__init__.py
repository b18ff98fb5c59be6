"""Core configuration for chat request conversion."""

from chat_request.core.config import (
    ImageCacheConfig,
    ImageMaterializerConfig,
    Settings,
    TelemetryConfig,
    get_settings,
)

__all__ = [
    "ImageCacheConfig",
    "ImageMaterializerConfig",
    "Settings",
    "TelemetryConfig",
    "get_settings",
]
