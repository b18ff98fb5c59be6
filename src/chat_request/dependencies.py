"""Wiring of conversion stages from configuration.

This module builds the default infrastructure adapters and conversion stages
from Settings, so callers only need to supply an asset store.

Dependency Flow:
    1. Settings are loaded (environment variables, .env, defaults)
    2. get_image_resizer() returns the process-wide Pillow adapter and cache
    3. create_conversion_logger() attaches the event log file, if configured
    4. create_conversation_reducer() wires materializer, builder and reducer
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from chat_request.application.conversation_reducer import ConversationReducer
from chat_request.application.image_materializer import ImageMaterializer
from chat_request.application.turn_builder import TurnBuilder
from chat_request.core.config import Settings, get_settings
from chat_request.infrastructure.adapters import ConversionLoggerAdapter, ImageResizerAdapter
from chat_request.infrastructure.image_cache import ResizedImageCache
from chat_request.infrastructure.image_processing import ImageProcessor
from chat_request.telemetry.structured_logging import configure_event_log

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chat_request.application.interfaces import (
        AssetStoreInterface,
        ConversionLoggerInterface,
        ImageResizerInterface,
    )
    from chat_request.domain.entities import GenerationRequest
    from chat_request.domain.fragments import Message

logger = logging.getLogger(__name__)


def _build_image_resizer(
    png_compression: int,
    cache_enabled: bool,
    cache_max_size: int,
    cache_ttl_seconds: float,
) -> ImageResizerAdapter:
    processor = ImageProcessor(png_compression=png_compression)
    cache = ResizedImageCache(max_size=cache_max_size, ttl_seconds=cache_ttl_seconds) if cache_enabled else None
    return ImageResizerAdapter(processor, cache)


_shared_image_resizer = lru_cache(maxsize=8)(_build_image_resizer)


def _resizer_key(settings: Settings) -> tuple[int, bool, int, float]:
    return (
        settings.image_materializer.png_compression,
        settings.image_cache.enabled,
        settings.image_cache.max_size,
        settings.image_cache.ttl_seconds,
    )


def create_image_resizer(settings: Settings | None = None) -> ImageResizerAdapter:
    """Build the Pillow-backed resizer, with a resize cache if enabled."""
    settings = settings or get_settings()
    return _build_image_resizer(*_resizer_key(settings))


def get_image_resizer(settings: Settings | None = None) -> ImageResizerAdapter:
    """Get the process-wide resizer for the given settings (singleton pattern).

    Conversations are converted again on every generation, so the resize
    cache must outlive a single conversion. Settings with the same processor
    and cache configuration share one adapter.

    Note:
        Call clear_image_resizers() to drop the shared adapters and their
        caches.
    """
    settings = settings or get_settings()
    return _shared_image_resizer(*_resizer_key(settings))


def clear_image_resizers() -> None:
    """Drop every shared resizer created by get_image_resizer()."""
    _shared_image_resizer.cache_clear()


def create_conversion_logger(settings: Settings | None = None) -> ConversionLoggerAdapter:
    """Build the event logger, attaching the JSON Lines file if configured."""
    settings = settings or get_settings()
    if settings.telemetry.event_log_path is not None:
        configure_event_log(settings.telemetry.event_log_path, settings.telemetry.log_level)
    return ConversionLoggerAdapter()


def create_conversation_reducer(
    asset_store: AssetStoreInterface,
    *,
    settings: Settings | None = None,
    resizer: ImageResizerInterface | None = None,
    events: ConversionLoggerInterface | None = None,
) -> ConversationReducer:
    """Wire a ConversationReducer from configuration.

    Args:
        asset_store: Store used to resolve image references.
        settings: Settings to use. Defaults to get_settings().
        resizer: Resize collaborator. Defaults to get_image_resizer().
        events: Event logger. Defaults to create_conversion_logger().

    Returns:
        A ready-to-use ConversationReducer.
    """
    settings = settings or get_settings()
    events = events if events is not None else create_conversion_logger(settings)
    materializer = ImageMaterializer(
        asset_store,
        resizer if resizer is not None else get_image_resizer(settings),
        target_mime_type=settings.image_materializer.target_mime_type,
        quality=settings.image_materializer.quality,
        events=events,
    )
    builder = TurnBuilder(
        materializer,
        model_resize_policy=settings.image_materializer.model_resize_policy,
        events=events,
    )
    logger.debug(
        "Created conversation reducer (model resize policy: %s)",
        settings.image_materializer.model_resize_policy,
    )
    return ConversationReducer(builder, events=events)


async def convert_conversation(
    messages: Sequence[Message],
    asset_store: AssetStoreInterface,
    *,
    settings: Settings | None = None,
) -> GenerationRequest:
    """Convert messages with the configured default stages."""
    reducer = create_conversation_reducer(asset_store, settings=settings)
    return await reducer.reduce(messages)


__all__ = [
    "clear_image_resizers",
    "convert_conversation",
    "create_conversation_reducer",
    "create_conversion_logger",
    "create_image_resizer",
    "get_image_resizer",
]
