"""Infrastructure adapters implementing application layer interfaces.

This module provides adapter implementations that wrap concrete
infrastructure components (image processor, resize cache, structured
logging) to satisfy the protocols defined in the application layer.

Key Adapters:
    - ImageResizerAdapter: Wraps ImageProcessor (+ ResizedImageCache) for
      ImageResizerInterface
    - ConversionLoggerAdapter: Wraps structured logging for
      ConversionLoggerInterface
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from chat_request.domain.exceptions import ImageResizeError
from chat_request.telemetry.structured_logging import log_conversion_event

if TYPE_CHECKING:
    from chat_request.domain.entities import ResizedImage
    from chat_request.domain.value_objects import ImageResizePolicy
    from chat_request.infrastructure.image_cache import ResizedImageCache
    from chat_request.infrastructure.image_processing import ImageProcessor

logger = logging.getLogger(__name__)


class ImageResizerAdapter:
    """Adapter that wraps ImageProcessor to implement ImageResizerInterface.

    Pillow work is CPU bound, so it runs in a worker thread via
    asyncio.to_thread(). Results (including "no resize needed") are stored
    in the optional cache.

    Attributes:
        _processor: The underlying ImageProcessor instance.
        _cache: Optional resize result cache. None disables caching.
    """

    def __init__(self, processor: ImageProcessor, cache: ResizedImageCache | None = None) -> None:
        self._processor = processor
        self._cache = cache

    async def resize(
        self,
        mime_type: str,
        base64_data: str,
        policy: ImageResizePolicy,
        target_mime_type: str,
        quality: float,
    ) -> ResizedImage | None:
        """Resize an image if the policy requires it.

        Raises:
            ImageResizeError: For any failure of the underlying processor.
        """
        key = None
        if self._cache is not None:
            key = self._cache.compute_key(mime_type, base64_data, policy, target_mime_type, quality)
            entry = self._cache.get(key)
            if entry is not None:
                return entry.result

        try:
            result = await asyncio.to_thread(
                self._processor.resize_base64_image,
                mime_type,
                base64_data,
                policy,
                target_mime_type,
                quality,
            )
        except ImageResizeError:
            raise
        except Exception as exc:
            raise ImageResizeError(f"Image resize failed: {exc}") from exc

        if self._cache is not None and key is not None:
            self._cache.put(key, result)
        return result

    def get_stats(self) -> dict[str, int | float]:
        """Return cache statistics (empty when caching is disabled)."""
        return self._cache.get_stats() if self._cache is not None else {}


class ConversionLoggerAdapter:
    """Adapter that wraps structured logging to implement ConversionLoggerInterface.

    This is a static adapter: all logging is delegated to
    log_conversion_event.
    """

    @staticmethod
    def log_event(data: dict[str, Any]) -> None:
        """Log a conversion event.

        Args:
            data: Event payload with an ``event`` key. A copy is logged, the
                caller's dict is not modified.
        """
        log_conversion_event(dict(data))


__all__ = ["ConversionLoggerAdapter", "ImageResizerAdapter"]
