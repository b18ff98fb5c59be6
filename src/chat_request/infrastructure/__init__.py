"""Infrastructure layer for chat request conversion.

Concrete collaborators for the application layer:
- In-memory asset store
- Pillow image processor implementing the resize policies
- TTL cache for resize results
- Adapters binding them to the application protocols
"""

from chat_request.infrastructure.adapters import ConversionLoggerAdapter, ImageResizerAdapter
from chat_request.infrastructure.asset_store import InMemoryAssetStore
from chat_request.infrastructure.image_cache import ResizedImageCache
from chat_request.infrastructure.image_processing import ImageProcessor

__all__ = [
    "ConversionLoggerAdapter",
    "ImageProcessor",
    "ImageResizerAdapter",
    "InMemoryAssetStore",
    "ResizedImageCache",
]
