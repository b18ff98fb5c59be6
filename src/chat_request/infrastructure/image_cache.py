"""TTL cache for resize results.

Conversations are converted again on every generation, so the same stored
images are resized over and over. This cache keeps recent resize results in
memory, including the "no resize needed" answer, so repeated conversions skip
decoding and re-encoding.

Key Features:
    - LRU eviction: Least recently used entries evicted when cache is full
    - TTL expiration: Entries automatically expire after TTL period
    - Statistics tracking: Hit/miss rates for monitoring
    - SHA-256 keys: Deterministic keys from every resize input
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import TYPE_CHECKING

from cachetools import TTLCache

if TYPE_CHECKING:
    from chat_request.domain.entities import ResizedImage

logger = logging.getLogger(__name__)


class CacheEntry:
    """Cached resize result.

    Attributes:
        result: Re-encoded image, or None when the image needed no resize.
        timestamp: Cache entry creation timestamp (time.time()).
    """

    __slots__ = ("result", "timestamp")

    def __init__(self, result: ResizedImage | None, timestamp: float) -> None:
        self.result = result
        self.timestamp = timestamp


class ResizedImageCache:
    """LRU cache for resize results using cachetools TTLCache.

    Attributes:
        max_size: Maximum number of cached entries.
        ttl_seconds: Time-to-live for cache entries in seconds.
        _cache: Underlying TTLCache instance providing LRU and TTL functionality.
        _hits: Total number of cache hits since initialization.
        _misses: Total number of cache misses since initialization.
    """

    def __init__(self, max_size: int = 100, ttl_seconds: float = 3600.0):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache[str, CacheEntry] = TTLCache(maxsize=max_size, ttl=ttl_seconds)
        self._hits = 0
        self._misses = 0

    @staticmethod
    def compute_key(
        mime_type: str | None,
        base64_data: str,
        policy: str,
        target_mime_type: str,
        quality: float,
    ) -> str:
        """Compute a SHA-256 cache key from every input that affects the result."""
        digest = hashlib.sha256()
        digest.update(f"{mime_type}:{policy}:{target_mime_type}:{quality:.4f}:".encode())
        digest.update(base64_data.encode())
        return digest.hexdigest()

    def get(self, key: str) -> CacheEntry | None:
        """Get a cached entry.

        Args:
            key: Key from compute_key().

        Returns:
            The entry, or None on a miss (never cached or expired). Note that
            an entry whose ``result`` is None is a hit meaning "no resize
            needed".
        """
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def put(self, key: str, result: ResizedImage | None) -> None:
        """Store a resize result."""
        self._cache[key] = CacheEntry(result=result, timestamp=time.time())
        logger.debug("Cached resize result %s (%d entries)", key[:12], len(self._cache))

    def clear(self) -> None:
        """Remove all entries and reset statistics."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> dict[str, int | float]:
        """Return cache statistics.

        Returns:
            Dictionary with keys: size, max_size, hits, misses, hit_rate,
            ttl_seconds.
        """
        total = self._hits + self._misses
        return {
            "size": len(self._cache),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total else 0.0,
            "ttl_seconds": self.ttl_seconds,
        }


__all__ = ["CacheEntry", "ResizedImageCache"]
