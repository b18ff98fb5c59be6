"""Interfaces (Protocols) for application layer dependencies.

This module defines Protocol-based interfaces that infrastructure
implementations must satisfy. The application layer depends on these
interfaces, not concrete implementations, enabling dependency inversion
and testability.

Design Principles:
    - Structural Typing: Uses Python Protocol for duck typing
    - Dependency Inversion: Application depends on abstractions
    - Interface Segregation: Focused, single-purpose protocols
    - Testability: Easy to mock for unit testing

Key Interfaces:
    - AssetStoreInterface: Read-only lookup of image assets by id
    - ImageResizerInterface: Re-encoding of images under a resize policy
    - ConversionLoggerInterface: Structured conversion event logging

Note:
    Implementations don't need to explicitly inherit from these protocols;
    they just need to implement the required methods.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from chat_request.domain.entities import ImageAsset, ResizedImage
    from chat_request.domain.value_objects import ImageResizePolicy


class AssetStoreInterface(Protocol):
    """Protocol for asset store implementations.

    The asset store maps opaque asset identifiers to binary image data. It is
    read-only from the point of view of the conversion. Retries, if any, are
    the store's responsibility.
    """

    async def get(self, asset_id: str) -> ImageAsset | None:
        """Look up an image asset.

        Args:
            asset_id: Opaque asset identifier.

        Returns:
            The asset, or None if the store holds nothing for asset_id.
        """
        ...


class ImageResizerInterface(Protocol):
    """Protocol for image resize implementations.

    Implementations re-encode an image so that it satisfies a named resize
    policy. Failures are reported by raising; callers decide whether a
    failure is fatal.
    """

    async def resize(
        self,
        mime_type: str,
        base64_data: str,
        policy: ImageResizePolicy,
        target_mime_type: str,
        quality: float,
    ) -> ResizedImage | None:
        """Resize and re-encode an image if the policy requires it.

        Args:
            mime_type: Mime type of the input image.
            base64_data: Base64-encoded input image bytes.
            policy: Resize policy to satisfy.
            target_mime_type: Mime type to re-encode to (e.g. ``image/webp``).
            quality: Lossy encoder quality in (0.0, 1.0].

        Returns:
            The re-encoded image, or None if the image already satisfies the
            policy.

        Raises:
            ImageResizeError: If the image cannot be decoded or re-encoded.
        """
        ...


class ConversionLoggerInterface(Protocol):
    """Protocol for structured conversion event logging."""

    def log_event(self, data: dict[str, Any]) -> None:
        """Record a conversion event.

        Args:
            data: Event payload. Must contain an ``event`` key (e.g.
                ``"fragment_dropped"``) plus event-specific fields.
        """
        ...
