"""Value objects for conversation-to-request conversion.

This module defines immutable value objects and constants with no identity.
Value objects encapsulate validation and business rules for primitive values
shared between the application and infrastructure layers.

Key Value Objects:
    - ImageResizePolicy: Named strategy for re-encoding images
    - AssetId: Validated asset store identifier
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

MODEL_IMAGE_RESCALE_MIMETYPE = "image/webp"
"""Mime type images are re-encoded to when a resize policy applies."""

MODEL_IMAGE_RESCALE_QUALITY = 0.90
"""Lossy encoder quality used when re-encoding images (0.0, 1.0]."""

ERROR_TEXT_PREFIX = "[ERROR] "
"""Prefix of the text part that replaces an error part on model turns."""


class ImageResizePolicy(StrEnum):
    """Named image resize presets.

    Each policy bounds the image dimensions for a family of inference
    backends. Images already within bounds are left untouched.

    Attributes:
        OPENAI_LOW_RES: Fit within 512x512.
        OPENAI_HIGH_RES: Fit within 2048x2048, then shortest side <= 768.
        GOOGLE: Fit within 3072x3072.
        ANTHROPIC: Longest side <= 1568.
        THUMBNAIL_128: Fit within 128x128.
        THUMBNAIL_256: Fit within 256x256.
    """

    OPENAI_LOW_RES = "openai-low-res"
    OPENAI_HIGH_RES = "openai-high-res"
    GOOGLE = "google"
    ANTHROPIC = "anthropic"
    THUMBNAIL_128 = "thumbnail-128"
    THUMBNAIL_256 = "thumbnail-256"


MODEL_TURN_RESIZE_POLICY = ImageResizePolicy.OPENAI_LOW_RES
"""Policy applied to images found on model turns."""


@dataclass(slots=True, frozen=True)
class AssetId:
    """Value object representing an asset store identifier.

    Attributes:
        value: Opaque identifier. Must not be empty or whitespace-only.

    Raises:
        ValueError: If the identifier is empty or contains only whitespace.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Asset id cannot be empty")

    def __str__(self) -> str:
        return self.value


__all__ = [
    "ERROR_TEXT_PREFIX",
    "MODEL_IMAGE_RESCALE_MIMETYPE",
    "MODEL_IMAGE_RESCALE_QUALITY",
    "MODEL_TURN_RESIZE_POLICY",
    "AssetId",
    "ImageResizePolicy",
]
