"""Image resizing and re-encoding for generation requests.

This module implements the resize policies used when images are inlined into
generation requests. Each policy bounds the image dimensions; images that
already satisfy the policy are left untouched so that no quality is lost to a
pointless re-encode.

Key Features:
    - Named resize policies (see ImageResizePolicy)
    - Aspect ratio preserving downscale (LANCZOS resampling)
    - Re-encoding to WebP, JPEG or PNG with configurable quality
    - RGBA to RGB conversion for JPEG compatibility
    - Per-call metadata about the re-encoded image (dimensions, sizes)

Dependencies:
    - Pillow (PIL): Required for image processing operations
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass

try:
    from PIL import Image, UnidentifiedImageError
except ImportError as exc:
    msg = "Pillow is required for image processing. Install with: pip install Pillow"
    raise ImportError(msg) from exc

from chat_request.domain.entities import ResizedImage
from chat_request.domain.exceptions import ImageResizeError
from chat_request.domain.value_objects import ImageResizePolicy

logger = logging.getLogger(__name__)

PIL_FORMATS = {
    "image/webp": "WEBP",
    "image/jpeg": "JPEG",
    "image/png": "PNG",
}
"""Target mime types supported for re-encoding, mapped to Pillow format names."""


@dataclass(slots=True, frozen=True)
class PolicyBounds:
    """Dimension limits of a resize policy.

    Attributes:
        max_width: Maximum width in pixels.
        max_height: Maximum height in pixels.
        max_short_side: Optional limit on the shorter side, applied after the
            box limit.
    """

    max_width: int
    max_height: int
    max_short_side: int | None = None


POLICY_BOUNDS: dict[ImageResizePolicy, PolicyBounds] = {
    ImageResizePolicy.OPENAI_LOW_RES: PolicyBounds(512, 512),
    ImageResizePolicy.OPENAI_HIGH_RES: PolicyBounds(2048, 2048, max_short_side=768),
    ImageResizePolicy.GOOGLE: PolicyBounds(3072, 3072),
    ImageResizePolicy.ANTHROPIC: PolicyBounds(1568, 1568),
    ImageResizePolicy.THUMBNAIL_128: PolicyBounds(128, 128),
    ImageResizePolicy.THUMBNAIL_256: PolicyBounds(256, 256),
}


@dataclass(slots=True, frozen=True)
class ImageMetadata:
    """Metadata about a resized image.

    Attributes:
        original_size: Original image size in bytes before processing.
        compressed_size: Encoded image size in bytes after processing.
        original_width: Width in pixels before processing.
        original_height: Height in pixels before processing.
        width: Width in pixels after processing.
        height: Height in pixels after processing.
        mime_type: Mime type of the encoded image.
    """

    original_size: int  # bytes
    compressed_size: int  # bytes
    original_width: int
    original_height: int
    width: int
    height: int
    mime_type: str

    @property
    def compression_ratio(self) -> float:
        """original_size / compressed_size (> 1.0 means the image shrank)."""
        return self.original_size / self.compressed_size if self.compressed_size > 0 else 1.0


def compute_target_size(width: int, height: int, policy: ImageResizePolicy) -> tuple[int, int] | None:
    """Compute the dimensions an image must be scaled to under a policy.

    Args:
        width: Current width in pixels.
        height: Current height in pixels.
        policy: Resize policy.

    Returns:
        (new_width, new_height), or None if the image already fits.
    """
    bounds = POLICY_BOUNDS[policy]
    scale = 1.0
    if width > bounds.max_width or height > bounds.max_height:
        scale = min(bounds.max_width / width, bounds.max_height / height)

    if bounds.max_short_side is not None:
        short_side = min(width, height) * scale
        if short_side > bounds.max_short_side:
            scale *= bounds.max_short_side / short_side

    if scale >= 1.0:
        return None
    return max(1, round(width * scale)), max(1, round(height * scale))


class ImageProcessor:
    """Resizes base64 images according to named resize policies.

    Attributes:
        png_compression: PNG compression level (0-9) used for PNG output.

    Note:
        This class is wrapped by ImageResizerAdapter, which runs it off the
        event loop and implements ImageResizerInterface. It holds no per-image
        state, so one instance can serve concurrent worker threads.
    """

    def __init__(self, png_compression: int = 6) -> None:
        self.png_compression = png_compression

    def resize_base64_image(
        self,
        mime_type: str | None,
        base64_data: str,
        policy: ImageResizePolicy,
        target_mime_type: str = "image/webp",
        quality: float = 0.90,
    ) -> ResizedImage | None:
        """Resize and re-encode an image if the policy requires it.

        See resize_with_metadata() for arguments and errors.
        """
        result = self.resize_with_metadata(mime_type, base64_data, policy, target_mime_type, quality)
        return result[0] if result is not None else None

    def resize_with_metadata(
        self,
        mime_type: str | None,
        base64_data: str,
        policy: ImageResizePolicy,
        target_mime_type: str = "image/webp",
        quality: float = 0.90,
    ) -> tuple[ResizedImage, ImageMetadata] | None:
        """Resize and re-encode an image, returning its metadata as well.

        Args:
            mime_type: Mime type of the input image. Only used for logging;
                the actual format is detected from the bytes.
            base64_data: Base64-encoded image bytes.
            policy: Resize policy to satisfy.
            target_mime_type: One of ``image/webp``, ``image/jpeg``,
                ``image/png``.
            quality: Lossy encoder quality in (0.0, 1.0].

        Returns:
            (ResizedImage, ImageMetadata) for the re-encoded image, or None if
            the image already satisfies the policy.

        Raises:
            ImageResizeError: If the policy or target mime type is unsupported,
                or the input cannot be decoded.
        """
        try:
            policy = ImageResizePolicy(policy)
        except ValueError as exc:
            raise ImageResizeError(f"Unsupported resize policy: {policy}") from exc
        pil_format = PIL_FORMATS.get(target_mime_type)
        if pil_format is None:
            raise ImageResizeError(f"Unsupported target mime type: {target_mime_type}")

        try:
            image_bytes = base64.b64decode(base64_data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageResizeError(f"Invalid base64 encoding: {exc}") from exc

        # Load image (force load to catch truncated streams)
        try:
            img = Image.open(io.BytesIO(image_bytes))
            img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ImageResizeError(f"Invalid image data ({mime_type}): {exc}") from exc

        original_width, original_height = img.size
        target_size = compute_target_size(original_width, original_height, policy)
        if target_size is None:
            logger.debug(
                "Image %dx%d already satisfies %s, not resizing",
                original_width,
                original_height,
                policy,
            )
            return None

        match (pil_format, img.mode):
            case ("JPEG", "RGBA" | "LA"):
                # JPEG has no alpha channel: flatten on white
                background = Image.new("RGB", img.size, (255, 255, 255))
                background.paste(img, mask=img.getchannel("A"))
                img = background
            case (_, mode) if mode not in {"RGB", "RGBA"}:
                img = img.convert("RGBA" if "A" in mode or "transparency" in img.info else "RGB")
            case _:
                pass

        img = img.resize(target_size, Image.Resampling.LANCZOS)

        output = io.BytesIO()
        encoder_quality = max(1, min(100, round(quality * 100)))
        match pil_format:
            case "WEBP":
                img.save(output, format="WEBP", quality=encoder_quality, method=6)
            case "JPEG":
                if img.mode != "RGB":
                    img = img.convert("RGB")
                img.save(output, format="JPEG", quality=encoder_quality, optimize=True)
            case "PNG":
                img.save(output, format="PNG", compress_level=self.png_compression, optimize=True)

        encoded = output.getvalue()
        metadata = ImageMetadata(
            original_size=len(image_bytes),
            compressed_size=len(encoded),
            original_width=original_width,
            original_height=original_height,
            width=target_size[0],
            height=target_size[1],
            mime_type=target_mime_type,
        )
        logger.info(
            "Resized image from %dx%d to %dx%d %s (%s), %d -> %d bytes",
            original_width,
            original_height,
            target_size[0],
            target_size[1],
            target_mime_type,
            policy,
            len(image_bytes),
            len(encoded),
        )
        resized = ResizedImage(
            mime_type=target_mime_type,
            base64=base64.b64encode(encoded).decode("utf-8"),
        )
        return resized, metadata


__all__ = [
    "POLICY_BOUNDS",
    "ImageMetadata",
    "ImageProcessor",
    "PolicyBounds",
    "compute_target_size",
]
