"""Resolution of image references into inline image parts.

Image fragments in stored messages point at the asset store instead of
carrying bytes. The materializer resolves such a reference, optionally
re-encodes the image under a resize policy, and packages the result as an
inline image part.

Failure policy:
    - Unsupported reference, missing asset or unknown mime type: fatal,
      raises ConversionError.
    - Resize failure: recoverable, the original bytes are kept and the
      outcome is reported as ResizeOutcome.FAILED.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from chat_request.domain.entities import (
    MaterializedImage,
    ResizeOutcome,
    create_inline_image_part,
)
from chat_request.domain.exceptions import (
    ImageAssetNotFoundError,
    ImageMimeTypeUnknownError,
    UnsupportedImageReferenceError,
)
from chat_request.domain.fragments import DBlobDataRef
from chat_request.domain.value_objects import (
    MODEL_IMAGE_RESCALE_MIMETYPE,
    MODEL_IMAGE_RESCALE_QUALITY,
    ImageResizePolicy,
)

if TYPE_CHECKING:
    from chat_request.application.interfaces import (
        AssetStoreInterface,
        ConversionLoggerInterface,
        ImageResizerInterface,
    )
    from chat_request.domain.entities import ResizedImage
    from chat_request.domain.fragments import ImageRefPart

logger = logging.getLogger(__name__)


class ImageMaterializer:
    """Turns image reference parts into inline image parts.

    Attributes:
        _asset_store: Asset store used to resolve dblob references.
        _resizer: Resize collaborator. None disables resizing entirely, in
            which case requested policies are reported as FAILED.
        _target_mime_type: Mime type images are re-encoded to.
        _quality: Encoder quality used when re-encoding.
        _events: Optional structured event logger.
    """

    def __init__(
        self,
        asset_store: AssetStoreInterface,
        resizer: ImageResizerInterface | None = None,
        *,
        target_mime_type: str = MODEL_IMAGE_RESCALE_MIMETYPE,
        quality: float = MODEL_IMAGE_RESCALE_QUALITY,
        events: ConversionLoggerInterface | None = None,
    ) -> None:
        self._asset_store = asset_store
        self._resizer = resizer
        self._target_mime_type = target_mime_type
        self._quality = quality
        self._events = events

    async def materialize(
        self,
        image_ref_part: ImageRefPart,
        resize_policy: ImageResizePolicy | Literal[False] | None = False,
    ) -> MaterializedImage:
        """Resolve an image reference to an inline image part.

        Args:
            image_ref_part: Part referencing the image.
            resize_policy: Policy to re-encode the image with, or False/None
                to keep the stored bytes as they are.

        Returns:
            MaterializedImage with the inline part and the resize outcome.

        Raises:
            UnsupportedImageReferenceError: The reference is not an asset
                store reference, or has no asset id. Raised before lookup.
            ImageAssetNotFoundError: The asset store has no such asset.
            ImageMimeTypeUnknownError: Neither the asset nor the reference
                carries a mime type.
        """
        data_ref = image_ref_part.data_ref
        if not isinstance(data_ref, DBlobDataRef) or not data_ref.dblob_asset_id:
            logger.warning("Image reference is not supported: %r", data_ref)
            raise UnsupportedImageReferenceError("Image reference is not supported")

        asset = await self._asset_store.get(data_ref.dblob_asset_id)
        if asset is None:
            logger.warning("Image asset not found: %s", data_ref.dblob_asset_id)
            raise ImageAssetNotFoundError("Image asset not found", data_ref.dblob_asset_id)

        mime_type = asset.data.mime_type
        base64_data = asset.data.base64
        outcome = ResizeOutcome.NOT_REQUESTED
        detail: str | None = None

        if resize_policy:
            outcome, detail, resized = await self._try_resize(mime_type or data_ref.mime_type, base64_data, resize_policy)
            if resized is not None:
                mime_type = resized.mime_type
                base64_data = resized.base64

        mime_type = mime_type or data_ref.mime_type
        if not mime_type:
            logger.warning("Image asset %s has no mime type", data_ref.dblob_asset_id)
            raise ImageMimeTypeUnknownError("Image mime type is unknown", data_ref.dblob_asset_id)

        part = create_inline_image_part(base64_data, mime_type)
        if self._events is not None:
            self._events.log_event(
                {
                    "event": "image_materialized",
                    "asset_id": data_ref.dblob_asset_id,
                    "mime_type": part.mime_type,
                    "resize_policy": str(resize_policy) if resize_policy else None,
                    "resize": outcome.value,
                }
            )
        return MaterializedImage(part=part, resize=outcome, detail=detail)

    async def _try_resize(
        self,
        mime_type: str | None,
        base64_data: str,
        policy: ImageResizePolicy | str,
    ) -> tuple[ResizeOutcome, str | None, ResizedImage | None]:
        """Run the resize collaborator, converting any failure to an outcome."""
        if self._resizer is None:
            return ResizeOutcome.FAILED, "no image resizer configured", None

        try:
            resized = await self._resizer.resize(
                mime_type,
                base64_data,
                ImageResizePolicy(policy),
                self._target_mime_type,
                self._quality,
            )
        except Exception as exc:
            # Resizing is an optimization; the original image is still valid.
            logger.info("Image resize failed (%s), using original image: %s", policy, exc)
            if self._events is not None:
                self._events.log_event(
                    {
                        "event": "image_resize_failed",
                        "resize_policy": str(policy),
                        "error_type": type(exc).__name__,
                        "error_message": str(exc),
                    }
                )
            return ResizeOutcome.FAILED, str(exc), None

        if resized is None:
            return ResizeOutcome.NOT_NEEDED, None, None
        return ResizeOutcome.RESIZED, None, resized


__all__ = ["ImageMaterializer"]
