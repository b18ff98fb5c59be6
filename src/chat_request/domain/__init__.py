"""Domain layer for chat request conversion.

This package contains pure domain models, value objects, and business rules
with no dependencies on frameworks, infrastructure, or external libraries.

The domain layer is the innermost layer and has no dependencies on outer layers.
"""

from chat_request.domain.entities import (
    GenerationRequest,
    ImageAsset,
    ImageAssetData,
    InlineImagePart,
    MaterializedImage,
    MetaReplyToPart,
    ResizedImage,
    ResizeOutcome,
    SystemInstruction,
    Turn,
    TurnRole,
    create_inline_image_part,
    create_meta_reply_to_part,
)
from chat_request.domain.exceptions import (
    ConversionError,
    DomainError,
    ImageAssetNotFoundError,
    ImageMimeTypeUnknownError,
    ImageResizeError,
    InvalidMessageError,
    UnsupportedImageReferenceError,
)
from chat_request.domain.fragments import (
    AttachmentFragment,
    ContentFragment,
    DBlobDataRef,
    DocData,
    DocPart,
    ErrorPart,
    ImageRefPart,
    Message,
    MessageMetadata,
    MessageRole,
    OpaqueDataRef,
    PlaceholderPart,
    SentinelFragment,
    SentinelPart,
    TextPart,
    ToolCallPart,
    ToolResponsePart,
    UrlDataRef,
    VoidFragment,
)
from chat_request.domain.value_objects import AssetId, ImageResizePolicy

__all__ = [
    "AssetId",
    "AttachmentFragment",
    "ContentFragment",
    "ConversionError",
    "DBlobDataRef",
    "DocData",
    "DocPart",
    "DomainError",
    "ErrorPart",
    "GenerationRequest",
    "ImageAsset",
    "ImageAssetData",
    "ImageAssetNotFoundError",
    "ImageMimeTypeUnknownError",
    "ImageRefPart",
    "ImageResizeError",
    "ImageResizePolicy",
    "InlineImagePart",
    "InvalidMessageError",
    "MaterializedImage",
    "Message",
    "MessageMetadata",
    "MessageRole",
    "MetaReplyToPart",
    "OpaqueDataRef",
    "PlaceholderPart",
    "ResizeOutcome",
    "ResizedImage",
    "SentinelFragment",
    "SentinelPart",
    "SystemInstruction",
    "TextPart",
    "ToolCallPart",
    "ToolResponsePart",
    "Turn",
    "TurnRole",
    "UnsupportedImageReferenceError",
    "UrlDataRef",
    "VoidFragment",
    "create_inline_image_part",
    "create_meta_reply_to_part",
]
