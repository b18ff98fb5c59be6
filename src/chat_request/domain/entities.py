"""Domain entities for generation requests.

This module defines the output side of the conversion: the generation request
handed to an inference backend, its turns and the parts that make up each
turn. It also defines the image asset and resize result entities exchanged
with the asset store and resize collaborators.

Design Principles:
    - Immutability: All entities are frozen dataclasses (slots=True)
    - Validation: Business rules enforced in __post_init__ methods
    - No I/O: Entities contain no file/network operations

Key Entities:
    - GenerationRequest: Optional system preamble plus ordered turns
    - SystemInstruction: Text-only system preamble
    - Turn: Role-tagged ordered sequence of output parts
    - InlineImagePart / MetaReplyToPart: Parts created during conversion
    - ImageAsset / ImageAssetData: Binary image held by the asset store
    - ResizedImage: Output of the resize collaborator
    - MaterializedImage: Inline image plus the outcome of the resize step
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, Literal

from chat_request.domain.fragments import DocPart, TextPart, ToolCallPart


class TurnRole(StrEnum):
    """Roles of turns in a generation request."""

    USER = "user"
    MODEL = "model"


# ============================================================================
# Output Parts
# ============================================================================


@dataclass(slots=True, frozen=True)
class InlineImagePart:
    """Image carried inline as base64-encoded bytes.

    Attributes:
        mime_type: Image mime type (e.g. ``image/png``). Must not be empty.
        base64: Base64-encoded image bytes.

    Raises:
        ValueError: If mime_type is empty.
    """

    pt: ClassVar[Literal["inline_image"]] = "inline_image"

    mime_type: str
    base64: str

    def __post_init__(self) -> None:
        if not self.mime_type:
            raise ValueError("Inline image mime type cannot be empty")


@dataclass(slots=True, frozen=True)
class MetaReplyToPart:
    """Synthetic part telling the model which text the user is replying to.

    Attributes:
        reply_to: The quoted text.
    """

    pt: ClassVar[Literal["meta_reply_to"]] = "meta_reply_to"

    reply_to: str


type OutputPart = TextPart | InlineImagePart | DocPart | ToolCallPart | MetaReplyToPart


def create_inline_image_part(base64: str, mime_type: str) -> InlineImagePart:
    """Create an inline image part from base64 bytes and a mime type."""
    return InlineImagePart(mime_type=mime_type, base64=base64)


def create_meta_reply_to_part(reply_to: str) -> MetaReplyToPart:
    """Create the synthetic reply-to part appended to user turns."""
    return MetaReplyToPart(reply_to=reply_to)


# ============================================================================
# Request
# ============================================================================


@dataclass(slots=True, frozen=True)
class SystemInstruction:
    """System preamble of a generation request. Text parts only."""

    parts: tuple[TextPart, ...] = ()


@dataclass(slots=True, frozen=True)
class Turn:
    """One entry of the chat sequence.

    Attributes:
        role: ``user`` or ``model``.
        parts: Ordered parts. May be empty when every source fragment was
            dropped.
    """

    role: TurnRole
    parts: tuple[OutputPart, ...] = ()


@dataclass(slots=True, frozen=True)
class GenerationRequest:
    """Normalized request consumed by inference backends.

    Attributes:
        chat_sequence: Turns in conversation order.
        system_message: System preamble, present only when the conversation
            started with a system message.
    """

    chat_sequence: tuple[Turn, ...] = ()
    system_message: SystemInstruction | None = None


# ============================================================================
# Image Assets
# ============================================================================


@dataclass(slots=True, frozen=True)
class ImageAssetData:
    """Encoded image bytes and their mime type.

    Attributes:
        base64: Base64-encoded image bytes.
        mime_type: Image mime type. None when the store did not record one.
    """

    base64: str
    mime_type: str | None = None


@dataclass(slots=True, frozen=True)
class ImageAsset:
    """Image held by the asset store."""

    asset_id: str
    data: ImageAssetData
    width: int | None = None
    height: int | None = None


@dataclass(slots=True, frozen=True)
class ResizedImage:
    """Re-encoded image returned by the resize collaborator."""

    mime_type: str
    base64: str


class ResizeOutcome(StrEnum):
    """What happened to an image during materialization.

    Attributes:
        NOT_REQUESTED: No resize policy was given.
        RESIZED: The image was re-encoded.
        NOT_NEEDED: The image already satisfied the policy.
        FAILED: Resizing failed; the original image is used (degraded).
    """

    NOT_REQUESTED = "not_requested"
    RESIZED = "resized"
    NOT_NEEDED = "not_needed"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class MaterializedImage:
    """Result of a successful image materialization.

    Fatal failures never produce this entity; they raise ConversionError.

    Attributes:
        part: The inline image part to place in the turn.
        resize: Outcome of the resize step.
        detail: Failure description when resize is FAILED.
    """

    part: InlineImagePart
    resize: ResizeOutcome = ResizeOutcome.NOT_REQUESTED
    detail: str | None = field(default=None, compare=False)

    @property
    def degraded(self) -> bool:
        """True when the image was sent without the requested resize."""
        return self.resize is ResizeOutcome.FAILED


__all__ = [
    "GenerationRequest",
    "ImageAsset",
    "ImageAssetData",
    "InlineImagePart",
    "MaterializedImage",
    "MetaReplyToPart",
    "OutputPart",
    "ResizeOutcome",
    "ResizedImage",
    "SystemInstruction",
    "Turn",
    "TurnRole",
    "create_inline_image_part",
    "create_meta_reply_to_part",
]
