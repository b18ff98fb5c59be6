"""Conversation input model: messages, fragments and parts.

This module defines the read-only structures produced by the chat storage
layer. A message is an ordered list of fragments; content and attachment
fragments carry a typed part, while void and sentinel fragments carry nothing
that is relevant for generation.

Design Principles:
    - Immutability: All entities are frozen dataclasses (slots=True)
    - Closed variants: Each fragment/part kind is its own class, tagged by
      ``ft``/``pt`` class attributes mirroring the stored JSON
    - Forward compatibility: Unknown shapes are represented by sentinel
      variants instead of failing at load time

Key Entities:
    - Message / MessageMetadata: A chat message and its side-channel metadata
    - ContentFragment / AttachmentFragment: Fragments carrying a part
    - VoidFragment / SentinelFragment: Fragments without generation content
    - TextPart, ImageRefPart, DocPart, ErrorPart, ToolCallPart,
      ToolResponsePart, PlaceholderPart, SentinelPart: Fragment payloads
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, Literal, TypeGuard


class MessageRole(StrEnum):
    """Roles a stored message may carry."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class PartType(StrEnum):
    """Part tags (``pt``) as written by the storage layer."""

    TEXT = "text"
    IMAGE_REF = "image_ref"
    DOC = "doc"
    ERROR = "error"
    TOOL_CALL = "tool_call"
    TOOL_RESPONSE = "tool_response"
    PLACEHOLDER = "ph"
    SENTINEL = "_pt_sentinel"


class FragmentType(StrEnum):
    """Fragment tags (``ft``) as written by the storage layer."""

    CONTENT = "content"
    ATTACHMENT = "attachment"
    VOID = "void"
    SENTINEL = "_ft_sentinel"


# ============================================================================
# Data References
# ============================================================================


@dataclass(slots=True, frozen=True)
class DBlobDataRef:
    """Reference to binary data held by the local asset store.

    Attributes:
        dblob_asset_id: Opaque asset identifier. May be empty on corrupted
            records, in which case the reference cannot be resolved.
        mime_type: Mime type declared when the asset was stored. Used as the
            last fallback when the asset itself carries no mime type.
        bytes_size: Size of the stored data, if known.
    """

    reftype: ClassVar[Literal["dblob"]] = "dblob"

    dblob_asset_id: str
    mime_type: str
    bytes_size: int | None = None


@dataclass(slots=True, frozen=True)
class UrlDataRef:
    """Reference to data available at a URL (not resolvable here)."""

    reftype: ClassVar[Literal["url"]] = "url"

    url: str
    mime_type: str | None = None


@dataclass(slots=True, frozen=True)
class OpaqueDataRef:
    """Reference of a kind this package does not know how to resolve.

    Attributes:
        raw_reftype: The ``reftype`` found on the stored record.
    """

    reftype: ClassVar[Literal["opaque"]] = "opaque"

    raw_reftype: str | None = None
    mime_type: str | None = None


type DataRef = DBlobDataRef | UrlDataRef | OpaqueDataRef


# ============================================================================
# Parts
# ============================================================================


@dataclass(slots=True, frozen=True)
class TextPart:
    """Plain text content."""

    pt: ClassVar[Literal["text"]] = "text"

    text: str


@dataclass(slots=True, frozen=True)
class ImageRefPart:
    """Image stored outside the message, referenced by ``data_ref``.

    Attributes:
        data_ref: Where the image bytes live. Only ``DBlobDataRef`` can be
            resolved by the image materializer.
        alt_text: Optional textual description of the image.
        width: Image width in pixels, if known.
        height: Image height in pixels, if known.
    """

    pt: ClassVar[Literal["image_ref"]] = "image_ref"

    data_ref: DataRef
    alt_text: str | None = None
    width: int | None = None
    height: int | None = None


@dataclass(slots=True, frozen=True)
class DocData:
    """Inline document payload."""

    text: str
    mime_type: str | None = None


@dataclass(slots=True, frozen=True)
class DocPart:
    """Document attached to a message (e.g. a pasted file).

    Attributes:
        vdt: Visual document type, a mime-like label (``text/markdown``,
            ``application/vnd.code``, ...).
        data: Document text and its mime type.
        ref: Identifier of the document (file name, URL, ...).
        l1_title: Short title shown to the user.
        version: Document revision, incremented on edits.
    """

    pt: ClassVar[Literal["doc"]] = "doc"

    vdt: str
    data: DocData
    ref: str = ""
    l1_title: str = ""
    version: int | None = None


@dataclass(slots=True, frozen=True)
class ErrorPart:
    """Error message recorded in place of model output."""

    pt: ClassVar[Literal["error"]] = "error"

    error: str


@dataclass(slots=True, frozen=True)
class FunctionCallInvocation:
    """A named function invocation with JSON-encoded arguments."""

    ctype: ClassVar[Literal["function_call"]] = "function_call"

    name: str
    args: str | None = None


@dataclass(slots=True, frozen=True)
class CodeExecutionInvocation:
    """A request to execute code on behalf of the model."""

    ctype: ClassVar[Literal["code_execution"]] = "code_execution"

    language: str
    code: str
    variant: str | None = None


@dataclass(slots=True, frozen=True)
class ToolCallPart:
    """Tool invocation emitted by the model.

    Attributes:
        id: Call identifier, used to correlate the matching tool response.
        invocation: What the model asked to run.
    """

    pt: ClassVar[Literal["tool_call"]] = "tool_call"

    id: str
    invocation: FunctionCallInvocation | CodeExecutionInvocation


@dataclass(slots=True, frozen=True)
class FunctionCallResponse:
    """Result of a function invocation."""

    rtype: ClassVar[Literal["function_call"]] = "function_call"

    name: str
    result: str


@dataclass(slots=True, frozen=True)
class CodeExecutionResponse:
    """Result of a code execution."""

    rtype: ClassVar[Literal["code_execution"]] = "code_execution"

    result: str
    executor: str | None = None


@dataclass(slots=True, frozen=True)
class ToolResponsePart:
    """Outcome of a tool call.

    Attributes:
        id: Identifier of the tool call this responds to.
        response: Function or code execution result.
        error: False on success; True or an error description on failure.
    """

    pt: ClassVar[Literal["tool_response"]] = "tool_response"

    id: str
    response: FunctionCallResponse | CodeExecutionResponse
    error: bool | str = False


@dataclass(slots=True, frozen=True)
class PlaceholderPart:
    """Transient placeholder (e.g. "thinking...") shown while streaming."""

    pt: ClassVar[Literal["ph"]] = "ph"

    text: str = ""


@dataclass(slots=True, frozen=True)
class SentinelPart:
    """Part of an unrecognized shape.

    Attributes:
        raw_type: The tag found on the stored record, kept for diagnostics.
    """

    pt: ClassVar[Literal["_pt_sentinel"]] = "_pt_sentinel"

    raw_type: str | None = None


type Part = (
    TextPart
    | ImageRefPart
    | DocPart
    | ErrorPart
    | ToolCallPart
    | ToolResponsePart
    | PlaceholderPart
    | SentinelPart
)


# ============================================================================
# Fragments
# ============================================================================


@dataclass(slots=True, frozen=True)
class ContentFragment:
    """Fragment carrying message content authored by the user or the model."""

    ft: ClassVar[Literal["content"]] = "content"

    part: TextPart | ImageRefPart | ErrorPart | ToolCallPart | ToolResponsePart | PlaceholderPart | SentinelPart
    fid: str = ""


@dataclass(slots=True, frozen=True)
class AttachmentFragment:
    """Fragment carrying an attachment (document or image)."""

    ft: ClassVar[Literal["attachment"]] = "attachment"

    part: DocPart | ImageRefPart | SentinelPart
    title: str = ""
    fid: str = ""


@dataclass(slots=True, frozen=True)
class VoidFragment:
    """Fragment with UI-only content (annotations, reasoning traces, ...)."""

    ft: ClassVar[Literal["void"]] = "void"

    fid: str = ""


@dataclass(slots=True, frozen=True)
class SentinelFragment:
    """Fragment of an unrecognized shape."""

    ft: ClassVar[Literal["_ft_sentinel"]] = "_ft_sentinel"

    raw_type: str | None = None
    fid: str = ""


type Fragment = ContentFragment | AttachmentFragment | VoidFragment | SentinelFragment


# ============================================================================
# Messages
# ============================================================================


@dataclass(slots=True, frozen=True)
class MessageMetadata:
    """Side-channel information attached to a message.

    Attributes:
        in_reply_to_text: Text the user selected and replied to, if any.
    """

    in_reply_to_text: str | None = None


@dataclass(slots=True, frozen=True)
class Message:
    """A single stored chat message.

    The role is kept as a plain string so that records written by newer
    producers (with roles this package does not know) can still be loaded and
    then skipped during conversion.

    Attributes:
        role: ``system``, ``user`` or ``assistant`` (see MessageRole).
        fragments: Ordered message content.
        metadata: Optional side-channel metadata.
        id: Message identifier.
    """

    role: str
    fragments: tuple[Fragment, ...] = field(default_factory=tuple)
    metadata: MessageMetadata | None = None
    id: str = ""


# ============================================================================
# Type Guards
# ============================================================================


def is_content_fragment(fragment: Fragment) -> TypeGuard[ContentFragment]:
    """Return True if the fragment is a content fragment."""
    return isinstance(fragment, ContentFragment)


def is_attachment_fragment(fragment: Fragment) -> TypeGuard[AttachmentFragment]:
    """Return True if the fragment is an attachment fragment."""
    return isinstance(fragment, AttachmentFragment)


def is_content_or_attachment_fragment(
    fragment: Fragment,
) -> TypeGuard[ContentFragment | AttachmentFragment]:
    """Return True if the fragment carries a part."""
    return isinstance(fragment, ContentFragment | AttachmentFragment)


def is_text_part(part: Part) -> TypeGuard[TextPart]:
    """Return True if the part is a text part."""
    return isinstance(part, TextPart)


__all__ = [
    "AttachmentFragment",
    "CodeExecutionInvocation",
    "CodeExecutionResponse",
    "ContentFragment",
    "DBlobDataRef",
    "DataRef",
    "DocData",
    "DocPart",
    "ErrorPart",
    "Fragment",
    "FragmentType",
    "FunctionCallInvocation",
    "FunctionCallResponse",
    "ImageRefPart",
    "Message",
    "MessageMetadata",
    "MessageRole",
    "OpaqueDataRef",
    "Part",
    "PartType",
    "PlaceholderPart",
    "SentinelFragment",
    "SentinelPart",
    "TextPart",
    "ToolCallPart",
    "ToolResponsePart",
    "UrlDataRef",
    "VoidFragment",
    "is_attachment_fragment",
    "is_content_fragment",
    "is_content_or_attachment_fragment",
    "is_text_part",
]
