"""Pydantic models for stored chat messages.

Conversations are persisted as JSON by the chat storage layer. These models
validate that JSON and are mapped to domain entities by wire.mappers.

Key Behaviors:
    - camelCase JSON keys (``dblobAssetId``, ``inReplyToText``, ...) with
      snake_case attribute names; both are accepted on input
    - Unknown extra keys are ignored (newer producers add fields)
    - Unknown ``pt``/``ft``/``reftype``/``ctype``/``rtype`` tags validate into
      catch-all models instead of failing, so that the conversion can drop
      them with a diagnostic

Key Models:
    - WireMessage / WireMessageMetadata
    - WireFragment
    - WireTextPart, WireImageRefPart, WireDocPart, WireErrorPart,
      WireToolCallPart, WireToolResponsePart, WirePlaceholderPart,
      WireUnknownPart
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag
from pydantic.alias_generators import to_camel

WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    frozen=True,
)


def _tag_of(value: Any, key: str, known: frozenset[str]) -> str:
    """Return the tag of a raw or validated value, or ``"unknown"``."""
    tag = value.get(key) if isinstance(value, dict) else getattr(value, key, None)
    return tag if isinstance(tag, str) and tag in known else "unknown"


# ============================================================================
# Data References
# ============================================================================


class WireDataRef(BaseModel):
    """Image data reference (``dblob``, ``url`` or an unknown kind)."""

    model_config = WIRE_CONFIG

    reftype: str = Field(..., description="Reference kind")
    dblob_asset_id: str | None = Field(None, description="Asset store id (dblob)")
    url: str | None = Field(None, description="Image URL (url)")
    mime_type: str | None = Field(None, description="Declared mime type")
    bytes_size: int | None = Field(None, ge=0, description="Stored size in bytes")


# ============================================================================
# Parts
# ============================================================================


class WireTextPart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["text"]
    text: str


class WireImageRefPart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["image_ref"]
    data_ref: WireDataRef
    alt_text: str | None = None
    width: int | None = Field(None, ge=0)
    height: int | None = Field(None, ge=0)


class WireDocData(BaseModel):
    model_config = WIRE_CONFIG

    idt: str = "text"
    text: str
    mime_type: str | None = None


class WireDocPart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["doc"]
    vdt: str
    data: WireDocData
    ref: str = ""
    l1_title: str = ""
    version: int | None = None


class WireErrorPart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["error"]
    error: str


class WireInvocation(BaseModel):
    """Tool invocation; fields depend on ``ctype``."""

    model_config = WIRE_CONFIG

    ctype: str
    name: str | None = None
    args: str | None = None
    language: str | None = None
    code: str | None = None
    variant: str | None = None


class WireToolCallPart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["tool_call"]
    id: str
    call: WireInvocation


class WireToolResult(BaseModel):
    """Tool result; fields depend on ``rtype``."""

    model_config = WIRE_CONFIG

    rtype: str
    name: str | None = None
    result: str = ""
    executor: str | None = None


class WireToolResponsePart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["tool_response"]
    id: str
    response: WireToolResult
    error: bool | str = False


class WirePlaceholderPart(BaseModel):
    model_config = WIRE_CONFIG

    pt: Literal["ph"]
    p_text: str = ""


class WireUnknownPart(BaseModel):
    """Any part with a sentinel or unrecognized ``pt``."""

    model_config = ConfigDict(frozen=True, extra="allow")

    pt: str | None = None


KNOWN_PART_TAGS = frozenset({"text", "image_ref", "doc", "error", "tool_call", "tool_response", "ph"})

WirePart = Annotated[
    Annotated[WireTextPart, Tag("text")]
    | Annotated[WireImageRefPart, Tag("image_ref")]
    | Annotated[WireDocPart, Tag("doc")]
    | Annotated[WireErrorPart, Tag("error")]
    | Annotated[WireToolCallPart, Tag("tool_call")]
    | Annotated[WireToolResponsePart, Tag("tool_response")]
    | Annotated[WirePlaceholderPart, Tag("ph")]
    | Annotated[WireUnknownPart, Tag("unknown")],
    Discriminator(lambda value: _tag_of(value, "pt", KNOWN_PART_TAGS)),
]


# ============================================================================
# Fragments and Messages
# ============================================================================


class WireFragment(BaseModel):
    """Message fragment. ``part`` is present on content/attachment fragments."""

    model_config = WIRE_CONFIG

    ft: str
    f_id: str = ""
    title: str = ""
    part: WirePart | None = None


class WireMessageMetadata(BaseModel):
    model_config = WIRE_CONFIG

    in_reply_to_text: str | None = None


class WireMessage(BaseModel):
    """Stored chat message."""

    model_config = WIRE_CONFIG

    id: str = ""
    role: str = Field(..., min_length=1, description="system, user or assistant")
    fragments: list[WireFragment] = Field(default_factory=list)
    metadata: WireMessageMetadata | None = None


__all__ = [
    "KNOWN_PART_TAGS",
    "WireDataRef",
    "WireDocData",
    "WireDocPart",
    "WireErrorPart",
    "WireFragment",
    "WireImageRefPart",
    "WireInvocation",
    "WireMessage",
    "WireMessageMetadata",
    "WirePart",
    "WirePlaceholderPart",
    "WireTextPart",
    "WireToolCallPart",
    "WireToolResponsePart",
    "WireToolResult",
    "WireUnknownPart",
]
