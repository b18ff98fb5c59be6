"""Mappers between the wire format and domain entities.

This module converts stored-message JSON (validated by wire.models) into
domain messages, and generation requests into JSON-ready dictionaries.

Design Principles:
    - Unidirectional: Wire -> Domain (messages) and Domain -> Wire (requests)
    - Isolated: All mapping logic centralized in this module
    - Forgiving input: Unknown tags become sentinel variants, never errors
    - Strict output: Only the closed set of output parts is serialized

Key Mappers:
    - wire_to_domain_message / messages_from_json: stored JSON -> Message
    - domain_to_wire_part / domain_to_wire_request: GenerationRequest -> dict
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from chat_request.domain.entities import InlineImagePart, MetaReplyToPart
from chat_request.domain.exceptions import InvalidMessageError
from chat_request.domain.fragments import (
    AttachmentFragment,
    CodeExecutionInvocation,
    CodeExecutionResponse,
    ContentFragment,
    DBlobDataRef,
    DocData,
    DocPart,
    ErrorPart,
    FragmentType,
    FunctionCallInvocation,
    FunctionCallResponse,
    ImageRefPart,
    Message,
    MessageMetadata,
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
from chat_request.wire.models import (
    WireDataRef,
    WireDocPart,
    WireErrorPart,
    WireFragment,
    WireImageRefPart,
    WireMessage,
    WirePlaceholderPart,
    WireTextPart,
    WireToolCallPart,
    WireToolResponsePart,
    WireUnknownPart,
)

if TYPE_CHECKING:
    from chat_request.domain.entities import GenerationRequest, OutputPart, Turn
    from chat_request.domain.fragments import DataRef, Fragment, Part

_MESSAGES_ADAPTER: TypeAdapter[list[WireMessage]] = TypeAdapter(list[WireMessage])

# ============================================================================
# Wire -> Domain
# ============================================================================


def wire_to_domain_data_ref(wire_ref: WireDataRef) -> DataRef:
    """Convert a wire data reference to a domain data reference.

    A dblob reference without an asset id is kept as a DBlobDataRef with an
    empty id; the image materializer rejects it as unsupported.
    """
    match wire_ref.reftype:
        case "dblob":
            return DBlobDataRef(
                dblob_asset_id=wire_ref.dblob_asset_id or "",
                mime_type=wire_ref.mime_type or "",
                bytes_size=wire_ref.bytes_size,
            )
        case "url":
            return UrlDataRef(url=wire_ref.url or "", mime_type=wire_ref.mime_type)
        case other:
            return OpaqueDataRef(raw_reftype=other, mime_type=wire_ref.mime_type)


def wire_to_domain_part(wire_part: Any) -> Part:
    """Convert a validated wire part to a domain part.

    Unknown tags, and tool calls/responses of unknown kinds, become
    SentinelPart carrying the original tag.
    """
    match wire_part:
        case WireTextPart(text=text):
            return TextPart(text=text)
        case WireImageRefPart():
            return ImageRefPart(
                data_ref=wire_to_domain_data_ref(wire_part.data_ref),
                alt_text=wire_part.alt_text,
                width=wire_part.width,
                height=wire_part.height,
            )
        case WireDocPart():
            return DocPart(
                vdt=wire_part.vdt,
                data=DocData(text=wire_part.data.text, mime_type=wire_part.data.mime_type),
                ref=wire_part.ref,
                l1_title=wire_part.l1_title,
                version=wire_part.version,
            )
        case WireErrorPart(error=error):
            return ErrorPart(error=error)
        case WireToolCallPart(id=call_id, call=call):
            match call.ctype:
                case "function_call" if call.name:
                    return ToolCallPart(id=call_id, invocation=FunctionCallInvocation(name=call.name, args=call.args))
                case "code_execution" if call.code is not None:
                    return ToolCallPart(
                        id=call_id,
                        invocation=CodeExecutionInvocation(
                            language=call.language or "",
                            code=call.code,
                            variant=call.variant,
                        ),
                    )
            return SentinelPart(raw_type=f"tool_call:{call.ctype}")
        case WireToolResponsePart(id=call_id, response=response, error=error):
            match response.rtype:
                case "function_call" if response.name:
                    return ToolResponsePart(
                        id=call_id,
                        response=FunctionCallResponse(name=response.name, result=response.result),
                        error=error,
                    )
                case "code_execution":
                    return ToolResponsePart(
                        id=call_id,
                        response=CodeExecutionResponse(result=response.result, executor=response.executor),
                        error=error,
                    )
            return SentinelPart(raw_type=f"tool_response:{response.rtype}")
        case WirePlaceholderPart(p_text=text):
            return PlaceholderPart(text=text)
        case WireUnknownPart(pt=pt):
            return SentinelPart(raw_type=pt)
        case _:
            return SentinelPart(raw_type=type(wire_part).__name__)


def wire_to_domain_fragment(wire_fragment: WireFragment) -> Fragment:
    """Convert a wire fragment to a domain fragment."""
    part = wire_to_domain_part(wire_fragment.part) if wire_fragment.part is not None else None
    match wire_fragment.ft:
        case FragmentType.CONTENT if part is not None and not isinstance(part, DocPart):
            return ContentFragment(part=part, fid=wire_fragment.f_id)
        case FragmentType.ATTACHMENT if isinstance(part, DocPart | ImageRefPart | SentinelPart):
            return AttachmentFragment(part=part, title=wire_fragment.title, fid=wire_fragment.f_id)
        case FragmentType.VOID:
            return VoidFragment(fid=wire_fragment.f_id)
        case _:
            return SentinelFragment(raw_type=wire_fragment.ft, fid=wire_fragment.f_id)


def wire_to_domain_message(wire_message: WireMessage) -> Message:
    """Convert a validated wire message to a domain message."""
    metadata = None
    if wire_message.metadata is not None:
        metadata = MessageMetadata(in_reply_to_text=wire_message.metadata.in_reply_to_text)
    return Message(
        role=wire_message.role,
        fragments=tuple(wire_to_domain_fragment(f) for f in wire_message.fragments),
        metadata=metadata,
        id=wire_message.id,
    )


def messages_from_json(payload: str | bytes | list[dict[str, Any]]) -> list[Message]:
    """Validate stored messages and convert them to domain messages.

    Args:
        payload: JSON text, or already-decoded list of message dicts.

    Returns:
        Domain messages in payload order.

    Raises:
        InvalidMessageError: If the payload is not valid JSON or does not
            match the stored message schema.
    """
    try:
        if isinstance(payload, str | bytes):
            wire_messages = _MESSAGES_ADAPTER.validate_json(payload)
        else:
            wire_messages = _MESSAGES_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise InvalidMessageError(f"Invalid stored messages: {exc.error_count()} validation error(s)") from exc
    return [wire_to_domain_message(m) for m in wire_messages]


# ============================================================================
# Domain -> Wire
# ============================================================================


def domain_to_wire_part(part: OutputPart) -> dict[str, Any]:
    """Serialize an output part to a JSON-ready dict tagged by ``pt``.

    Raises:
        TypeError: If part is not one of the output part types.
    """
    match part:
        case TextPart(text=text):
            return {"pt": "text", "text": text}
        case InlineImagePart(mime_type=mime_type, base64=data):
            return {"pt": "inline_image", "mimeType": mime_type, "base64": data}
        case DocPart():
            doc: dict[str, Any] = {
                "pt": "doc",
                "vdt": part.vdt,
                "data": {"idt": "text", "text": part.data.text},
                "ref": part.ref,
                "l1Title": part.l1_title,
            }
            if part.data.mime_type:
                doc["data"]["mimeType"] = part.data.mime_type
            if part.version is not None:
                doc["version"] = part.version
            return doc
        case ToolCallPart(id=call_id, invocation=FunctionCallInvocation(name=name, args=args)):
            return {"pt": "tool_call", "id": call_id, "call": {"ctype": "function_call", "name": name, "args": args}}
        case ToolCallPart(id=call_id, invocation=CodeExecutionInvocation() as invocation):
            return {
                "pt": "tool_call",
                "id": call_id,
                "call": {
                    "ctype": "code_execution",
                    "variant": invocation.variant,
                    "language": invocation.language,
                    "code": invocation.code,
                },
            }
        case MetaReplyToPart(reply_to=reply_to):
            return {"pt": "meta_reply_to", "replyTo": reply_to}
        case _:
            raise TypeError(f"Not an output part: {type(part).__name__}")


def domain_to_wire_turn(turn: Turn) -> dict[str, Any]:
    """Serialize a turn to a JSON-ready dict."""
    return {"role": turn.role.value, "parts": [domain_to_wire_part(p) for p in turn.parts]}


def domain_to_wire_request(request: GenerationRequest) -> dict[str, Any]:
    """Serialize a generation request to a JSON-ready dict.

    ``systemMessage`` is omitted when the request has no system preamble.
    """
    payload: dict[str, Any] = {}
    if request.system_message is not None:
        payload["systemMessage"] = {"parts": [domain_to_wire_part(p) for p in request.system_message.parts]}
    payload["chatSequence"] = [domain_to_wire_turn(t) for t in request.chat_sequence]
    return payload


def request_to_json(request: GenerationRequest, *, indent: int | None = None) -> str:
    """Serialize a generation request to JSON text."""
    return json.dumps(domain_to_wire_request(request), indent=indent, ensure_ascii=False)


__all__ = [
    "domain_to_wire_part",
    "domain_to_wire_request",
    "domain_to_wire_turn",
    "messages_from_json",
    "request_to_json",
    "wire_to_domain_data_ref",
    "wire_to_domain_fragment",
    "wire_to_domain_message",
    "wire_to_domain_part",
]
