"""Reusable test utilities and helpers for chat request tests.

This module provides builders for stored messages and fake collaborators
used across test files.
"""

from __future__ import annotations

import base64
import io
from typing import Any

from PIL import Image

from chat_request.domain.entities import ResizedImage
from chat_request.domain.exceptions import ImageResizeError
from chat_request.domain.fragments import (
    AttachmentFragment,
    ContentFragment,
    DBlobDataRef,
    DocData,
    DocPart,
    ErrorPart,
    FunctionCallInvocation,
    FunctionCallResponse,
    ImageRefPart,
    Message,
    MessageMetadata,
    TextPart,
    ToolCallPart,
    ToolResponsePart,
)


def make_image_base64(
    size: tuple[int, int] = (100, 100),
    mode: str = "RGB",
    image_format: str = "PNG",
    color: Any = (255, 0, 0),
) -> str:
    """Create a real image and return its base64-encoded bytes."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=image_format)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def decode_image(base64_data: str) -> Image.Image:
    """Decode base64 image bytes into a loaded PIL image."""
    img = Image.open(io.BytesIO(base64.b64decode(base64_data)))
    img.load()
    return img


def text(value: str) -> ContentFragment:
    return ContentFragment(part=TextPart(text=value))


def image_ref(asset_id: str, mime_type: str = "image/png") -> ContentFragment:
    return ContentFragment(part=ImageRefPart(data_ref=DBlobDataRef(dblob_asset_id=asset_id, mime_type=mime_type)))


def doc(body: str, title: str = "notes.md") -> AttachmentFragment:
    return AttachmentFragment(
        part=DocPart(vdt="text/markdown", data=DocData(text=body, mime_type="text/markdown"), ref=title, l1_title=title),
        title=title,
    )


def error(message: str) -> ContentFragment:
    return ContentFragment(part=ErrorPart(error=message))


def tool_call(call_id: str = "call-1", name: str = "get_weather", args: str = '{"city": "Paris"}') -> ContentFragment:
    return ContentFragment(part=ToolCallPart(id=call_id, invocation=FunctionCallInvocation(name=name, args=args)))


def tool_response(call_id: str = "call-1", name: str = "get_weather", result: str = "sunny") -> ContentFragment:
    return ContentFragment(part=ToolResponsePart(id=call_id, response=FunctionCallResponse(name=name, result=result)))


def system_message(*fragments) -> Message:
    return Message(role="system", fragments=tuple(fragments))


def user_message(*fragments, reply_to: str | None = None, message_id: str = "") -> Message:
    metadata = MessageMetadata(in_reply_to_text=reply_to) if reply_to is not None else None
    return Message(role="user", fragments=tuple(fragments), metadata=metadata, id=message_id)


def assistant_message(*fragments, message_id: str = "") -> Message:
    return Message(role="assistant", fragments=tuple(fragments), id=message_id)


class RecordingEventLogger:
    """ConversionLoggerInterface implementation that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def log_event(self, data: dict[str, Any]) -> None:
        self.events.append(dict(data))

    def of_type(self, event: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e.get("event") == event]


class FakeResizer:
    """ImageResizerInterface implementation with scripted behavior.

    Args:
        result: Value returned by resize() (ResizedImage or None).
        fail: If True, resize() raises ImageResizeError.
    """

    def __init__(self, result: ResizedImage | None = None, *, fail: bool = False) -> None:
        self.result = result
        self.fail = fail
        self.calls: list[tuple[Any, ...]] = []

    async def resize(self, mime_type, base64_data, policy, target_mime_type, quality):
        self.calls.append((mime_type, base64_data, policy, target_mime_type, quality))
        if self.fail:
            raise ImageResizeError("resize backend unavailable")
        return self.result
