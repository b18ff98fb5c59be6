"""Conversion of a stored conversation into a generation request.

The reducer walks the message list once, in order. A leading system message
becomes the system preamble; user and assistant messages become user and
model turns; messages with any other role are dropped with a diagnostic.

Fragment folding is delegated to TurnBuilder, which in turn delegates image
references to ImageMaterializer. Every asset lookup and resize call is awaited
in sequence, so the order of turns and parts always mirrors the input.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from chat_request.application.image_materializer import ImageMaterializer
from chat_request.application.turn_builder import TurnBuilder
from chat_request.domain.entities import (
    GenerationRequest,
    SystemInstruction,
    Turn,
    create_meta_reply_to_part,
)
from chat_request.domain.exceptions import ConversionError
from chat_request.domain.fragments import MessageRole, is_content_fragment, is_text_part
from chat_request.domain.value_objects import (
    MODEL_IMAGE_RESCALE_MIMETYPE,
    MODEL_IMAGE_RESCALE_QUALITY,
    MODEL_TURN_RESIZE_POLICY,
    ImageResizePolicy,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chat_request.application.interfaces import (
        AssetStoreInterface,
        ConversionLoggerInterface,
        ImageResizerInterface,
    )
    from chat_request.domain.fragments import Message, TextPart

logger = logging.getLogger(__name__)


class ConversationReducer:
    """Reduces an ordered list of messages to a GenerationRequest.

    Attributes:
        _turn_builder: Folds each message's fragments into a turn.
        _events: Optional structured event logger.
    """

    def __init__(
        self,
        turn_builder: TurnBuilder,
        events: ConversionLoggerInterface | None = None,
    ) -> None:
        self._turn_builder = turn_builder
        self._events = events

    async def reduce(self, messages: Sequence[Message]) -> GenerationRequest:
        """Convert messages into a generation request.

        Args:
            messages: Conversation in order. A system message is honored only
                at position 0.

        Returns:
            GenerationRequest with a system preamble (when the first message
            is a system message) and one turn per user/assistant message.

        Raises:
            ConversionError: An image reference could not be materialized.
                The whole conversion is aborted.
        """
        start_time = time.perf_counter()
        system_parts: list[TextPart] | None = None
        chat_sequence: list[Turn] = []

        try:
            for index, message in enumerate(messages):
                if index == 0 and message.role == MessageRole.SYSTEM:
                    system_parts = self._collect_system_parts(message)
                    continue

                match message.role:
                    case MessageRole.USER:
                        turn = await self._turn_builder.build_user_turn(message.fragments)
                        reply_to = message.metadata.in_reply_to_text if message.metadata else None
                        if reply_to:
                            turn = Turn(
                                role=turn.role,
                                parts=(*turn.parts, create_meta_reply_to_part(reply_to)),
                            )
                        chat_sequence.append(turn)

                    case MessageRole.ASSISTANT:
                        chat_sequence.append(await self._turn_builder.build_model_turn(message.fragments))

                    case _:
                        logger.warning("Dropping message %r: unexpected message role %r", message.id, message.role)
                        self._log_event(
                            {
                                "event": "message_dropped",
                                "message_id": message.id,
                                "role": message.role,
                                "index": index,
                            }
                        )
        except ConversionError as exc:
            self._log_event(
                {
                    "event": "conversion_failed",
                    "message_count": len(messages),
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                }
            )
            raise

        request = GenerationRequest(
            chat_sequence=tuple(chat_sequence),
            system_message=SystemInstruction(parts=tuple(system_parts)) if system_parts is not None else None,
        )
        self._log_event(
            {
                "event": "conversion_completed",
                "message_count": len(messages),
                "turn_count": len(request.chat_sequence),
                "has_system_message": request.system_message is not None,
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 3),
            }
        )
        return request

    def _collect_system_parts(self, message: Message) -> list[TextPart]:
        parts: list[TextPart] = []
        for fragment in message.fragments:
            if is_content_fragment(fragment) and is_text_part(fragment.part):
                parts.append(fragment.part)
            else:
                logger.warning("Dropping unexpected system fragment: %r", fragment)
                self._log_event(
                    {
                        "event": "fragment_dropped",
                        "role": MessageRole.SYSTEM.value,
                        "fragment_type": fragment.ft,
                        "reason": "unexpected system fragment",
                    }
                )
        return parts

    def _log_event(self, data: dict) -> None:
        if self._events is not None:
            self._events.log_event(data)


async def conversation_messages_to_generate_request(
    messages: Sequence[Message],
    *,
    asset_store: AssetStoreInterface,
    resizer: ImageResizerInterface | None = None,
    model_resize_policy: ImageResizePolicy = MODEL_TURN_RESIZE_POLICY,
    target_mime_type: str = MODEL_IMAGE_RESCALE_MIMETYPE,
    quality: float = MODEL_IMAGE_RESCALE_QUALITY,
    events: ConversionLoggerInterface | None = None,
) -> GenerationRequest:
    """Convert a conversation using freshly wired conversion stages.

    Args:
        messages: Conversation in order.
        asset_store: Resolves image references.
        resizer: Re-encodes images on model turns. None keeps original bytes.
        model_resize_policy: Resize policy for images on model turns.
        target_mime_type: Mime type resized images are encoded to.
        quality: Encoder quality for resized images.
        events: Optional structured event logger.

    Returns:
        The generation request.

    Raises:
        ConversionError: An image reference could not be materialized.
    """
    materializer = ImageMaterializer(
        asset_store,
        resizer,
        target_mime_type=target_mime_type,
        quality=quality,
        events=events,
    )
    builder = TurnBuilder(materializer, model_resize_policy=model_resize_policy, events=events)
    return await ConversationReducer(builder, events=events).reduce(messages)


__all__ = ["ConversationReducer", "conversation_messages_to_generate_request"]
