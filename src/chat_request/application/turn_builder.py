"""Folding of a message's fragments into a single turn.

The builder walks the fragment list once, in order, and appends at most one
output part per fragment. What happens to a part depends on its tag and on
the role of the turn being built:

    ============== ============================ ==================================
    part           user turn                    model turn
    ============== ============================ ==================================
    text           kept                         kept
    tool_call      dropped                      kept
    tool_response  dropped                      dropped (diagnostic)
    doc            kept                         dropped (diagnostic)
    error          dropped                      text part "[ERROR] <error>"
    image_ref      inlined, original size       inlined, model resize policy
    ============== ============================ ==================================

Fragments without generation content (void, sentinel, placeholder parts) are
skipped silently. Parts of an unknown shape are dropped with a diagnostic.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from chat_request.domain.entities import Turn, TurnRole
from chat_request.domain.fragments import (
    DocPart,
    ErrorPart,
    ImageRefPart,
    PlaceholderPart,
    SentinelPart,
    TextPart,
    ToolCallPart,
    ToolResponsePart,
    is_content_or_attachment_fragment,
)
from chat_request.domain.value_objects import (
    ERROR_TEXT_PREFIX,
    MODEL_TURN_RESIZE_POLICY,
    ImageResizePolicy,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from chat_request.application.image_materializer import ImageMaterializer
    from chat_request.application.interfaces import ConversionLoggerInterface
    from chat_request.domain.entities import OutputPart
    from chat_request.domain.fragments import Fragment, Part

logger = logging.getLogger(__name__)


class TurnBuilder:
    """Builds user and model turns from message fragments.

    Attributes:
        _materializer: Resolves image references to inline images.
        _model_resize_policy: Resize policy for images on model turns.
        _events: Optional structured event logger.
    """

    def __init__(
        self,
        materializer: ImageMaterializer,
        *,
        model_resize_policy: ImageResizePolicy = MODEL_TURN_RESIZE_POLICY,
        events: ConversionLoggerInterface | None = None,
    ) -> None:
        self._materializer = materializer
        self._model_resize_policy = model_resize_policy
        self._events = events

    async def build(self, fragments: Iterable[Fragment], role: TurnRole) -> Turn:
        """Fold fragments into a turn of the given role.

        Args:
            fragments: Message fragments, in order.
            role: Role of the turn to build.

        Returns:
            Turn whose parts follow the order of their source fragments.

        Raises:
            ConversionError: An image reference could not be materialized.
                No partial turn is returned.
        """
        parts: list[OutputPart] = []
        for fragment in fragments:
            if not is_content_or_attachment_fragment(fragment):
                continue
            part = fragment.part
            if isinstance(part, SentinelPart | PlaceholderPart):
                continue

            match role:
                case TurnRole.USER:
                    converted = await self._convert_user_part(part)
                case TurnRole.MODEL:
                    converted = await self._convert_model_part(part)
                case _:
                    raise ValueError(f"Unsupported turn role: {role!r}")

            if converted is not None:
                parts.append(converted)

        return Turn(role=role, parts=tuple(parts))

    async def build_user_turn(self, fragments: Iterable[Fragment]) -> Turn:
        """Build a user turn. See build()."""
        return await self.build(fragments, TurnRole.USER)

    async def build_model_turn(self, fragments: Iterable[Fragment]) -> Turn:
        """Build a model turn. See build()."""
        return await self.build(fragments, TurnRole.MODEL)

    async def _convert_user_part(self, part: Part) -> OutputPart | None:
        match part:
            case TextPart() | DocPart():
                return part
            case ImageRefPart():
                # user images were already scaled to the user's chosen resolution
                materialized = await self._materializer.materialize(part, False)
                return materialized.part
            case ErrorPart() | ToolCallPart() | ToolResponsePart():
                return None
            case _:
                self._drop(TurnRole.USER, part, "unexpected user fragment part type")
                return None

    async def _convert_model_part(self, part: Part) -> OutputPart | None:
        match part:
            case TextPart() | ToolCallPart():
                return part
            case ErrorPart(error=error):
                return TextPart(text=f"{ERROR_TEXT_PREFIX}{error}")
            case ImageRefPart():
                materialized = await self._materializer.materialize(part, self._model_resize_policy)
                return materialized.part
            case DocPart():
                self._drop(TurnRole.MODEL, part, "doc part not implemented yet")
                return None
            case ToolResponsePart():
                self._drop(TurnRole.MODEL, part, "tool_response part not implemented yet")
                return None
            case _:
                self._drop(TurnRole.MODEL, part, "unexpected model fragment part type")
                return None

    def _drop(self, role: TurnRole, part: Any, reason: str) -> None:
        part_type = getattr(part, "pt", type(part).__name__)
        logger.warning("Dropping %s part on %s turn: %s", part_type, role.value, reason)
        if self._events is not None:
            self._events.log_event(
                {
                    "event": "fragment_dropped",
                    "role": role.value,
                    "part_type": part_type,
                    "reason": reason,
                }
            )


__all__ = ["TurnBuilder"]
