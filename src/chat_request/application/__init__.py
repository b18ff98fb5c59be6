"""Application layer for chat request conversion.

This package contains the conversion stages that orchestrate domain logic and
coordinate with infrastructure through Protocol interfaces:

    - ConversationReducer: messages -> GenerationRequest
    - TurnBuilder: fragments -> Turn
    - ImageMaterializer: image reference -> inline image
"""

from chat_request.application.conversation_reducer import (
    ConversationReducer,
    conversation_messages_to_generate_request,
)
from chat_request.application.image_materializer import ImageMaterializer
from chat_request.application.interfaces import (
    AssetStoreInterface,
    ConversionLoggerInterface,
    ImageResizerInterface,
)
from chat_request.application.turn_builder import TurnBuilder

__all__ = [
    "AssetStoreInterface",
    "ConversationReducer",
    "ConversionLoggerInterface",
    "ImageMaterializer",
    "ImageResizerInterface",
    "TurnBuilder",
    "conversation_messages_to_generate_request",
]
