"""Chat Request - conversation to generation request conversion."""

from chat_request.application import (
    ConversationReducer,
    ImageMaterializer,
    TurnBuilder,
    conversation_messages_to_generate_request,
)
from chat_request.core import Settings, get_settings
from chat_request.dependencies import convert_conversation, create_conversation_reducer
from chat_request.domain import (
    ConversionError,
    DomainError,
    GenerationRequest,
    ImageAssetNotFoundError,
    ImageResizePolicy,
    Message,
    Turn,
    TurnRole,
    UnsupportedImageReferenceError,
)
from chat_request.infrastructure import InMemoryAssetStore
from chat_request.wire import domain_to_wire_request, messages_from_json, request_to_json

__version__ = "0.1.0"

__all__ = [
    "ConversationReducer",
    "ConversionError",
    "DomainError",
    "GenerationRequest",
    "ImageAssetNotFoundError",
    "ImageMaterializer",
    "ImageResizePolicy",
    "InMemoryAssetStore",
    "Message",
    "Settings",
    "Turn",
    "TurnBuilder",
    "TurnRole",
    "UnsupportedImageReferenceError",
    "__version__",
    "conversation_messages_to_generate_request",
    "convert_conversation",
    "create_conversation_reducer",
    "domain_to_wire_request",
    "get_settings",
    "messages_from_json",
    "request_to_json",
]
