"""JSON wire format for stored messages and generation requests."""

from chat_request.wire.mappers import (
    domain_to_wire_request,
    messages_from_json,
    request_to_json,
    wire_to_domain_message,
)
from chat_request.wire.models import WireMessage

__all__ = [
    "WireMessage",
    "domain_to_wire_request",
    "messages_from_json",
    "request_to_json",
    "wire_to_domain_message",
]
