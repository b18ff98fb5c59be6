"""Telemetry utilities (structured conversion events)."""

from chat_request.telemetry.structured_logging import (
    EVENT_LOGGER,
    configure_event_log,
    log_conversion_event,
)

__all__ = ["EVENT_LOGGER", "configure_event_log", "log_conversion_event"]
