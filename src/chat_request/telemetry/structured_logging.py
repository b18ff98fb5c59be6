"""Structured logging of conversion events.

Conversion events (dropped fragments, materialized images, completed or
failed conversions) are emitted as JSON objects, one per line, on a dedicated
non-propagating logger. Attach a file with configure_event_log() to collect
them as JSON Lines.

Event Schema:
    All events include:
        - event: Event type identifier (e.g., "fragment_dropped")
        - timestamp: ISO 8601 timestamp (auto-injected if missing)
        - Additional fields: Event-specific metadata (role, part_type,
          reason, asset_id, latency_ms, error_type, ...)
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

EVENT_LOGGER = logging.getLogger("chat_request.events")
EVENT_LOGGER.setLevel(logging.INFO)
EVENT_LOGGER.propagate = False
if not EVENT_LOGGER.handlers:
    EVENT_LOGGER.addHandler(logging.NullHandler())

_DATETIME_ADAPTER: TypeAdapter[datetime] = TypeAdapter(datetime)


def _json_default(value: Any) -> Any:
    """Fallback serializer for datetime, Path and other objects."""
    match value:
        case datetime():
            return _DATETIME_ADAPTER.dump_python(value, mode="json")
        case Path():
            return str(value)
        case _:
            return str(value)


def configure_event_log(path: Path | str, level: str = "info") -> logging.Handler:
    """Write conversion events to a JSON Lines file.

    Calling this again with the same path returns the existing handler.

    Args:
        path: Log file path. Parent directories are created.
        level: Level name for the event logger.

    Returns:
        The file handler attached to the event logger.
    """
    path = Path(path).resolve()
    EVENT_LOGGER.setLevel(level.upper())
    for handler in EVENT_LOGGER.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path:
            return handler

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    EVENT_LOGGER.addHandler(handler)
    return handler


def log_conversion_event(event: dict[str, Any]) -> None:
    """Emit a structured conversion event.

    Args:
        event: Event payload. Should contain an ``event`` key. The
            ``timestamp`` field is added if missing (mutates the input dict).

    Example:
        >>> log_conversion_event({
        ...     "event": "fragment_dropped",
        ...     "role": "model",
        ...     "part_type": "tool_response",
        ...     "reason": "tool_response part not implemented yet",
        ... })
    """
    event.setdefault("timestamp", datetime.now(UTC).isoformat())
    EVENT_LOGGER.info(json.dumps(event, default=_json_default))


__all__ = ["EVENT_LOGGER", "configure_event_log", "log_conversion_event"]
