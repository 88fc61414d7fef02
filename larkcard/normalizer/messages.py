"""
Coercion of wire-format agent messages into run state dataclasses.

Producers send messages as JSON objects with camelCase keys; snake_case
keys and already-built dataclasses are accepted too.
"""

import logging
from dataclasses import replace
from typing import Any, Iterable, List, Optional

from larkcard.constants import UNKNOWN_TOOL_NAME
from larkcard.normalizer.extractors import lookup
from larkcard.run.message_state import (
    AgentMessage,
    AssistantMessage,
    TextPart,
    ThinkingPart,
    ToolCallPart,
    ToolMessage,
    ToolResultPart,
)
from larkcard.utils import as_finite_number


logger = logging.getLogger(__name__)

_PART_TYPES = (TextPart, ThinkingPart, ToolCallPart, ToolResultPart)


def _field(obj: Any, camel: str, snake: str) -> Any:
    value = lookup(obj, camel)
    if value is None and snake != camel:
        value = lookup(obj, snake)
    return value


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def coerce_part(raw: Any):
    """Convert one content part, or return None for unknown part types."""
    if isinstance(raw, _PART_TYPES):
        return raw

    part_type = lookup(raw, "type")
    if part_type == "text":
        return TextPart(text=_as_str(lookup(raw, "text")) or "")
    if part_type == "thinking":
        return ThinkingPart(text=_as_str(lookup(raw, "text")) or "")
    if part_type == "tool-call":
        return ToolCallPart(
            tool_name=_as_str(_field(raw, "toolName", "tool_name")) or UNKNOWN_TOOL_NAME,
            tool_use_id=_as_str(_field(raw, "toolUseId", "tool_use_id")),
            started_at=as_finite_number(_field(raw, "startedAt", "started_at")),
        )
    if part_type == "tool-result":
        return ToolResultPart(
            tool_use_id=_as_str(_field(raw, "toolUseId", "tool_use_id")),
            text=_as_str(lookup(raw, "text")),
            raw=lookup(raw, "raw"),
            completed_at=as_finite_number(_field(raw, "completedAt", "completed_at")),
            duration_ms=as_finite_number(_field(raw, "durationMs", "duration_ms")),
        )
    return None


def _content(raw: Any) -> list:
    content = lookup(raw, "content")
    if isinstance(content, (list, tuple)):
        return list(content)
    # Some producers send assistant content as a bare string.
    if isinstance(content, str):
        return [TextPart(text=content)]
    return []


def coerce_message(raw: Any) -> Optional[AgentMessage]:
    """
    Convert a wire message into an AssistantMessage or ToolMessage.

    Args:
        raw: Mapping, object with the same attributes, or a message dataclass

    Returns:
        The typed message, or None when the role is not recognized
    """
    if isinstance(raw, (AssistantMessage, ToolMessage)):
        return raw

    role = lookup(raw, "role")
    parts = [coerce_part(item) for item in _content(raw)]

    if role == "assistant":
        return AssistantMessage(content=[
            p for p in parts if isinstance(p, (TextPart, ThinkingPart, ToolCallPart))
        ])
    if role == "tool":
        tool_use_id = _as_str(_field(raw, "toolUseId", "tool_use_id"))
        results = [
            replace(p, tool_use_id=tool_use_id) if p.tool_use_id is None else p
            for p in parts if isinstance(p, ToolResultPart)
        ]
        return ToolMessage(content=results, tool_use_id=tool_use_id)

    logger.debug("skipping message with role %r", role)
    return None


def coerce_messages(items: Iterable[Any]) -> List[AgentMessage]:
    """Convert a list of wire messages, dropping unrecognized ones."""
    messages = []
    for item in items:
        message = coerce_message(item)
        if message is not None:
            messages.append(message)
    return messages
