"""
Verbose agent event interpretation.

Verbose events arrive as {"stream": ..., "data": {...}} objects, one per
assistant delta, tool phase or lifecycle change. Each stream is handled
independently and mutates the run tracker directly.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from larkcard.constants import (
    EXECUTION_ERROR_TEXT,
    TOOL_COMPLETED_TEXT,
    TOOL_FAILED_TEXT,
    UNKNOWN_TOOL_NAME,
)
from larkcard.normalizer.extractors import lookup
from larkcard.run.message_state import (
    AssistantMessage,
    RunStatus,
    ToolCallPart,
    ToolMessage,
    ToolResultPart,
)
from larkcard.run.stream_buffer import AssistantBuffer
from larkcard.run.tracker import AgentRunTracker
from larkcard.utils import as_finite_number, now_ms, safe_text


logger = logging.getLogger(__name__)

TOOL_RESULT_PHASES = frozenset({"end", "result", "output", "error"})


def event_stream(event: Any) -> Optional[str]:
    """Read the stream discriminator of an event."""
    stream = lookup(event, "stream")
    if stream is None:
        stream = lookup(event, "event")
    if stream is None:
        stream = lookup(lookup(event, "payload"), "stream")
    return stream if isinstance(stream, str) else None


def event_data(event: Any) -> Any:
    """Read the data object of an event, defaulting to an empty dict."""
    payload = lookup(event, "payload")
    for candidate in (lookup(event, "data"), lookup(payload, "data"), payload):
        if candidate is not None:
            return candidate
    return {}


def _str_field(data: Any, key: str, default: Optional[str] = None) -> Optional[str]:
    value = lookup(data, key)
    return value if isinstance(value, str) else default


def build_tool_result_text(data: Any, is_error: bool) -> str:
    """Assemble the text of a tool result from its output and metadata.

    Empty fields are omitted; a fixed completion or failure text is used
    when nothing is left.
    """
    output_value = lookup(data, "output")
    output = safe_text(output_value) if output_value is not None else ""
    meta = safe_text(lookup(data, "meta"))
    lines = [
        f"输出: {output}" if output else "",
        f"备注: {meta}" if meta else "",
        "错误: true" if is_error else "",
    ]
    text = "\n".join(line for line in lines if line)
    return text or (TOOL_FAILED_TEXT if is_error else TOOL_COMPLETED_TEXT)


def _apply_assistant(tracker: AgentRunTracker, data: Any, buffer: AssistantBuffer) -> None:
    text = _str_field(data, "text", "")
    if not text:
        return
    tracker.set_status(RunStatus.THINKING)
    tracker.set_draft_answer(buffer.merge(text))


def _apply_tool(tracker: AgentRunTracker, data: Any, clock: Callable[[], float]) -> None:
    phase = _str_field(data, "phase", "unknown")
    name = _str_field(data, "name", UNKNOWN_TOOL_NAME)
    tool_call_id = _str_field(data, "toolCallId")

    if phase == "start":
        tracker.set_status(RunStatus.TOOL_CALLING)
        tracker.append_messages([
            AssistantMessage(content=[
                ToolCallPart(tool_name=name, tool_use_id=tool_call_id, started_at=clock()),
            ]),
        ])
        return

    if phase in TOOL_RESULT_PHASES:
        is_error_value = lookup(data, "isError")
        is_error = is_error_value if isinstance(is_error_value, bool) else phase == "error"
        duration = as_finite_number(lookup(data, "durationMs"))
        tracker.append_messages([
            ToolMessage(
                tool_use_id=tool_call_id,
                content=[
                    ToolResultPart(
                        tool_use_id=tool_call_id,
                        text=build_tool_result_text(data, is_error),
                        completed_at=clock(),
                        duration_ms=duration,
                        raw=data,
                    ),
                ],
            ),
        ])
        tracker.set_status(RunStatus.ERROR if is_error else RunStatus.WAITING_TOOL_RESULT)
        return

    tracker.set_status(RunStatus.TOOL_CALLING)


def _apply_lifecycle(tracker: AgentRunTracker, data: Any) -> None:
    phase = _str_field(data, "phase", "")
    if phase == "start":
        tracker.set_status(RunStatus.THINKING)
    elif phase == "error":
        tracker.set_status(RunStatus.ERROR)
        tracker.set_draft_answer(_str_field(data, "error", EXECUTION_ERROR_TEXT))


def apply_verbose_event(
    tracker: AgentRunTracker,
    event: Any,
    buffer: AssistantBuffer,
    clock: Callable[[], float] = now_ms,
) -> None:
    """
    Apply one verbose event to the tracker.

    Args:
        tracker: Tracker of the current run
        event: The event object or mapping
        buffer: Running assistant text, shared across events of the run
        clock: Source of epoch-millisecond timestamps for tool calls
    """
    stream = event_stream(event)
    data = event_data(event)
    if not isinstance(data, Mapping) and not hasattr(data, "__dict__"):
        data = {}

    if stream == "assistant":
        _apply_assistant(tracker, data, buffer)
    elif stream == "tool":
        _apply_tool(tracker, data, clock)
    elif stream == "lifecycle":
        _apply_lifecycle(tracker, data)
    else:
        logger.debug("ignoring event from stream %r", stream)
