"""Run state tracking for larkcard."""
from .message_state import (
    RunStatus,
    STATUS_TITLES,
    TextPart,
    ThinkingPart,
    ToolCallPart,
    ToolResultPart,
    AgentContentPart,
    AssistantMessage,
    ToolMessage,
    AgentMessage,
    TimelineKind,
    TimelineEntry,
    ToolCallRecord,
)
from .stream_buffer import AssistantBuffer, merge_stream_text
from .tool_labels import TOOL_NAME_LABELS, get_tool_label, normalize_tool_name
from .tracker import (
    AgentRunTracker,
    MessageDisplayChunks,
    collect_display_chunks,
    format_tool_call,
    infer_status_from_messages,
    resolve_duration_ms,
)

__all__ = [
    # Data model
    'RunStatus', 'STATUS_TITLES',
    'TextPart', 'ThinkingPart', 'ToolCallPart', 'ToolResultPart', 'AgentContentPart',
    'AssistantMessage', 'ToolMessage', 'AgentMessage',
    'TimelineKind', 'TimelineEntry', 'ToolCallRecord',
    # Text merging
    'AssistantBuffer', 'merge_stream_text',
    # Tool labels
    'TOOL_NAME_LABELS', 'get_tool_label', 'normalize_tool_name',
    # Tracker
    'AgentRunTracker', 'MessageDisplayChunks', 'collect_display_chunks',
    'format_tool_call', 'infer_status_from_messages', 'resolve_duration_ms',
]
