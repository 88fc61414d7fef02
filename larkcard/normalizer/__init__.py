"""Reply payload normalization for larkcard."""
from .extractors import (
    PayloadExtractor,
    PathExtractor,
    ExtractorRegistry,
    create_message_registry,
    create_event_registry,
    lookup,
    lookup_path,
    looks_like_message,
)
from .messages import coerce_message, coerce_messages, coerce_part
from .payload import (
    NormalizedPayload,
    normalize_payload,
    extract_agent_messages,
    extract_verbose_events,
    payload_text,
    get_message_registry,
    get_event_registry,
)
from .tool_summary import (
    TOOL_NAME_LABELS,
    ToolSummary,
    split_tool_summary_lines,
    format_tool_summary_line,
)
from .verbose_events import apply_verbose_event, build_tool_result_text

__all__ = [
    # Extraction strategies
    'PayloadExtractor', 'PathExtractor', 'ExtractorRegistry',
    'create_message_registry', 'create_event_registry',
    'lookup', 'lookup_path', 'looks_like_message',
    # Message coercion
    'coerce_message', 'coerce_messages', 'coerce_part',
    # Payloads
    'NormalizedPayload', 'normalize_payload',
    'extract_agent_messages', 'extract_verbose_events', 'payload_text',
    'get_message_registry', 'get_event_registry',
    # Plain-text fallback
    'TOOL_NAME_LABELS', 'ToolSummary', 'split_tool_summary_lines', 'format_tool_summary_line',
    # Verbose events
    'apply_verbose_event', 'build_tool_result_text',
]
