"""Run state models for the agent card renderer.

This module defines the core data models for tracking an agent run,
including the RunStatus enum, the content parts and messages emitted by
the agent, and the TimelineEntry records shown while the run is live.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union


class RunStatus(Enum):
    """Tracks the current status of an agent run.

    Status is overwritten by whoever observed the latest event; no
    transition table is enforced. COMPLETED, CANCELED and ERROR are
    terminal: the card shows the final answer instead of the live timeline.
    """
    IDLE = "idle"
    THINKING = "thinking"
    TOOL_CALLING = "tool-calling"
    WAITING_TOOL_RESULT = "waiting-tool-result"
    COMPLETED = "completed"
    CANCELED = "canceled"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.CANCELED, RunStatus.ERROR)


STATUS_TITLES = {
    RunStatus.IDLE: "等待指令",
    RunStatus.THINKING: "思考中",
    RunStatus.TOOL_CALLING: "调用工具中",
    RunStatus.WAITING_TOOL_RESULT: "等待工具结果",
    RunStatus.COMPLETED: "全部完成",
    RunStatus.CANCELED: "任务已取消",
    RunStatus.ERROR: "执行异常",
}


@dataclass
class TextPart:
    """Plain assistant text."""
    text: str
    type: str = field(default="text", init=False)


@dataclass
class ThinkingPart:
    """A reasoning trace emitted by the agent."""
    text: str
    type: str = field(default="thinking", init=False)


@dataclass
class ToolCallPart:
    """A tool invocation.

    Attributes:
        tool_name: Tool identifier as reported by the agent
        tool_use_id: Correlation id shared with the matching result
        started_at: Epoch milliseconds when the call started
    """
    tool_name: str
    tool_use_id: Optional[str] = None
    started_at: Optional[float] = None
    type: str = field(default="tool-call", init=False)


@dataclass
class ToolResultPart:
    """The outcome of a tool invocation.

    Attributes:
        tool_use_id: Correlation id of the call this result belongs to
        text: Human readable summary of the result
        raw: The untouched producer payload
        completed_at: Epoch milliseconds when the call finished
        duration_ms: Duration reported by the producer, preferred over timestamps
    """
    tool_use_id: Optional[str] = None
    text: Optional[str] = None
    raw: Any = None
    completed_at: Optional[float] = None
    duration_ms: Optional[float] = None
    type: str = field(default="tool-result", init=False)


AgentContentPart = Union[TextPart, ThinkingPart, ToolCallPart, ToolResultPart]


@dataclass
class AssistantMessage:
    """Message authored by the agent."""
    content: List[Union[TextPart, ThinkingPart, ToolCallPart]] = field(default_factory=list)
    role: str = field(default="assistant", init=False)


@dataclass
class ToolMessage:
    """Message carrying tool results, correlated to calls by tool_use_id."""
    content: List[ToolResultPart] = field(default_factory=list)
    tool_use_id: Optional[str] = None
    role: str = field(default="tool", init=False)


AgentMessage = Union[AssistantMessage, ToolMessage]


class TimelineKind(str, Enum):
    """Kinds of timeline entries."""
    TEXT = "text"
    THINKING = "thinking"
    TOOL_CALL = "tool-call"


@dataclass
class TimelineEntry:
    """A display-ready, deduplicated unit of the run timeline.

    Attributes:
        kind: What produced the entry
        content: Markdown shown for the entry
        tool_use_id: Correlation id for tool-call entries
        tool_name: Tool identifier for tool-call entries
        duration_ms: Elapsed time once the matching result arrived
    """
    kind: TimelineKind
    content: str
    tool_use_id: Optional[str] = None
    tool_name: Optional[str] = None
    duration_ms: Optional[float] = None

    @property
    def dedup_key(self) -> str:
        if self.kind == TimelineKind.TOOL_CALL and self.tool_use_id:
            return f"tool:{self.tool_use_id}"
        return f"{self.kind.value}|{self.content}"


@dataclass
class ToolCallRecord:
    """Correlation record for a tool call on the timeline.

    Attributes:
        tool_use_id: Correlation id shared by the call and its result
        tool_name: Tool identifier
        started_at: Epoch milliseconds when the call started, if known
        index: Position of the call's entry in its timeline
    """
    tool_use_id: str
    tool_name: str
    started_at: Optional[float] = None
    index: int = 0
