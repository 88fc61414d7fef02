"""Run tracker: the single source of truth for what an agent run has done.

The tracker accumulates a deduplicated timeline of display entries, the
current RunStatus and the draft answer. Messages are projected into
timeline entries with collect_display_chunks(); tool-call entries are keyed
by their tool_use_id so a later result rewrites the existing line instead of
adding a second one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from larkcard.constants import UNKNOWN_TOOL_NAME
from larkcard.run.message_state import (
    AgentMessage,
    AssistantMessage,
    RunStatus,
    TextPart,
    ThinkingPart,
    TimelineEntry,
    TimelineKind,
    ToolCallPart,
    ToolCallRecord,
    ToolMessage,
    ToolResultPart,
)
from larkcard.run.tool_labels import get_tool_label
from larkcard.utils import as_finite_number, format_seconds, normalize_whitespace, now_ms


logger = logging.getLogger(__name__)


@dataclass
class MessageDisplayChunks:
    """Timeline entries and final text projected from a batch of messages."""
    timeline: List[TimelineEntry] = field(default_factory=list)
    final_text: str = ""


def format_tool_call(tool_name: str, duration_ms: Optional[float] = None) -> str:
    """Format the timeline line for a tool call.

    Args:
        tool_name: Tool identifier; known tools are shown by their label
        duration_ms: Elapsed time, appended as a seconds tag when finite

    Returns:
        Card markdown for the tool call
    """
    base = f"调用 `'{get_tool_label(tool_name)}'` 工具"
    if as_finite_number(duration_ms) is None:
        return base
    tag = f"<text_tag color='turquoise'>耗时 {format_seconds(duration_ms)} 秒</text_tag>"
    return f"{base} {tag}"


def resolve_duration_ms(
    reported_duration_ms: Optional[float],
    started_at: Optional[float],
    completed_at: Optional[float],
) -> Optional[float]:
    """Work out how long a tool call took.

    A finite duration reported by the producer wins. Otherwise the start
    timestamp is subtracted from the completion timestamp, or from the
    current time when the result carries none.
    """
    if as_finite_number(reported_duration_ms) is not None:
        return reported_duration_ms
    if started_at is not None:
        end = completed_at if completed_at is not None else now_ms()
        return max(0.0, end - started_at)
    return None


def collect_display_chunks(
    messages: Iterable[AgentMessage],
    known_tool_calls: Optional[Mapping[str, ToolCallRecord]] = None,
) -> MessageDisplayChunks:
    """Project messages into timeline entries and a final-text candidate.

    Tool results are matched to tool calls from the same batch first. A
    result for a call from an earlier batch (found in known_tool_calls)
    produces a fresh tool-call entry carrying the duration, which the
    tracker then swaps in for the existing line.

    Args:
        messages: Messages in arrival order
        known_tool_calls: Calls already on the timeline, keyed by tool_use_id

    Returns:
        MessageDisplayChunks with the entries and the joined assistant text
    """
    timeline: List[TimelineEntry] = []
    text_parts: List[str] = []
    batch_calls: Dict[str, ToolCallRecord] = {}
    known_tool_calls = known_tool_calls or {}

    for message in messages:
        if isinstance(message, AssistantMessage):
            for part in message.content:
                if isinstance(part, TextPart):
                    if normalize_whitespace(part.text):
                        text_parts.append(part.text.strip())
                        timeline.append(TimelineEntry(kind=TimelineKind.TEXT, content=part.text.strip()))
                elif isinstance(part, ThinkingPart):
                    if normalize_whitespace(part.text):
                        timeline.append(TimelineEntry(kind=TimelineKind.THINKING, content=part.text.strip()))
                elif isinstance(part, ToolCallPart):
                    tool_name = part.tool_name or UNKNOWN_TOOL_NAME
                    if part.tool_use_id:
                        batch_calls[part.tool_use_id] = ToolCallRecord(
                            tool_use_id=part.tool_use_id,
                            tool_name=tool_name,
                            started_at=part.started_at,
                            index=len(timeline),
                        )
                    timeline.append(TimelineEntry(
                        kind=TimelineKind.TOOL_CALL,
                        content=format_tool_call(tool_name),
                        tool_use_id=part.tool_use_id,
                        tool_name=tool_name,
                    ))
        elif isinstance(message, ToolMessage):
            for part in message.content:
                if not isinstance(part, ToolResultPart) or not part.tool_use_id:
                    continue
                record = batch_calls.get(part.tool_use_id)
                if record is not None:
                    entry = timeline[record.index]
                else:
                    record = known_tool_calls.get(part.tool_use_id)
                    if record is None:
                        continue
                    entry = TimelineEntry(
                        kind=TimelineKind.TOOL_CALL,
                        content="",
                        tool_use_id=record.tool_use_id,
                        tool_name=record.tool_name,
                    )
                    timeline.append(entry)
                duration_ms = resolve_duration_ms(part.duration_ms, record.started_at, part.completed_at)
                entry.duration_ms = duration_ms
                entry.content = format_tool_call(record.tool_name, duration_ms)

    return MessageDisplayChunks(timeline=timeline, final_text="\n\n".join(text_parts).strip())


def infer_status_from_messages(messages: Iterable[AgentMessage]) -> Optional[RunStatus]:
    """Guess the run status from a batch of messages.

    Returns:
        TOOL_CALLING if any tool call is present, THINKING if any thinking
        trace is present, otherwise None
    """
    saw_thinking = False
    for message in messages:
        if not isinstance(message, AssistantMessage):
            continue
        for part in message.content:
            if isinstance(part, ToolCallPart):
                return RunStatus.TOOL_CALLING
            if isinstance(part, ThinkingPart):
                saw_thinking = True
    return RunStatus.THINKING if saw_thinking else None


class AgentRunTracker:
    """Accumulates the state of one agent run.

    One tracker exists per card lifecycle. It is not safe for concurrent
    mutation; callers deliver events in stream order.
    """

    def __init__(self) -> None:
        self._status = RunStatus.THINKING
        self._timeline: List[TimelineEntry] = []
        self._seen: set[str] = set()
        self._tool_calls: Dict[str, ToolCallRecord] = {}
        self._draft_answer = ""

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def timeline(self) -> List[TimelineEntry]:
        """A copy of the timeline in display order."""
        return list(self._timeline)

    @property
    def draft_answer(self) -> str:
        return self._draft_answer

    def set_status(self, status: RunStatus) -> None:
        """Overwrite the run status. Any transition is accepted."""
        if status != self._status:
            logger.debug("run status %s -> %s", self._status.value, status.value)
        self._status = status

    def set_draft_answer(self, answer: str) -> None:
        self._draft_answer = answer

    def append_messages(self, messages: Iterable[AgentMessage]) -> None:
        """Merge a batch of messages into the timeline and draft answer.

        Entries already on the timeline are skipped, except tool calls seen
        again under the same tool_use_id, which replace the existing line
        in place. A non-empty final text replaces the draft answer.
        """
        messages = list(messages)
        chunks = collect_display_chunks(messages, self._tool_calls)
        for entry in chunks.timeline:
            if not entry.content:
                continue
            key = entry.dedup_key
            if key not in self._seen:
                self._seen.add(key)
                if entry.kind == TimelineKind.TOOL_CALL and entry.tool_use_id:
                    self._tool_calls[entry.tool_use_id] = ToolCallRecord(
                        tool_use_id=entry.tool_use_id,
                        tool_name=entry.tool_name or UNKNOWN_TOOL_NAME,
                        index=len(self._timeline),
                    )
                self._timeline.append(entry)
                continue
            if entry.kind == TimelineKind.TOOL_CALL and entry.tool_use_id:
                self._replace_tool_call(entry)
        self._remember_start_times(messages)
        if chunks.final_text:
            self._draft_answer = chunks.final_text

    def _replace_tool_call(self, entry: TimelineEntry) -> None:
        record = self._tool_calls.get(entry.tool_use_id)
        if record is None:
            return
        current = self._timeline[record.index]
        # A resent call without a result must not wipe a known duration.
        if entry.duration_ms is None and current.duration_ms is not None:
            return
        self._timeline[record.index] = entry

    def _remember_start_times(self, messages: Iterable[AgentMessage]) -> None:
        for message in messages:
            if not isinstance(message, AssistantMessage):
                continue
            for part in message.content:
                if not isinstance(part, ToolCallPart) or not part.tool_use_id:
                    continue
                record = self._tool_calls.get(part.tool_use_id)
                if record is not None and record.started_at is None:
                    record.started_at = part.started_at

    def reset(self) -> None:
        """Forget everything and start over in THINKING."""
        self._timeline.clear()
        self._seen.clear()
        self._tool_calls.clear()
        self._draft_answer = ""
        self._status = RunStatus.THINKING

    def build_render_state(self, collapse_timeline: bool = False):
        """Project the current state into a RenderState."""
        from larkcard.card.render_state import build_render_state

        return build_render_state(
            status=self._status,
            timeline=self._timeline,
            draft_answer=self._draft_answer,
            collapse_timeline=collapse_timeline,
        )
