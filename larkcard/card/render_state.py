"""Render state projection.

build_render_state() turns tracker state into a presentation-agnostic
RenderState. It is a pure function: the same tracker state always gives
the same RenderState, and nothing is mutated.

While the run is live the timeline itself is the card body. Once the
status is terminal the body becomes the final answer and the timeline
moves into a collapsible panel, minus text entries that merely repeat the
final answer.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from larkcard.constants import NO_FINAL_REPLY, THINKING_LABEL, THINKING_PLACEHOLDER
from larkcard.run.message_state import STATUS_TITLES, RunStatus, TimelineEntry, TimelineKind
from larkcard.utils import normalize_whitespace


@dataclass
class RenderState:
    """Everything needed to draw one frame of the card.

    Attributes:
        status: Run status the frame was rendered for
        headline: Localized status title
        body: Main markdown body
        timeline: Timeline entries that remain visible
        final_answer: Trimmed final answer, only for terminal statuses
        is_timeline_collapsed: Whether the timeline panel starts collapsed
        timeline_markdown: Markdown rendering of the timeline
        show_timeline_panel: Whether the collapsible timeline panel is shown
    """
    status: RunStatus
    headline: str
    body: str
    timeline: List[TimelineEntry] = field(default_factory=list)
    final_answer: Optional[str] = None
    is_timeline_collapsed: bool = False
    timeline_markdown: str = ""
    show_timeline_panel: bool = False


def format_timeline_entry(entry: TimelineEntry) -> str:
    """Render one timeline entry as markdown, or "" when it has no content."""
    if not entry.content:
        return ""
    if entry.kind == TimelineKind.THINKING:
        return f"*{THINKING_LABEL}*: {entry.content}"
    return entry.content


def render_timeline_markdown(entries: Sequence[TimelineEntry]) -> str:
    """Join the rendered entries, one per line, skipping empty ones."""
    return "\n".join(line for line in (format_timeline_entry(e) for e in entries) if line)


def filter_timeline_entries(
    entries: Sequence[TimelineEntry],
    answer_text: Optional[str] = None,
) -> List[TimelineEntry]:
    """Drop text entries that repeat the final answer.

    Comparison ignores differences in whitespace. Without an answer the
    entries are returned unchanged.
    """
    normalized_answer = normalize_whitespace(answer_text)
    if not normalized_answer:
        return list(entries)
    return [
        entry for entry in entries
        if entry.kind != TimelineKind.TEXT or normalize_whitespace(entry.content) != normalized_answer
    ]


def build_render_state(
    status: RunStatus,
    timeline: Sequence[TimelineEntry],
    draft_answer: str,
    collapse_timeline: bool = False,
) -> RenderState:
    """
    Project tracker state into a RenderState.

    Args:
        status: Current run status
        timeline: Timeline entries in display order
        draft_answer: Best known final answer
        collapse_timeline: Whether the timeline panel should start collapsed

    Returns:
        The RenderState for this frame
    """
    headline = STATUS_TITLES.get(status, status.value)
    show_final_answer = status.is_terminal
    final_answer_text = (draft_answer or "").strip()

    visible = filter_timeline_entries(timeline, final_answer_text if show_final_answer else None)
    timeline_markdown = render_timeline_markdown(visible)

    if show_final_answer:
        final_answer = final_answer_text or None
        body = final_answer or NO_FINAL_REPLY
        show_timeline_panel = bool(visible)
    else:
        final_answer = None
        body = timeline_markdown or draft_answer or THINKING_PLACEHOLDER
        show_timeline_panel = False

    return RenderState(
        status=status,
        headline=headline,
        body=body,
        timeline=visible,
        final_answer=final_answer,
        is_timeline_collapsed=collapse_timeline,
        timeline_markdown=timeline_markdown,
        show_timeline_panel=show_timeline_panel,
    )
