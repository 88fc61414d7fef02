"""
Property-based tests for the agent run tracker.

Tests deduplication, in-place tool result updates and status handling
of AgentRunTracker using hypothesis.
"""

import allure
from hypothesis import given, settings, strategies as st

from larkcard.run.message_state import (
    AssistantMessage,
    RunStatus,
    TextPart,
    ThinkingPart,
    TimelineEntry,
    TimelineKind,
    ToolCallPart,
    ToolMessage,
    ToolResultPart,
)
from larkcard.run.tool_labels import get_tool_label, normalize_tool_name
from larkcard.run.tracker import (
    AgentRunTracker,
    collect_display_chunks,
    format_tool_call,
    infer_status_from_messages,
    resolve_duration_ms,
)


def tool_call(tool_use_id: str, name: str = "web_search", started_at=None) -> AssistantMessage:
    return AssistantMessage(content=[
        ToolCallPart(tool_name=name, tool_use_id=tool_use_id, started_at=started_at),
    ])


def tool_result(tool_use_id: str, duration_ms=None, completed_at=None) -> ToolMessage:
    return ToolMessage(
        tool_use_id=tool_use_id,
        content=[ToolResultPart(
            tool_use_id=tool_use_id,
            text="ok",
            duration_ms=duration_ms,
            completed_at=completed_at,
        )],
    )


tool_ids = st.text(alphabet="abcdef0123456789", min_size=1, max_size=8)


@allure.feature("Run Tracker")
@allure.story("Tool call dedup by tool_use_id")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(ids=st.lists(tool_ids, min_size=1, max_size=6), repeats=st.integers(min_value=1, max_value=4))
def test_tool_calls_appear_once_per_id(ids: list, repeats: int):
    """
    For any sequence of tool calls, possibly resent several times, the
    timeline SHALL contain exactly one entry per distinct tool_use_id.
    """
    tracker = AgentRunTracker()
    for _ in range(repeats):
        tracker.append_messages([tool_call(i) for i in ids])

    timeline_ids = [e.tool_use_id for e in tracker.timeline if e.kind == TimelineKind.TOOL_CALL]
    assert sorted(timeline_ids) == sorted(set(ids))
    assert timeline_ids == list(dict.fromkeys(ids))


@allure.feature("Run Tracker")
@allure.story("Text entries are deduplicated")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(texts=st.lists(st.text(alphabet="abc xyz", min_size=1, max_size=10), max_size=8))
def test_text_entries_appear_once(texts: list):
    """
    Repeating the same text SHALL never add a second timeline entry.
    """
    tracker = AgentRunTracker()
    for text in texts:
        tracker.append_messages([AssistantMessage(content=[TextPart(text=text)])])
        tracker.append_messages([AssistantMessage(content=[TextPart(text=text)])])

    keys = [e.dedup_key for e in tracker.timeline]
    assert len(keys) == len(set(keys))
    expected = list(dict.fromkeys(t.strip() for t in texts if t.strip()))
    assert [e.content for e in tracker.timeline] == expected


@allure.feature("Run Tracker")
@allure.story("Tool result updates the call in place")
@allure.severity(allure.severity_level.CRITICAL)
def test_result_in_same_batch_sets_duration():
    """Test that a result in the same batch attaches a duration tag."""
    tracker = AgentRunTracker()
    tracker.append_messages([tool_call("t1"), tool_result("t1", duration_ms=1234)])

    timeline = tracker.timeline
    assert len(timeline) == 1
    assert timeline[0].duration_ms == 1234
    assert "耗时 1.2 秒" in timeline[0].content


@allure.feature("Run Tracker")
@allure.story("Tool result updates the call in place")
@allure.severity(allure.severity_level.CRITICAL)
def test_result_in_later_batch_replaces_call_in_place():
    """Test that a result arriving later rewrites the existing line."""
    tracker = AgentRunTracker()
    tracker.append_messages([tool_call("t1", started_at=1000.0)])
    tracker.append_messages([AssistantMessage(content=[TextPart(text="searching")])])
    tracker.append_messages([tool_result("t1", completed_at=3500.0)])

    timeline = tracker.timeline
    assert [e.kind for e in timeline] == [TimelineKind.TOOL_CALL, TimelineKind.TEXT]
    assert timeline[0].duration_ms == 2500.0
    assert timeline[0].content == format_tool_call("web_search", 2500.0)


@allure.feature("Run Tracker")
@allure.story("Tool result updates the call in place")
@allure.severity(allure.severity_level.NORMAL)
def test_resent_call_keeps_known_duration():
    """Test that resending a call without its result keeps the duration."""
    tracker = AgentRunTracker()
    tracker.append_messages([tool_call("t1"), tool_result("t1", duration_ms=500)])
    tracker.append_messages([tool_call("t1")])

    assert tracker.timeline[0].duration_ms == 500


@allure.feature("Run Tracker")
@allure.story("Result without a known call")
@allure.severity(allure.severity_level.NORMAL)
def test_orphan_result_is_ignored():
    """Test that results for unknown calls add nothing."""
    tracker = AgentRunTracker()
    tracker.append_messages([tool_result("missing", duration_ms=10)])
    assert tracker.timeline == []


@allure.feature("Run Tracker")
@allure.story("Final text becomes the draft answer")
@allure.severity(allure.severity_level.NORMAL)
def test_final_text_replaces_draft():
    """Test that assistant text replaces the draft answer."""
    tracker = AgentRunTracker()
    tracker.set_draft_answer("old")
    tracker.append_messages([AssistantMessage(content=[TextPart(text="  new answer ")])])
    assert tracker.draft_answer == "new answer"

    tracker.append_messages([tool_call("t1")])
    assert tracker.draft_answer == "new answer"


@allure.feature("Run Tracker")
@allure.story("Permissive status transitions")
@allure.severity(allure.severity_level.NORMAL)
@settings(max_examples=50)
@given(statuses=st.lists(st.sampled_from(list(RunStatus)), min_size=1, max_size=10))
def test_any_status_transition_is_accepted(statuses: list):
    """
    For any sequence of statuses, the tracker SHALL report the last one set.
    """
    tracker = AgentRunTracker()
    assert tracker.status == RunStatus.THINKING
    for status in statuses:
        tracker.set_status(status)
    assert tracker.status == statuses[-1]


@allure.feature("Run Tracker")
@allure.story("Permissive status transitions")
@allure.severity(allure.severity_level.NORMAL)
def test_completed_can_return_to_thinking():
    """Test that a terminal status can be left again."""
    tracker = AgentRunTracker()
    tracker.set_status(RunStatus.COMPLETED)
    tracker.set_status(RunStatus.THINKING)
    assert tracker.status == RunStatus.THINKING


@allure.feature("Run Tracker")
@allure.story("Reset")
@allure.severity(allure.severity_level.MINOR)
def test_reset_clears_state():
    """Test that reset() forgets the timeline, draft and seen keys."""
    tracker = AgentRunTracker()
    tracker.append_messages([tool_call("t1"), AssistantMessage(content=[TextPart(text="hi")])])
    tracker.set_status(RunStatus.ERROR)
    tracker.reset()

    assert tracker.timeline == []
    assert tracker.draft_answer == ""
    assert tracker.status == RunStatus.THINKING

    tracker.append_messages([tool_call("t1")])
    assert len(tracker.timeline) == 1


@allure.feature("Run Tracker")
@allure.story("Timeline is returned as a copy")
@allure.severity(allure.severity_level.MINOR)
def test_timeline_property_is_a_copy():
    """Test that mutating the returned timeline leaves the tracker intact."""
    tracker = AgentRunTracker()
    tracker.append_messages([AssistantMessage(content=[TextPart(text="hi")])])
    tracker.timeline.append(TimelineEntry(kind=TimelineKind.TEXT, content="x"))
    assert len(tracker.timeline) == 1


@allure.feature("Run Tracker")
@allure.story("Display chunk projection")
@allure.severity(allure.severity_level.NORMAL)
def test_collect_display_chunks_skips_blank_parts():
    """Test that whitespace-only text and thinking parts are dropped."""
    chunks = collect_display_chunks([
        AssistantMessage(content=[
            TextPart(text="   "),
            ThinkingPart(text="\n"),
            ThinkingPart(text=" plan "),
            TextPart(text="a"),
            TextPart(text="b"),
        ]),
    ])

    assert [(e.kind, e.content) for e in chunks.timeline] == [
        (TimelineKind.THINKING, "plan"),
        (TimelineKind.TEXT, "a"),
        (TimelineKind.TEXT, "b"),
    ]
    assert chunks.final_text == "a\n\nb"


@allure.feature("Run Tracker")
@allure.story("Status inference")
@allure.severity(allure.severity_level.NORMAL)
def test_infer_status_from_messages():
    """Test that tool calls win over thinking and plain text infers nothing."""
    assert infer_status_from_messages([
        AssistantMessage(content=[ThinkingPart(text="x"), ToolCallPart(tool_name="read")]),
    ]) == RunStatus.TOOL_CALLING
    assert infer_status_from_messages([
        AssistantMessage(content=[ThinkingPart(text="x")]),
    ]) == RunStatus.THINKING
    assert infer_status_from_messages([
        AssistantMessage(content=[TextPart(text="x")]),
        tool_result("t1"),
    ]) is None


@allure.feature("Run Tracker")
@allure.story("Duration resolution")
@allure.severity(allure.severity_level.NORMAL)
def test_resolve_duration_prefers_reported_value():
    """Test duration precedence: reported, then timestamps."""
    assert resolve_duration_ms(42, 1000.0, 5000.0) == 42
    assert resolve_duration_ms(None, 1000.0, 5000.0) == 4000.0
    assert resolve_duration_ms(None, 5000.0, 1000.0) == 0.0
    assert resolve_duration_ms(None, None, 5000.0) is None


@allure.feature("Run Tracker")
@allure.story("Tool call formatting")
@allure.severity(allure.severity_level.NORMAL)
def test_format_tool_call_uses_labels():
    """Test that known tools are labelled and unknown tools keep their name."""
    assert format_tool_call("web_search") == "调用 `'网页搜索'` 工具"
    assert format_tool_call("my_tool") == "调用 `'my_tool'` 工具"
    assert format_tool_call("read", 2000) == (
        "调用 `'读取文件'` 工具 <text_tag color='turquoise'>耗时 2.0 秒</text_tag>"
    )


@allure.feature("Run Tracker")
@allure.story("Tool label normalization")
@allure.severity(allure.severity_level.MINOR)
def test_tool_label_normalization():
    """Test that case, hyphens and spaces do not affect label lookup."""
    assert normalize_tool_name("Web Search") == "web_search"
    assert normalize_tool_name("web-search") == "web_search"
    assert get_tool_label("WEB-SEARCH") == "网页搜索"
    assert get_tool_label("Custom Tool") == "Custom Tool"


@allure.feature("Run Tracker")
@allure.story("Non-finite durations")
@allure.severity(allure.severity_level.NORMAL)
@given(duration=st.sampled_from([float("nan"), float("inf"), float("-inf")]))
def test_non_finite_duration_is_not_rendered(duration: float):
    """
    A tool result reporting NaN or an infinite duration SHALL leave the
    tool line without a duration tag, or fall back to the timestamps.
    """
    tracker = AgentRunTracker()
    tracker.append_messages([tool_call("t1"), tool_result("t1", duration_ms=duration)])
    assert tracker.timeline[0].duration_ms is None
    assert tracker.timeline[0].content == "调用 `'网页搜索'` 工具"

    timed = AgentRunTracker()
    timed.append_messages([
        tool_call("t2", started_at=1000.0),
        tool_result("t2", duration_ms=duration, completed_at=2000.0),
    ])
    assert timed.timeline[0].duration_ms == 1000.0
    assert "耗时 1.0 秒" in timed.timeline[0].content

    assert format_tool_call("read", duration) == "调用 `'读取文件'` 工具"
    assert resolve_duration_ms(duration, None, None) is None
