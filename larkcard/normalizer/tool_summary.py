"""
Plain-text tool summary parsing.

When a reply carries neither structured messages nor events, the agent's
text may still contain one-line tool summaries such as
"🔎 web_search: query=foo". These lines are turned into localized tool
lines for the timeline; everything else is kept as answer text.
"""

import re
from dataclasses import dataclass, field
from typing import List

from larkcard.run.tool_labels import TOOL_NAME_LABELS, get_tool_label

__all__ = ['TOOL_NAME_LABELS', 'ToolSummary', 'split_tool_summary_lines', 'format_tool_summary_line']

# Extended_Pictographic code points, variation selector and zero-width joiner
_PICTOGRAPHIC = (
    "\u00a9\u00ae\u203c\u2049\u2122\u2139\u2194-\u2199\u21a9-\u21aa"
    "\u231a-\u231b\u2328\u2388\u23cf\u23e9-\u23f3\u23f8-\u23fa"
    "\u24c2\u25aa-\u25ab\u25b6\u25c0\u25fb-\u25fe"
    "\u2600-\u2605\u2607-\u2612\u2614-\u2685\u2690-\u2705\u2708-\u2712"
    "\u2714\u2716\u271d\u2721\u2728\u2733-\u2734\u2744\u2747\u274c\u274e"
    "\u2753-\u2755\u2757\u2763-\u2767\u2795-\u2797\u27a1\u27b0\u27bf"
    "\u2934-\u2935\u2b05-\u2b07\u2b1b-\u2b1c\u2b50\u2b55"
    "\u3030\u303d\u3297\u3299"
    "\U0001f000-\U0001f0ff\U0001f10d-\U0001f10f\U0001f12f\U0001f16c-\U0001f171"
    "\U0001f17e-\U0001f17f\U0001f18e\U0001f191-\U0001f19a\U0001f1ad-\U0001f1e5"
    "\U0001f201-\U0001f20f\U0001f21a\U0001f22f\U0001f232-\U0001f23a"
    "\U0001f23c-\U0001f23f\U0001f249-\U0001f3fa\U0001f400-\U0001f53d"
    "\U0001f546-\U0001f64f\U0001f680-\U0001f6ff\U0001f774-\U0001f77f"
    "\U0001f7d5-\U0001f7ff\U0001f80c-\U0001f80f\U0001f848-\U0001f84f"
    "\U0001f85a-\U0001f85f\U0001f888-\U0001f88f\U0001f8ae-\U0001f8ff"
    "\U0001f90c-\U0001f93a\U0001f93c-\U0001f945\U0001f947-\U0001faff"
    "\U0001fc00-\U0001fffd"
    "\ufe0f\u200d"
)

TOOL_LINE_PATTERN = re.compile(
    r"^\s*[" + _PICTOGRAPHIC + r"\s]*([A-Za-z][A-Za-z0-9_ ]{0,60})\s*:\s*(.*)$"
)


@dataclass
class ToolSummary:
    """Result of splitting plain text into tool lines and remaining text.

    Attributes:
        tool_lines: Formatted tool lines, in order of appearance
        remaining_text: Text that was not a tool line; prefixed with a blank
            line when tool lines were found too
    """
    tool_lines: List[str] = field(default_factory=list)
    remaining_text: str = ""


def format_tool_summary_line(tool_name: str, meta: str = "") -> str:
    """Format a tool summary line as shown on the timeline."""
    header = f"调用`{get_tool_label(tool_name)}`工具:"
    meta = meta.strip()
    return f"{header} {meta}" if meta else header


def split_tool_summary_lines(text: str) -> ToolSummary:
    """
    Split text into tool summary lines and the remaining free text.

    Args:
        text: Plain reply text

    Returns:
        ToolSummary with the formatted tool lines and the leftover text
    """
    tool_lines: List[str] = []
    other_lines: List[str] = []

    for raw_line in re.split(r'\r?\n', text):
        line = raw_line.strip()
        if not line:
            other_lines.append(raw_line)
            continue
        match = TOOL_LINE_PATTERN.match(line)
        if match:
            tool_lines.append(format_tool_summary_line(match.group(1).strip(), match.group(2)))
            continue
        other_lines.append(raw_line)

    remaining_text = "\n".join(other_lines).strip()
    if tool_lines and remaining_text:
        remaining_text = f"\n\n{remaining_text}"

    return ToolSummary(tool_lines=tool_lines, remaining_text=remaining_text)
