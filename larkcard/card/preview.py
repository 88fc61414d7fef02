"""
Terminal preview of card documents.

Draws a card document with Rich so a run can be watched without a Lark
tenant: the header becomes a coloured title, the timeline panel a dimmed
block and the markdown body is rendered as Markdown.
"""
import re
from typing import Any, Dict, List, Optional

from rich.console import Console, Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from larkcard.card.card_styles import TEMPLATE_PREVIEW_COLORS

_TEXT_TAG_PATTERN = r"<text_tag[^>]*>(.*?)</text_tag>"


def _strip_card_tags(content: str) -> str:
    """Replace Lark-only inline tags with their text."""
    return re.sub(_TEXT_TAG_PATTERN, r"[\1]", content)


def _render_element(element: Dict[str, Any]) -> Optional[RenderableType]:
    tag = element.get("tag")
    if tag == "markdown":
        return Markdown(_strip_card_tags(element.get("content", "")))
    if tag == "collapsible_panel":
        title = element.get("header", {}).get("title", {}).get("content", "")
        expanded = element.get("expanded", False)
        marker = "▼" if expanded else "▶"
        if not expanded:
            return Text(f"{marker} {title}", style="dim")
        inner: List[RenderableType] = [Text(f"{marker} {title}", style="dim")]
        for child in element.get("elements", []):
            rendered = _render_element(child)
            if rendered is not None:
                inner.append(rendered)
        inner.append(Rule(style="dim"))
        return Group(*inner)
    return None


def render_card(card: Dict[str, Any], subtitle: Optional[str] = None) -> Panel:
    """
    Build a Rich panel for a card document.

    Args:
        card: Card document as produced by build_lark_card()
        subtitle: Optional panel subtitle (e.g., the message id)

    Returns:
        Panel renderable
    """
    header = card.get("header", {})
    template = header.get("template", "grey")
    color = TEMPLATE_PREVIEW_COLORS.get(template, "white")
    title = header.get("title", {}).get("content", "")

    parts: List[RenderableType] = []
    for element in card.get("body", {}).get("elements", []):
        rendered = _render_element(element)
        if rendered is not None:
            parts.append(rendered)

    return Panel(
        Group(*parts),
        title=Text(title, style=f"bold {color}"),
        title_align="left",
        subtitle=subtitle,
        border_style=color,
    )


def print_card(console: Console, card: Dict[str, Any], subtitle: Optional[str] = None) -> None:
    """Print a card document to the console."""
    console.print(render_card(card, subtitle=subtitle))
