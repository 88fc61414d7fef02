"""
Lark card document builder.

Maps a RenderState to the schema 2.0 interactive card document expected by
the Feishu/Lark message APIs.
"""
from typing import Any, Dict, List

from larkcard.card.card_styles import get_card_style
from larkcard.card.render_state import RenderState
from larkcard.constants import (
    CARD_HEADER_PADDING,
    CARD_SCHEMA_VERSION,
    NO_TIMELINE_RECORD,
    THINKING_PLACEHOLDER,
    TIMELINE_PANEL_TITLE,
)


def markdown_element(content: str) -> Dict[str, Any]:
    """Build a markdown block element."""
    return {"tag": "markdown", "content": content}


def timeline_panel_element(state: RenderState) -> Dict[str, Any]:
    """Build the collapsible panel holding the run timeline."""
    return {
        "tag": "collapsible_panel",
        "expanded": not state.is_timeline_collapsed,
        "header": {
            "title": {"tag": "plain_text", "content": TIMELINE_PANEL_TITLE},
        },
        "elements": [markdown_element(state.timeline_markdown or NO_TIMELINE_RECORD)],
    }


def build_lark_card(state: RenderState) -> Dict[str, Any]:
    """
    Build the card document for a render state.

    The body holds at most one collapsible timeline panel followed by
    exactly one markdown block with the body text.

    Args:
        state: The frame to render

    Returns:
        Card document ready to be JSON-encoded
    """
    elements: List[Dict[str, Any]] = []

    if state.show_timeline_panel and state.timeline:
        elements.append(timeline_panel_element(state))

    elements.append(markdown_element(state.body or THINKING_PLACEHOLDER))

    style = get_card_style(state.status)

    return {
        "schema": CARD_SCHEMA_VERSION,
        "config": {"update_multi": True, "wide_screen_mode": True},
        "header": {
            "template": style.template,
            "title": {"tag": "plain_text", "content": state.headline, "text_size": "normal"},
            "padding": CARD_HEADER_PADDING,
            "icon": {"tag": "standard_icon", "token": style.icon, "color": style.template},
        },
        "body": {
            "direction": "vertical",
            "elements": elements,
        },
    }
