"""Card rendering for larkcard."""
from .render_state import (
    RenderState,
    build_render_state,
    filter_timeline_entries,
    format_timeline_entry,
    render_timeline_markdown,
)
from .card_styles import CardStyle, CARD_STYLES, DEFAULT_CARD_STYLE, get_card_style
from .card_builder import build_lark_card
from .preview import render_card, print_card

__all__ = [
    # Render state projection
    'RenderState', 'build_render_state', 'filter_timeline_entries',
    'format_timeline_entry', 'render_timeline_markdown',
    # Styles
    'CardStyle', 'CARD_STYLES', 'DEFAULT_CARD_STYLE', 'get_card_style',
    # Card documents
    'build_lark_card',
    # Terminal preview
    'render_card', 'print_card',
]
