"""
Card styling configuration for run statuses.

This module defines the header styling for each run status: the card
template colour and the standard icon token. The console preview maps
template colours to Rich colours.
"""
from dataclasses import dataclass
from typing import Dict

from larkcard.run.message_state import RunStatus


@dataclass(frozen=True)
class CardStyle:
    """
    Visual styling configuration for a card header.

    Attributes:
        template: Lark header template colour
        icon: Lark standard_icon token
    """
    template: str
    icon: str


DEFAULT_CARD_STYLE = CardStyle(
    template="grey",
    icon="info_filled",
)

# Mapping of RunStatus to CardStyle; statuses not listed use DEFAULT_CARD_STYLE
CARD_STYLES: Dict[RunStatus, CardStyle] = {
    RunStatus.COMPLETED: CardStyle(
        template="green",
        icon="succeed_filled",
    ),
    RunStatus.TOOL_CALLING: CardStyle(
        template="wathet",
        icon="setting-inter_filled",
    ),
    RunStatus.CANCELED: CardStyle(
        template="orange",
        icon="ban_filled",
    ),
    RunStatus.ERROR: CardStyle(
        template="red",
        icon="error_filled",
    ),
    RunStatus.THINKING: CardStyle(
        template="blue",
        icon="premium-gleam_filled",
    ),
}

# Rich colour names for Lark header templates, used by the console preview
TEMPLATE_PREVIEW_COLORS: Dict[str, str] = {
    "green": "green",
    "wathet": "cyan",
    "orange": "dark_orange",
    "red": "red",
    "blue": "blue",
    "grey": "grey50",
}


def get_card_style(status: RunStatus) -> CardStyle:
    """
    Get the CardStyle for a given RunStatus.

    Args:
        status: The run status to get styling for

    Returns:
        CardStyle for the status, or the grey info style if not mapped
    """
    return CARD_STYLES.get(status, DEFAULT_CARD_STYLE)
