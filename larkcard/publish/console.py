"""
Console card client: previews card messages in the terminal.
"""
import itertools
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console

from larkcard.card.preview import print_card
from larkcard.publish.base import CardClient


class ConsoleCardClient(CardClient):
    """
    Prints every create and edit as a Rich panel instead of calling Lark.

    Message ids are sequential ("preview-1", "preview-2", ...). Every
    published card is also kept in `published` for inspection.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console()
        self._ids = itertools.count(1)
        self.published: List[Tuple[str, Dict[str, Any]]] = []

    @property
    def name(self) -> str:
        return "console"

    async def create_message(
        self,
        target: str,
        card: Dict[str, Any],
        reply_to_message_id: Optional[str] = None,
    ) -> str:
        message_id = f"preview-{next(self._ids)}"
        self.published.append((message_id, card))
        subtitle = f"{message_id} → {target}"
        if reply_to_message_id:
            subtitle += f" (reply to {reply_to_message_id})"
        print_card(self._console, card, subtitle=subtitle)
        return message_id

    async def edit_message(self, message_id: str, card: Dict[str, Any]) -> None:
        self.published.append((message_id, card))
        print_card(self._console, card, subtitle=f"{message_id} (edit #{len(self.published)})")
