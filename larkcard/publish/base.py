"""
Base classes for card message clients in larkcard.
Defines the interface used to create and edit a card message.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class CardClient(ABC):
    """
    Abstract base class for card message clients.

    A client creates the card message once and edits it afterwards. Both
    operations may fail; failures are raised to the caller and never
    retried here.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name, used in log messages."""
        pass

    @abstractmethod
    async def create_message(
        self,
        target: str,
        card: Dict[str, Any],
        reply_to_message_id: Optional[str] = None,
    ) -> str:
        """
        Send a new card message.

        Args:
            target: Conversation to send to (e.g., a chat id)
            card: Card document
            reply_to_message_id: Message to reply to instead of posting fresh

        Returns:
            Identifier of the created message
        """
        pass

    @abstractmethod
    async def edit_message(self, message_id: str, card: Dict[str, Any]) -> None:
        """
        Replace the card of an existing message.

        Args:
            message_id: Identifier returned by create_message()
            card: New card document
        """
        pass

    async def aclose(self) -> None:
        """Release any resources held by the client."""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
