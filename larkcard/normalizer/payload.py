"""
Reply payload normalization.

Finds the structured content of a reply payload: canonical agent messages,
verbose events, or failing both, the plain text to be parsed for tool
summaries.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from larkcard.normalizer.extractors import (
    ExtractorRegistry,
    create_event_registry,
    create_message_registry,
    lookup,
)
from larkcard.normalizer.messages import coerce_messages
from larkcard.run.message_state import AgentMessage


_message_registry: Optional[ExtractorRegistry] = None
_event_registry: Optional[ExtractorRegistry] = None


def get_message_registry() -> ExtractorRegistry:
    """Get the global registry used to locate agent messages."""
    global _message_registry
    if _message_registry is None:
        _message_registry = create_message_registry()
    return _message_registry


def get_event_registry() -> ExtractorRegistry:
    """Get the global registry used to locate verbose events."""
    global _event_registry
    if _event_registry is None:
        _event_registry = create_event_registry()
    return _event_registry


def extract_agent_messages(
    payload: Any,
    registry: Optional[ExtractorRegistry] = None,
) -> Optional[List[AgentMessage]]:
    """
    Extract canonical agent messages from a payload.

    Args:
        payload: Reply payload
        registry: Registry to search (defaults to the global one)

    Returns:
        Non-empty list of typed messages, or None
    """
    found = (registry or get_message_registry()).extract(payload)
    if not found:
        return None
    return coerce_messages(found) or None


def extract_verbose_events(
    payload: Any,
    registry: Optional[ExtractorRegistry] = None,
) -> Optional[list]:
    """Extract verbose events from a payload, or None when there are none."""
    return (registry or get_event_registry()).extract(payload) or None


def payload_text(payload: Any) -> str:
    """Get the plain text of a payload, or an empty string."""
    text = lookup(payload, "text")
    return text if isinstance(text, str) else ""


@dataclass
class NormalizedPayload:
    """Structured view of one reply payload.

    Attributes:
        events: Verbose events, applied before messages
        messages: Canonical agent messages
        text: Plain text, used only when there are no messages
    """
    events: list = field(default_factory=list)
    messages: List[AgentMessage] = field(default_factory=list)
    text: str = ""

    @property
    def uses_text_fallback(self) -> bool:
        return not self.messages and bool(self.text.strip())

    @property
    def is_empty(self) -> bool:
        return not self.events and not self.messages and not self.text.strip()


def normalize_payload(payload: Any) -> NormalizedPayload:
    """
    Normalize a reply payload.

    Never raises for unexpected shapes: anything unrecognized simply yields
    an empty NormalizedPayload.
    """
    return NormalizedPayload(
        events=extract_verbose_events(payload) or [],
        messages=extract_agent_messages(payload) or [],
        text=payload_text(payload),
    )
