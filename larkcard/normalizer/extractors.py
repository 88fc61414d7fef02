"""
Payload extractors with plugin architecture.

Reply payloads do not share a single shape: producers nest the same
messages or events at the top level or under meta/extra/context/delta.
Each extractor reads one location; the registry tries extractors in
priority order and the first non-empty result wins.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional, Sequence


logger = logging.getLogger(__name__)


def lookup(obj: Any, key: str) -> Any:
    """Read a key from a mapping or an attribute from an object.

    Returns None when the key or attribute is missing.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def lookup_path(obj: Any, path: Sequence[str]) -> Any:
    """Follow a sequence of keys through nested mappings or objects."""
    current = obj
    for key in path:
        current = lookup(current, key)
        if current is None:
            return None
    return current


def looks_like_message(item: Any) -> bool:
    """Duck-type check for an agent message: it carries a role."""
    if isinstance(item, Mapping):
        return "role" in item
    return item is not None and hasattr(item, "role")


class PayloadExtractor(ABC):
    """Abstract base class for payload extraction strategies.

    Each strategy knows one place where a producer may put a list of
    messages or events. Strategies are registered with ExtractorRegistry
    and tried in priority order.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor identifier (e.g., 'meta.messages')."""
        pass

    @property
    @abstractmethod
    def priority(self) -> int:
        """Priority order (lower = tried first)."""
        pass

    @abstractmethod
    def extract(self, payload: Any) -> Optional[list]:
        """Extract a list from the payload.

        Args:
            payload: The reply payload.

        Returns:
            A non-empty list, or None when this location has nothing usable.

        Note:
            Implementations should NOT raise exceptions for malformed input.
        """
        pass


class PathExtractor(PayloadExtractor):
    """Extracts a list found at a fixed key path.

    Example:
        PathExtractor(("meta", "messages"), priority=3, require_role=True)
    """

    def __init__(
        self,
        path: Sequence[str],
        priority: int,
        require_role: bool = False,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            path: Keys to follow from the payload root
            priority: Lower values are tried first
            require_role: Only accept lists where some element looks like a message
        """
        self._path = tuple(path)
        self._priority = priority
        self._require_role = require_role

    @property
    def name(self) -> str:
        return ".".join(self._path)

    @property
    def priority(self) -> int:
        return self._priority

    def extract(self, payload: Any) -> Optional[list]:
        value = lookup_path(payload, self._path)
        if not isinstance(value, (list, tuple)) or not value:
            return None
        if self._require_role and not any(looks_like_message(item) for item in value):
            return None
        return list(value)


class ExtractorRegistry:
    """Tries registered extractors in priority order.

    Example:
        registry = ExtractorRegistry()
        registry.register(PathExtractor(("messages",), priority=1))
        items = registry.extract(payload)
    """

    def __init__(self) -> None:
        self._extractors: list[PayloadExtractor] = []

    @property
    def extractors(self) -> list[PayloadExtractor]:
        """Registered extractors in the order they are tried."""
        return list(self._extractors)

    def register(self, extractor: PayloadExtractor) -> None:
        """Register an extractor, keeping the list sorted by priority."""
        self._extractors.append(extractor)
        self._extractors.sort(key=lambda e: e.priority)

    def extract(self, payload: Any) -> Optional[list]:
        """Return the first non-empty list any extractor finds.

        This method never raises: a failing extractor is logged and skipped.
        """
        if payload is None:
            return None

        for extractor in self._extractors:
            try:
                found = extractor.extract(payload)
            except Exception as e:
                logger.debug("extractor %s failed: %s", extractor.name, e)
                continue
            if found:
                return found

        return None


MESSAGE_PATHS: tuple[tuple[str, ...], ...] = (
    ("messages",),
    ("meta", "agentMessages"),
    ("meta", "messages"),
    ("extra", "messages"),
    ("context", "messages"),
    ("delta", "messages"),
)

EVENT_PATHS: tuple[tuple[str, ...], ...] = (
    ("events",),
    ("meta", "events"),
    ("extra", "events"),
    ("context", "events"),
    ("delta", "events"),
)


def create_message_registry() -> ExtractorRegistry:
    """Build the registry that locates canonical agent messages."""
    registry = ExtractorRegistry()
    for priority, path in enumerate(MESSAGE_PATHS, start=1):
        registry.register(PathExtractor(path, priority=priority * 10, require_role=True))
    return registry


def create_event_registry() -> ExtractorRegistry:
    """Build the registry that locates verbose lifecycle events."""
    registry = ExtractorRegistry()
    for priority, path in enumerate(EVENT_PATHS, start=1):
        registry.register(PathExtractor(path, priority=priority * 10))
    return registry
