"""Coalescing card update scheduler.

CardUpdateScheduler publishes card edits for one message. Only the freshest
card matters: schedule() overwrites a single pending slot, and one publish
loop drains it while keeping edits at least `min_interval` seconds apart.
Intermediate cards may be dropped, the most recently scheduled card never
is.

State machine:
    IDLE → PUBLISHING (schedule, no loop running)
    PUBLISHING → PUBLISHING (a card was scheduled during a publish)
    PUBLISHING → IDLE (pending slot empty)
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional


logger = logging.getLogger(__name__)

Card = Dict[str, Any]
PublishFn = Callable[[Card], Awaitable[None]]

DEFAULT_MIN_INTERVAL = 0.35  # seconds


class CardUpdateScheduler:
    """Publishes the latest scheduled card with at most one publish in flight.

    The scheduler is created right after the message itself was created,
    so that create call counts as the first publish for spacing purposes.

    Attributes:
        publish_count: Number of successful publishes
    """

    def __init__(
        self,
        publish: PublishFn,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the scheduler.

        Args:
            publish: Coroutine function that sends one card
            min_interval: Minimum seconds between two publishes
            clock: Monotonic clock in seconds
        """
        self._publish = publish
        self._min_interval = max(min_interval, 0.0)
        self._clock = clock
        self._pending: Optional[Card] = None
        self._task: Optional[asyncio.Task] = None
        self._last_published_at = clock()
        self._error: Optional[Exception] = None
        self.publish_count = 0

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def is_publishing(self) -> bool:
        """Whether the publish loop is running."""
        return self._task is not None

    def schedule(self, card: Card) -> None:
        """Replace the pending card and make sure the publish loop runs.

        Never blocks. Must be called from a running event loop.
        """
        self._pending = card
        self._kick()

    async def flush(self) -> None:
        """Wait until every scheduled card has been handled.

        Returns once the publish loop is idle and nothing is pending.

        Raises:
            Exception: The error of the most recent publish, if it failed
        """
        while self._task is not None or self._pending is not None:
            if self._task is None:
                self._kick()
            # shield: a cancelled caller must not abort a publish in flight
            await asyncio.shield(self._task)

        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def _kick(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._pending is not None:
                await self._publish_once()
        except Exception as e:
            logger.warning("card update failed: %s", e)
            self._error = e
        finally:
            self._task = None
            if self._pending is not None:
                self._kick()

    async def _publish_once(self) -> None:
        wait = self._min_interval - (self._clock() - self._last_published_at)
        if wait > 0:
            await asyncio.sleep(wait)

        card = self._pending
        self._pending = None
        if card is None:
            return

        self._last_published_at = self._clock()
        await self._publish(card)
        self._error = None
        self.publish_count += 1
