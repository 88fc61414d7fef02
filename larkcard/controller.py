"""
Agent card renderer: the composition root of larkcard.

AgentCardRenderer turns a stream of reply payloads into one card message.
The first delivery creates the message; every later delivery, and the
final or error frame, edits it through a CardUpdateScheduler.
"""
import json
import logging
import time
from collections.abc import Mapping
from dataclasses import replace
from functools import partial
from typing import Any, Callable, Dict, Optional

from larkcard.card.card_builder import build_lark_card
from larkcard.config import RendererConfig, get_config
from larkcard.constants import EXECUTION_ERROR_TEXT
from larkcard.normalizer.payload import normalize_payload
from larkcard.normalizer.tool_summary import split_tool_summary_lines
from larkcard.normalizer.verbose_events import apply_verbose_event
from larkcard.publish.base import CardClient
from larkcard.publish.scheduler import CardUpdateScheduler
from larkcard.run.message_state import AssistantMessage, RunStatus, TextPart
from larkcard.run.stream_buffer import AssistantBuffer
from larkcard.run.tracker import AgentRunTracker, infer_status_from_messages


logger = logging.getLogger(__name__)

BodyDecorator = Callable[[str], str]


class AgentCardRenderer:
    """
    Renders one agent run as a progressively updated card message.

    Deliveries must be serialized by the caller, in stream order.

    Example:
        renderer = AgentCardRenderer(client, target="oc_123")
        async for payload in agent_replies:
            await renderer.deliver(payload)
        await renderer.finalize()
    """

    def __init__(
        self,
        client: CardClient,
        target: str,
        reply_to_message_id: Optional[str] = None,
        decorate_body: Optional[BodyDecorator] = None,
        config: Optional[RendererConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            client: Client used to create and edit the card message
            target: Conversation the card is sent to
            reply_to_message_id: Message the card replies to, if any
            decorate_body: Hook applied to the body text before the card is
                built (e.g., to add mentions)
            config: Renderer configuration
            clock: Monotonic clock handed to the update scheduler
        """
        self._client = client
        self._target = target
        self._reply_to_message_id = reply_to_message_id
        self._decorate_body = decorate_body
        self._config = config or RendererConfig()
        self._clock = clock

        self._tracker = AgentRunTracker()
        self._buffer = AssistantBuffer()
        self._message_id: Optional[str] = None
        self._scheduler: Optional[CardUpdateScheduler] = None

    @property
    def tracker(self) -> AgentRunTracker:
        return self._tracker

    @property
    def message_id(self) -> Optional[str]:
        """Identifier of the card message, once it has been created."""
        return self._message_id

    @property
    def scheduler(self) -> Optional[CardUpdateScheduler]:
        return self._scheduler

    async def deliver(self, payload: Any) -> None:
        """
        Apply one reply payload and publish the resulting card.

        Verbose events are applied first, then canonical messages; plain
        text is only parsed when the payload has no messages. Payloads with
        nothing usable are skipped.

        Raises:
            Exception: If creating the card message fails
        """
        self._log_payload(payload)
        normalized = normalize_payload(payload)

        for event in normalized.events:
            apply_verbose_event(self._tracker, event, self._buffer)

        if normalized.messages:
            status = infer_status_from_messages(normalized.messages)
            if status is not None:
                self._tracker.set_status(status)
            self._tracker.append_messages(normalized.messages)
        elif normalized.uses_text_fallback:
            self._apply_text(normalized.text)
        elif not normalized.events:
            logger.debug("deliver: empty payload, skipping")
            return

        await self._publish(collapse_timeline=False)

    async def finalize(self) -> None:
        """
        Publish the completed card and wait until it has been sent.

        Does nothing for runs that never produced a message or any answer.
        """
        if self._is_empty_run():
            logger.debug("finalize: nothing was rendered, skipping")
            return
        self._tracker.set_status(RunStatus.COMPLETED)
        await self._publish_final()

    async def on_error(self, error: Optional[BaseException] = None) -> None:
        """
        Publish the error card and wait until it has been sent.

        Args:
            error: The failure, shown as the answer when no answer exists
        """
        if self._is_empty_run():
            logger.debug("on_error: nothing was rendered, skipping")
            return
        self._tracker.set_status(RunStatus.ERROR)
        if error is not None and not self._tracker.draft_answer.strip():
            self._tracker.set_draft_answer(str(error) or EXECUTION_ERROR_TEXT)
        await self._publish_final()

    def render_card(self, collapse_timeline: bool = False) -> Dict[str, Any]:
        """Build the card document for the current run state."""
        state = self._tracker.build_render_state(collapse_timeline=collapse_timeline)
        if self._decorate_body is not None:
            state = replace(state, body=self._decorate_body(state.body))
        return build_lark_card(state)

    def _apply_text(self, text: str) -> None:
        summary = split_tool_summary_lines(text)

        if summary.tool_lines:
            self._tracker.set_status(RunStatus.TOOL_CALLING)
            self._tracker.append_messages([
                AssistantMessage(content=[TextPart(text=line) for line in summary.tool_lines]),
            ])

        if summary.remaining_text:
            self._tracker.set_draft_answer(self._buffer.merge(summary.remaining_text))
            if not summary.tool_lines:
                self._tracker.set_status(RunStatus.THINKING)

    def _is_empty_run(self) -> bool:
        return self._message_id is None and not self._tracker.draft_answer.strip()

    async def _publish(self, collapse_timeline: bool) -> None:
        card = self.render_card(collapse_timeline)
        if self._message_id is None:
            await self._create(card)
            return
        self._scheduler.schedule(card)

    async def _publish_final(self) -> None:
        card = self.render_card(collapse_timeline=True)
        if self._message_id is None:
            await self._create(card)
            return
        self._scheduler.schedule(card)
        await self._scheduler.flush()

    async def _create(self, card: Dict[str, Any]) -> None:
        message_id = await self._client.create_message(
            self._target,
            card,
            reply_to_message_id=self._reply_to_message_id,
        )
        self._message_id = message_id
        self._scheduler = CardUpdateScheduler(
            partial(self._client.edit_message, message_id),
            min_interval=self._config.min_update_interval,
            clock=self._clock,
        )
        logger.debug("created card message %s via %s", message_id, self._client.name)

    def _log_payload(self, payload: Any) -> None:
        if not self._config.debug_payloads:
            return
        try:
            snapshot = json.dumps(payload, ensure_ascii=False)
            if isinstance(payload, Mapping):
                keys = ",".join(map(str, payload.keys()))
            else:
                keys = type(payload).__name__
            logger.debug("payload keys=%s size=%d", keys, len(snapshot))
            logger.debug("payload sample=%s", snapshot[:self._config.payload_sample_chars])
        except Exception as e:
            logger.debug("payload log failed: %s: %s", type(e).__name__, e)


def create_renderer(
    client: CardClient,
    target: str,
    reply_to_message_id: Optional[str] = None,
    decorate_body: Optional[BodyDecorator] = None,
    config: Optional[RendererConfig] = None,
) -> AgentCardRenderer:
    """
    Create a renderer, using the global renderer configuration by default.

    Args:
        client: Client used to create and edit the card message
        target: Conversation the card is sent to
        reply_to_message_id: Message the card replies to, if any
        decorate_body: Hook applied to the body text before the card is built
        config: Renderer configuration override

    Returns:
        A new AgentCardRenderer
    """
    return AgentCardRenderer(
        client,
        target,
        reply_to_message_id=reply_to_message_id,
        decorate_body=decorate_body,
        config=config or get_config().renderer,
    )
