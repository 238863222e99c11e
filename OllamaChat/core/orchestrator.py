"""
Turn Orchestrator Module

Decides, for each inbound message, whether to just record it, reject it as
too long, or run a full request/response cycle against the backend, and
reconciles the outcome with the conversation's history.
"""

import asyncio
import logging
from typing import Optional, TYPE_CHECKING

from ..ai.ollama import FailureCause, classify_exception
from ..debug_server import broadcast_event
from ..locales import Translator
from ..metrics import MetricsCollector, get_metrics_collector
from .context import ChatContext
from .store import ConversationStore
from .types import InboundEvent, Reply, UserMessage, format_timestamp

if TYPE_CHECKING:
    from ..ai.ollama import OllamaClient
    from ..config import ChatConfig

logger = logging.getLogger(__name__)

# Minimum authority needed to reset somebody else's conversation
RESET_OTHER_AUTHORITY = 3

_FAILURE_MESSAGES = {
    FailureCause.CONNECT_TIMEOUT: "connTimeout",
    FailureCause.CONNECTION_REFUSED: "connRefused",
    FailureCause.RESPONSE_TIMEOUT: "responseTimeout",
}


def extract_user_message(event: InboundEvent) -> UserMessage:
    """Normalize an inbound event into a trace record."""
    return UserMessage(
        id=event.sender_id,
        name=event.sender_name,
        time=format_timestamp(event.timestamp_ms),
        msg=event.content,
    )


class TurnOrchestrator:
    """
    Drives one chat turn per inbound message.

    Owns the ConversationStore. Turns of the same conversation run one at a
    time under the store's per-conversation lock; turns of different
    conversations run concurrently.
    """

    def __init__(
        self,
        client: "OllamaClient",
        chat_config: "ChatConfig",
        bot_id: str,
        store: Optional[ConversationStore] = None,
        translator: Optional[Translator] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.client = client
        self.config = chat_config
        self.bot_id = bot_id
        self.store = store if store is not None else ConversationStore()
        self.translate = translator or Translator(chat_config.locale)
        self.metrics = metrics or get_metrics_collector()

    def is_triggered(self, event: InboundEvent) -> bool:
        """Direct chats always trigger; group chats need a mention or the call prefix."""
        if not event.is_group:
            return True
        return self.bot_id in event.mentioned_ids or event.content.startswith(self.config.call_prefix)

    async def handle(self, event: InboundEvent) -> Optional[Reply]:
        """
        Process one inbound message.

        Returns:
            The reply to send, or None when the message does not address the bot
        """
        async with self.store.lock_for(event.conversation_id):
            return await self._handle_locked(event)

    async def _handle_locked(self, event: InboundEvent) -> Optional[Reply]:
        context = self.store.get_or_create(event.conversation_id, event.is_group)
        logger.debug(f"Message from {event.conversation_id}: {event.content}")

        too_long = len(event.content) > self.config.too_long_threshold
        if not too_long:
            context.trace(extract_user_message(event))

        if not self.is_triggered(event):
            return None

        broadcast_event("user_input", {
            "conversation_id": event.conversation_id,
            "user_name": event.sender_name,
            "content": event.content,
        })

        if too_long:
            logger.info(
                f"Rejected message from {event.sender_id} in {event.conversation_id}: "
                f"{len(event.content)} > {self.config.too_long_threshold} chars"
            )
            self.metrics.record_too_long()
            return Reply(self.translate("contentTooLong"))

        return await self._run_request(event, context)

    async def _run_request(self, event: InboundEvent, context: ChatContext) -> Reply:
        request = context.prepare_request()
        logger.debug(f"History context for {event.conversation_id}: {len(request.messages)} messages")
        broadcast_event("turn_start", {
            "conversation_id": event.conversation_id,
            "history_length": len(request.messages),
        })

        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            reply = await self.client.chat(self.config.model_name, request.messages)
        except asyncio.CancelledError:
            request.cancel()
            logger.info(f"Chat request for {event.conversation_id} was cancelled; history rolled back")
            raise
        except Exception as e:
            request.cancel()
            latency_ms = (loop.time() - started) * 1000
            return self._failure_reply(event, e, latency_ms)

        request.finish(reply)
        latency_ms = (loop.time() - started) * 1000
        self.metrics.record_turn(latency_ms, success=True)
        broadcast_event("turn_end", {
            "conversation_id": event.conversation_id,
            "response": reply.content,
            "latency_ms": latency_ms,
        })
        return Reply(reply.content, quote_id=event.message_id)

    def _failure_reply(self, event: InboundEvent, error: Exception, latency_ms: float) -> Reply:
        cause = classify_exception(error)
        self.metrics.record_turn(latency_ms, success=False, cause=cause.value)
        broadcast_event("turn_failed", {
            "conversation_id": event.conversation_id,
            "cause": cause.value,
        })

        key = _FAILURE_MESSAGES.get(cause)
        if key is None:
            logger.error(f"Unknown error when chatting in {event.conversation_id}: {error}", exc_info=error)
            key = "unknownError"
        else:
            logger.warning(f"Chat failed in {event.conversation_id} ({cause.value}): {error}")
        return Reply(self.translate(key))

    def reset_chat(self, source_id: str, target_id: Optional[str] = None, authority: int = 1) -> str:
        """
        Drop one conversation's context.

        Args:
            source_id: The caller's own conversation id (group or direct)
            target_id: Another user's direct conversation id, if given
            authority: Caller's privilege level; targeting others needs RESET_OTHER_AUTHORITY

        Returns:
            Localized confirmation (or refusal) text
        """
        if target_id is not None and authority < RESET_OTHER_AUTHORITY:
            logger.info(f"Refused reset of {target_id}: authority {authority} < {RESET_OTHER_AUTHORITY}")
            return self.translate("insufficientAuthority")

        target = target_id if target_id is not None else source_id
        logger.debug(f"Trying to reset for: {target}")
        removed = self.store.reset(target)
        broadcast_event("chat_reset", {"conversation_id": target, "existed": removed})

        if target_id is not None:
            return self.translate("successWithTarget", target)
        return self.translate("success", target)
