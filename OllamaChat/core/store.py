"""
Conversation Store Module

Maps conversation ids to their chat contexts.
"""

import asyncio
import logging
from typing import Dict, Optional

from .context import ChatContext, new_context

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Lazily populated mapping of conversation id -> ChatContext.

    Also hands out one asyncio.Lock per conversation id. Holding it across
    a whole turn keeps the prepare/finish/cancel bracket of one conversation
    from interleaving with another turn of the same conversation.
    """

    def __init__(self):
        self._contexts: Dict[str, ChatContext] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)

    def get(self, conversation_id: str) -> Optional[ChatContext]:
        return self._contexts.get(conversation_id)

    def get_or_create(self, conversation_id: str, is_group: bool) -> ChatContext:
        """Return the context for a conversation, creating it on first use."""
        if conversation_id not in self._contexts:
            self._contexts[conversation_id] = new_context(is_group)
            logger.debug(
                f"Created {'group' if is_group else 'direct'} context for {conversation_id}"
            )
        return self._contexts[conversation_id]

    def reset(self, conversation_id: str) -> bool:
        """
        Drop a conversation's context (history and trace buffer together).

        Returns:
            True if a context existed and was removed
        """
        removed = self._contexts.pop(conversation_id, None)
        lock = self._locks.get(conversation_id)
        # A held lock still has a turn running or waiting on it
        if lock is not None and not lock.locked():
            del self._locks[conversation_id]
        return removed is not None

    def lock_for(self, conversation_id: str) -> asyncio.Lock:
        """Get or create the lock serializing turns of a conversation."""
        if conversation_id not in self._locks:
            self._locks[conversation_id] = asyncio.Lock()
        return self._locks[conversation_id]
