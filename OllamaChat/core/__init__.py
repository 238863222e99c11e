"""Core module for chat contexts and the conversation store."""

from .context import ChatContext, DirectChatContext, GroupChatContext, PendingRequest
from .store import ConversationStore

__all__ = [
    "ChatContext", "DirectChatContext", "GroupChatContext", "PendingRequest",
    "ConversationStore",
]
