"""
Chat Context Module

Per-conversation transcript and trace buffer.

Two variants share one contract (trace, prepare_request, finish_request,
cancel_request):
- DirectChatContext: one-to-one chats, remembers only the latest traced message
- GroupChatContext: group chats, remembers every untriggered message since the
  last answered turn (bounded to PENDING_LIMIT entries)

Every prepare_request() appends the user turn to history before the backend
is called, so it hands back a PendingRequest that must be finished or
cancelled exactly once.
"""

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import ClassVar, Deque, List, Optional, Tuple, Union

from .types import Message, Role, UserMessage

logger = logging.getLogger(__name__)

PENDING_LIMIT = 100


class ContextError(RuntimeError):
    """Raised when the request bracket of a chat context is misused."""


class RequestInFlightError(ContextError):
    pass


class NoRequestInFlightError(ContextError):
    pass


class RequestAlreadyFinalizedError(ContextError):
    pass


class NothingTracedError(ContextError):
    pass


class PendingRequest:
    """
    An in-flight request against a chat context.

    Holds a read-only snapshot of the history to send. Exactly one of
    finish() or cancel() must be called.
    """

    def __init__(self, context: "ChatContext", messages: Tuple[Message, ...]):
        self._context = context
        self.messages = messages
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def _close(self) -> None:
        if not self._open:
            raise RequestAlreadyFinalizedError("Request was already finished or cancelled")
        self._open = False

    def finish(self, reply: Message) -> None:
        """Commit the backend's reply to the context."""
        self._close()
        self._context.finish_request(reply)

    def cancel(self) -> None:
        """Roll the context back to its state before the request."""
        self._close()
        self._context.cancel_request()


def _open_request(context: "ChatContext", payload: str) -> PendingRequest:
    if context.in_flight:
        raise RequestInFlightError("A request is already in flight for this context")
    context.history.append(Message(Role.USER, payload))
    context.in_flight = True
    return PendingRequest(context, tuple(context.history))


def _close_request(context: "ChatContext") -> None:
    if not context.in_flight:
        raise NoRequestInFlightError("No request in flight for this context")
    context.in_flight = False


@dataclass
class DirectChatContext:
    """Context of a one-to-one conversation."""

    is_group: ClassVar[bool] = False

    history: List[Message] = field(default_factory=list)
    pending: Optional[UserMessage] = None
    in_flight: bool = field(default=False, repr=False)

    def trace(self, message: UserMessage) -> None:
        self.pending = message

    def prepare_request(self) -> PendingRequest:
        if self.pending is None:
            raise NothingTracedError("No message traced for this conversation")
        payload = json.dumps(self.pending.to_dict(), ensure_ascii=False)
        return _open_request(self, payload)

    def finish_request(self, reply: Message) -> None:
        _close_request(self)
        self.history.append(reply)

    def cancel_request(self) -> None:
        _close_request(self)
        self.history.pop()


@dataclass
class GroupChatContext:
    """Context of a group conversation."""

    is_group: ClassVar[bool] = True

    history: List[Message] = field(default_factory=list)
    pending: Deque[UserMessage] = field(default_factory=lambda: deque(maxlen=PENDING_LIMIT))
    in_flight: bool = field(default=False, repr=False)

    def trace(self, message: UserMessage) -> None:
        # deque(maxlen) drops the oldest entry on overflow
        self.pending.append(message)

    def prepare_request(self) -> PendingRequest:
        payload = json.dumps([m.to_dict() for m in self.pending], ensure_ascii=False)
        return _open_request(self, payload)

    def finish_request(self, reply: Message) -> None:
        _close_request(self)
        self.pending.clear()
        self.history.append(reply)

    def cancel_request(self) -> None:
        _close_request(self)
        self.history.pop()


ChatContext = Union[DirectChatContext, GroupChatContext]


def new_context(is_group: bool) -> ChatContext:
    """Create an empty context of the variant matching the conversation type."""
    return GroupChatContext() if is_group else DirectChatContext()
