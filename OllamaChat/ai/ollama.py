"""
Ollama Client Module

Async client for the Ollama chat API (non-streaming).
Failures are raised as OllamaError carrying a FailureCause so callers can
pick a user-facing message without inspecting aiohttp internals.
"""

import asyncio
import errno
import logging
from enum import Enum
from typing import Optional, Sequence

import aiohttp

from .. import config
from ..core.types import Message, Role

logger = logging.getLogger(__name__)


class FailureCause(str, Enum):
    CONNECT_TIMEOUT = "connect_timeout"
    CONNECTION_REFUSED = "connection_refused"
    RESPONSE_TIMEOUT = "response_timeout"
    HTTP_ERROR = "http_error"
    UNKNOWN = "unknown"


class OllamaError(Exception):
    """A failed chat call against the Ollama backend."""

    def __init__(self, message: str, cause: FailureCause = FailureCause.UNKNOWN, status: Optional[int] = None):
        super().__init__(message)
        self.cause = cause
        self.status = status


def classify_exception(exc: BaseException) -> FailureCause:
    """Map a transport exception to a FailureCause."""
    if isinstance(exc, OllamaError):
        return exc.cause
    # ConnectionTimeoutError subclasses asyncio.TimeoutError, so it goes first
    if isinstance(exc, aiohttp.ConnectionTimeoutError):
        return FailureCause.CONNECT_TIMEOUT
    if isinstance(exc, aiohttp.ClientConnectorError):
        if exc.errno == errno.ECONNREFUSED:
            return FailureCause.CONNECTION_REFUSED
        return FailureCause.UNKNOWN
    if isinstance(exc, asyncio.TimeoutError):
        return FailureCause.RESPONSE_TIMEOUT
    return FailureCause.UNKNOWN


class OllamaClient:
    """Async client for the Ollama API."""

    def __init__(
        self,
        host: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
    ):
        self.host = (host or config.ollama.endpoint).rstrip('/')
        self.timeout = aiohttp.ClientTimeout(
            total=request_timeout or config.ollama.request_timeout,
            connect=connect_timeout or config.ollama.connect_timeout,
        )
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def chat(self, model: str, messages: Sequence[Message]) -> Message:
        """
        Send a conversation to /api/chat and return the assistant's reply.

        Args:
            model: Ollama model name
            messages: Conversation so far, oldest first

        Returns:
            The assistant message

        Raises:
            OllamaError: on any transport, HTTP or payload failure
        """
        session = await self._get_session()
        payload = {
            "model": model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
        }

        try:
            async with session.post(f"{self.host}/api/chat", json=payload) as response:
                if response.status != 200:
                    text = await response.text()
                    raise OllamaError(
                        f"Ollama returned HTTP {response.status}: {text}",
                        FailureCause.HTTP_ERROR,
                        status=response.status,
                    )
                data = await response.json()
        except OllamaError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise OllamaError(f"Ollama chat failed: {type(e).__name__}: {e}", classify_exception(e)) from e

        try:
            reply = Message.from_dict(data["message"])
        except (KeyError, TypeError, ValueError) as e:
            raise OllamaError(f"Malformed Ollama response: {data!r}") from e

        if reply.role is not Role.ASSISTANT:
            raise OllamaError(f"Unexpected reply role from Ollama: {reply.role.value}")
        return reply

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
