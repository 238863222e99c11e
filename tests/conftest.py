"""
Pytest configuration file for OllamaChat tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Keep package import free of startup validation
os.environ.setdefault("SKIP_CONFIG_VALIDATION", "true")

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from OllamaChat.config import ChatConfig
from OllamaChat.core.orchestrator import TurnOrchestrator
from OllamaChat.core.types import InboundEvent, Message, Role
from OllamaChat.locales import Translator
from OllamaChat.metrics import MetricsCollector

BOT_ID = "987654321098765432"


@pytest.fixture
def chat_config():
    """Chat enabled with the stock threshold and call prefix."""
    return ChatConfig(
        enabled=True,
        too_long_threshold=100,
        model_name="llama3",
        call_prefix="@Koishi",
        locale="en-US",
    )


@pytest.fixture
def translator():
    return Translator("en-US")


@pytest.fixture
def ollama_client():
    """Backend client whose chat() answers 'hi'."""
    client = AsyncMock()
    client.chat = AsyncMock(return_value=Message(Role.ASSISTANT, "hi"))
    return client


@pytest.fixture
def orchestrator(ollama_client, chat_config, translator):
    return TurnOrchestrator(
        ollama_client,
        chat_config,
        bot_id=BOT_ID,
        translator=translator,
        metrics=MetricsCollector(),
    )


@pytest.fixture
def make_event():
    """Factory for inbound events with sensible defaults."""
    counter = {"n": 0}

    def _make(content="hello", is_group=False, sender_id="123456789012345678",
              conversation_id=None, mentioned_ids=()):
        counter["n"] += 1
        if conversation_id is None:
            conversation_id = "discord:111222333444555666" if is_group else f"discord:{sender_id}"
        return InboundEvent(
            is_group=is_group,
            conversation_id=conversation_id,
            sender_id=sender_id,
            sender_name="TestUser",
            timestamp_ms=1_700_000_000_000 + counter["n"] * 1000,
            content=content,
            message_id=f"msg-{counter['n']}",
            mentioned_ids=frozenset(mentioned_ids),
        )

    return _make


@pytest.fixture
def bot_id():
    return BOT_ID
