"""
Unit tests for the Discord adapter helpers.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from OllamaChat.bot import message_to_event, send_reply, split_reply
from OllamaChat.core.orchestrator import extract_user_message
from OllamaChat.core.types import Reply, format_timestamp


def discord_message(guild=None, mentions=()):
    message = MagicMock()
    message.guild = guild
    message.id = 555
    message.channel.id = 777
    message.author.id = 123
    message.author.display_name = "TestUser"
    message.content = "hello"
    message.created_at = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    message.mentions = list(mentions)
    return message


class TestMessageToEvent:
    """Test message_to_event function."""

    def test_direct_message(self):
        """Test that DMs are keyed by the author."""
        event = message_to_event(discord_message())

        assert event.is_group is False
        assert event.conversation_id == "discord:123"
        assert event.sender_id == "123"
        assert event.message_id == "555"
        assert event.timestamp_ms == 1_700_000_000_000

    def test_guild_message(self):
        """Test that guild messages are keyed by channel and carry mentions."""
        bot_user = MagicMock()
        bot_user.id = 999
        event = message_to_event(discord_message(guild=MagicMock(), mentions=[bot_user]))

        assert event.is_group is True
        assert event.conversation_id == "discord:777"
        assert event.mentioned_ids == frozenset({"999"})


class TestHelpers:
    """Test reply splitting and trace record extraction."""

    def test_split_reply(self):
        assert split_reply("abcdef", 4) == ["abcd", "ef"]
        assert split_reply("", 4) == ["..."]

    def test_extract_user_message(self):
        event = message_to_event(discord_message())
        record = extract_user_message(event)

        assert record.id == "123"
        assert record.name == "TestUser"
        assert record.msg == "hello"
        assert record.time == format_timestamp(1_700_000_000_000)
        assert "2023" in record.time


class TestSendReply:
    """Test send_reply function."""

    @staticmethod
    def sendable_message():
        message = discord_message()
        message.reply = AsyncMock()
        message.channel.send = AsyncMock()
        return message

    @pytest.mark.asyncio
    async def test_quoted_reply(self):
        """Test that a reply with a quote id references the triggering message."""
        message = self.sendable_message()

        await send_reply(message, Reply("hi", quote_id="555"))

        message.reply.assert_awaited_once_with("hi")
        message.channel.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_plain_reply(self):
        """Test that a reply without a quote id goes straight to the channel."""
        message = self.sendable_message()

        await send_reply(message, Reply("too long"))

        message.channel.send.assert_awaited_once_with("too long")
        message.reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_long_reply_is_chunked(self, monkeypatch):
        """Test that only the first chunk is quoted and the rest follow in the channel."""
        from OllamaChat import config
        monkeypatch.setattr(config.bot, "max_reply_length", 4)
        message = self.sendable_message()

        await send_reply(message, Reply("abcdefghij", quote_id="555"))

        message.reply.assert_awaited_once_with("abcd")
        assert [c.args[0] for c in message.channel.send.await_args_list] == ["efgh", "ij"]
