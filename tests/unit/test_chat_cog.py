"""
Unit tests for the chat commands cog.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from OllamaChat.cogs.chat import (
    DEFAULT_AUTHORITY,
    MANAGER_AUTHORITY,
    OWNER_AUTHORITY,
    ChatCommands,
    resolve_authority,
)

# Suppress logging during tests
logging.disable(logging.CRITICAL)


def command_context(guild=True, owner=False, manage_guild=False):
    ctx = MagicMock()
    ctx.guild = MagicMock() if guild else None
    ctx.channel.id = 777
    ctx.author.id = 123
    ctx.author.guild_permissions.manage_guild = manage_guild
    ctx.send = AsyncMock()
    bot = MagicMock()
    bot.is_owner = AsyncMock(return_value=owner)
    return bot, ctx


def target_user(user_id=555):
    user = MagicMock()
    user.id = user_id
    return user


class TestResolveAuthority:
    """Test resolve_authority function."""

    @pytest.mark.asyncio
    async def test_owner(self):
        bot, ctx = command_context(owner=True)
        assert await resolve_authority(bot, ctx) == OWNER_AUTHORITY

    @pytest.mark.asyncio
    async def test_manager(self):
        bot, ctx = command_context(manage_guild=True)
        assert await resolve_authority(bot, ctx) == MANAGER_AUTHORITY

    @pytest.mark.asyncio
    async def test_member(self):
        bot, ctx = command_context()
        assert await resolve_authority(bot, ctx) == DEFAULT_AUTHORITY

    @pytest.mark.asyncio
    async def test_dm_without_owner(self):
        """Test that guild permissions are ignored outside a guild."""
        bot, ctx = command_context(guild=False, manage_guild=True)
        assert await resolve_authority(bot, ctx) == DEFAULT_AUTHORITY


class TestResetChatCommand:
    """Test the resetchat command."""

    @staticmethod
    async def invoke(orchestrator, bot, ctx, user=None):
        bot.orchestrator = orchestrator
        cog = ChatCommands(bot)
        await cog.reset_chat.callback(cog, ctx, user)
        return ctx.send.await_args.args[0]

    @pytest.mark.asyncio
    async def test_guild_resets_channel(self, orchestrator, translator):
        """Test that resetchat in a guild clears the channel's group conversation."""
        orchestrator.store.get_or_create("discord:777", is_group=True)
        bot, ctx = command_context()

        sent = await self.invoke(orchestrator, bot, ctx)

        assert sent == translator("success", "discord:777")
        assert "discord:777" not in orchestrator.store

    @pytest.mark.asyncio
    async def test_dm_resets_author(self, orchestrator, translator):
        """Test that resetchat in a DM clears the author's direct conversation."""
        orchestrator.store.get_or_create("discord:123", is_group=False)
        bot, ctx = command_context(guild=False)

        sent = await self.invoke(orchestrator, bot, ctx)

        assert sent == translator("success", "discord:123")
        assert "discord:123" not in orchestrator.store

    @pytest.mark.asyncio
    async def test_target_refused_for_member(self, orchestrator, translator):
        """Test that a plain member cannot reset another user's conversation."""
        orchestrator.store.get_or_create("discord:555", is_group=False)
        bot, ctx = command_context()

        sent = await self.invoke(orchestrator, bot, ctx, target_user())

        assert sent == translator("insufficientAuthority")
        assert "discord:555" in orchestrator.store

    @pytest.mark.asyncio
    async def test_target_allowed_for_manager(self, orchestrator, translator):
        """Test that manage_guild is enough to reset another user's conversation."""
        orchestrator.store.get_or_create("discord:555", is_group=False)
        bot, ctx = command_context(manage_guild=True)

        sent = await self.invoke(orchestrator, bot, ctx, target_user())

        assert sent == translator("successWithTarget", "discord:555")
        assert "discord:555" not in orchestrator.store
