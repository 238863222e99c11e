"""
Chat Commands Cog

Conversation management commands.
"""

import logging
from typing import Optional, TYPE_CHECKING

import discord
from discord.ext import commands

from ..bot import channel_conversation_id, user_conversation_id
from ..metrics import get_metrics_collector

if TYPE_CHECKING:
    from ..bot import OllamaChat

logger = logging.getLogger(__name__)

OWNER_AUTHORITY = 4
MANAGER_AUTHORITY = 3
DEFAULT_AUTHORITY = 1


async def resolve_authority(bot: commands.Bot, ctx: commands.Context) -> int:
    """Map Discord permissions onto a numeric privilege level."""
    if await bot.is_owner(ctx.author):
        return OWNER_AUTHORITY
    if ctx.guild and ctx.author.guild_permissions.manage_guild:
        return MANAGER_AUTHORITY
    return DEFAULT_AUTHORITY


class ChatCommands(commands.Cog):
    """Commands for the chat subsystem."""

    def __init__(self, bot: "OllamaChat"):
        self.bot = bot

    @commands.hybrid_command(
        name='resetchat',
        description="Reset the chat context of this conversation, or of another user."
    )
    async def reset_chat(self, ctx: commands.Context, user: Optional[discord.User] = None) -> None:
        """Reset the current conversation, or a user's direct conversation."""
        source = (
            channel_conversation_id(ctx.channel.id) if ctx.guild
            else user_conversation_id(ctx.author.id)
        )
        target = user_conversation_id(user.id) if user else None
        authority = await resolve_authority(self.bot, ctx)

        await ctx.send(self.bot.orchestrator.reset_chat(source, target, authority))

    @commands.hybrid_command(
        name='chatstatus',
        description="Show chat context and backend call statistics."
    )
    async def show_status(self, ctx: commands.Context) -> None:
        snapshot = get_metrics_collector().get_snapshot()
        await ctx.send(self.bot.translator(
            "status",
            len(self.bot.store),
            snapshot.backend_calls,
            snapshot.successful_turns,
            snapshot.failed_turns,
            f"{snapshot.avg_latency_ms:.0f}",
        ))


async def setup(bot: "OllamaChat") -> None:
    """Setup function for loading the cog."""
    await bot.add_cog(ChatCommands(bot))
