"""
OllamaChat Discord Bot

Connects Discord messages to the turn orchestrator.
DM channels are direct conversations; guild text channels are group
conversations.
"""

import logging
from typing import List, Optional

import discord
from discord.ext import commands

from . import config
from .ai import OllamaClient
from .core import ConversationStore
from .core.orchestrator import TurnOrchestrator
from .core.types import InboundEvent, Reply
from .debug_server import get_server
from .locales import Translator

logger = logging.getLogger(__name__)


def user_conversation_id(user_id: int) -> str:
    """Key of a user's direct conversation."""
    return f"{config.bot.platform}:{user_id}"


def channel_conversation_id(channel_id: int) -> str:
    """Key of a guild channel's group conversation."""
    return f"{config.bot.platform}:{channel_id}"


def message_to_event(message: discord.Message) -> InboundEvent:
    """Convert a Discord message into a transport-independent event."""
    is_group = message.guild is not None
    conversation_id = (
        channel_conversation_id(message.channel.id) if is_group
        else user_conversation_id(message.author.id)
    )
    return InboundEvent(
        is_group=is_group,
        conversation_id=conversation_id,
        sender_id=str(message.author.id),
        sender_name=message.author.display_name,
        timestamp_ms=message.created_at.timestamp() * 1000,
        content=message.content,
        message_id=str(message.id),
        mentioned_ids=frozenset(str(user.id) for user in message.mentions),
    )


def split_reply(text: str, chunk_size: int) -> List[str]:
    """Split reply text into chunks Discord will accept."""
    if not text:
        return ["..."]
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


async def send_reply(message: discord.Message, reply: Reply) -> None:
    """Send a reply, quoting the triggering message when requested."""
    chunks = split_reply(reply.content, config.bot.max_reply_length)
    try:
        if reply.quote_id is not None:
            await message.reply(chunks[0])
        else:
            await message.channel.send(chunks[0])
        for chunk in chunks[1:]:
            await message.channel.send(chunk)
    except discord.HTTPException as e:
        logger.error(f"Failed to send reply in channel {message.channel.id}: {e}")


class OllamaChat(commands.Bot):
    """
    Main Discord bot class.

    The chat subsystem (orchestrator and resetchat/chatstatus commands) is
    only set up when ENABLE_CHAT is true.
    """

    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True
        allowed_mentions = discord.AllowedMentions.none()
        super().__init__(
            command_prefix=config.bot.command_prefix,
            intents=intents,
            allowed_mentions=allowed_mentions
        )

        self.ollama = OllamaClient()
        self.store = ConversationStore()
        self.translator = Translator(config.chat.locale)
        self.orchestrator: Optional[TurnOrchestrator] = None

        logger.debug(f"Config: endpoint={config.ollama.endpoint} chat={config.chat}")

    # =========================================================================
    # Lifecycle Events
    # =========================================================================

    async def setup_hook(self) -> None:
        """Called after login, before connecting to the gateway."""
        if config.chat.enabled:
            self.orchestrator = TurnOrchestrator(
                self.ollama,
                config.chat,
                bot_id=str(self.user.id),
                store=self.store,
                translator=self.translator,
            )
            await self._load_extensions()
        else:
            logger.info("Chat is disabled (ENABLE_CHAT=false); only listening for commands.")

        await get_server().start()

    async def on_ready(self) -> None:
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info("-" * 40)

    async def close(self) -> None:
        logger.info("Shutting down OllamaChat...")
        await self.ollama.close()
        await get_server().stop()
        await super().close()

    async def _load_extensions(self) -> None:
        """Load critical extensions; the bot is unusable without them."""
        critical_extensions = ["OllamaChat.cogs.chat"]

        for ext in critical_extensions:
            try:
                await self.load_extension(ext)
                logger.info(f"Loaded critical extension: {ext}")
            except commands.ExtensionError as e:
                logger.critical(f"Failed to load critical extension {ext}: {e}")
                raise RuntimeError(f"Critical extension {ext} failed to load: {e}") from e

    # =========================================================================
    # Message Handling
    # =========================================================================

    async def on_message(self, message: discord.Message) -> None:
        """Handle incoming messages."""
        if message.author.bot:
            return

        if message.content.startswith(self.command_prefix):
            await self.process_commands(message)
            return

        if self.orchestrator is None:
            return

        reply = await self.orchestrator.handle(message_to_event(message))
        if reply is not None:
            await send_reply(message, reply)
