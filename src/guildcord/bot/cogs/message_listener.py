"""Message listener Cog for Guildcord.

This cog turns incoming messages into command events and hands them to the
guild's command handler, or to the private handler for direct messages.
"""

import discord
from discord.ext import commands

from guildcord.bot.bot_runtime import BotRuntime
from guildcord.command.command_event import CommandEvent
from guildcord.util import discord_utils
from guildcord.util.logger import get_logger

logger = get_logger("message_listener_cog")


class MessageListenerCog(commands.Cog):
    """Cog responsible for dispatching prefix commands."""

    def __init__(self, discord_bot_instance, runtime: BotRuntime):
        """
        Initialize the message listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        runtime:
            Runtime shared with the other cogs.
        """
        self.bot = discord_bot_instance
        self.runtime = runtime
        logger.info("Message listener cog loaded")

    def build_event(self, message: discord.Message) -> CommandEvent | None:
        """
        Parse a message into a command event.

        Returns None for guild messages that do not start with the guild prefix or
        that come from a guild without a context.
        """
        content = message.content or ""

        if message.guild is None:
            return CommandEvent.parse(message, self.runtime.default_prefix)

        guild_context = self.runtime.get_guild_context(message.guild.id)
        if guild_context is None:
            logger.debug(f"No guild context for guild {message.guild.id}; ignoring message")
            return None
        if not content.lower().startswith(guild_context.prefix.lower()):
            return None
        return CommandEvent.parse(message, guild_context.prefix, guild_context)

    @commands.Cog.listener(name='on_message')
    async def on_message(self, message: discord.Message):
        """Dispatch a command message.

        Bot authors are ignored. Failures raised by the command are logged.
        """
        if discord_utils.is_ignored_author(message.author):
            return

        event = self.build_event(message)
        if event is None:
            return

        if event.guild_context is None:
            handler = self.runtime.private_handler
        else:
            handler = event.guild_context.command_handler or self.runtime.command_handler

        try:
            dispatched = await handler.dispatch(event)
        except Exception:
            logger.exception(f"Error while running command '{event.command}' from {message.author}")
            return

        if not dispatched:
            logger.debug(f"Command '{event.command}' from {message.author} was not dispatched")


def setup(discord_bot_instance):
    """
    Register the MessageListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to. Its ``runtime`` attribute
        must hold the shared :class:`BotRuntime`.
    """
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, discord_bot_instance.runtime))
