"""Event listener Cog for Guildcord.

This cog handles bot lifecycle events: the ready sequence and guild join/leave.
Message events are handled by the MessageListenerCog.
"""

import discord
from discord.ext import commands

from guildcord.bot.bot_runtime import BotRuntime
from guildcord.scheduler.alive_check import AliveMonitor
from guildcord.scheduler.presence_rotation import PresenceRotator
from guildcord.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and guild membership handlers."""

    def __init__(self, discord_bot_instance, runtime: BotRuntime):
        """Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        runtime:
            Runtime shared with the other cogs.
        """
        self.bot = discord_bot_instance
        self.runtime = runtime
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """Handle bot startup.

        This method:
        1. Creates a guild context for every connected guild
        2. Runs the runtime ready sequence (creators, app owner)
        3. Starts the presence rotation and the alive check
        """
        if self.bot.user:
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        if self.runtime.ready:
            logger.info("Reconnected; runtime already prepared.")
            return

        self.runtime.attach_client(self.bot)
        self.runtime.create_guild_contexts()
        await self.runtime.handle_ready()

        logger.info("--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--")

        config = self.runtime.config
        if config.presence_entries:
            logger.info("Starting presence rotation...")
            self.runtime.set_presence_rotator(PresenceRotator.from_config(self.bot, config))
        else:
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(
                    type=discord.ActivityType.listening,
                    name=f"{self.runtime.default_prefix}help",
                ),
            )

        logger.info("Starting alive check...")
        self.runtime.set_alive_monitor(
            AliveMonitor(
                self.bot,
                interval_seconds=config.alive_check_interval,
                should_log=config.alive_check_logging,
            )
        )

    @commands.Cog.listener(name='on_guild_join')
    async def on_guild_join(self, guild: discord.Guild):
        """Create a guild context when the bot joins a guild."""
        if self.runtime.add_guild(guild):
            logger.info(f"Joined guild {guild.name} ({guild.id})")

    @commands.Cog.listener(name='on_guild_remove')
    async def on_guild_remove(self, guild: discord.Guild):
        """Drop the guild context when the bot leaves or is removed from a guild."""
        if self.runtime.remove_guild(guild.id):
            logger.info(f"Left guild {guild.name} ({guild.id})")


def setup(discord_bot_instance):
    """Register the EventsListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to. Its ``runtime`` attribute
        must hold the shared :class:`BotRuntime`.
    """
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, discord_bot_instance.runtime))
