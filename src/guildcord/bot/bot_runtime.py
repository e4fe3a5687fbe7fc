"""
Runtime state shared by the cogs.

:class:`BotRuntime` is the root collaborator of the framework. It owns the guild
store, the access registry and the permission resolver, the default guild and
private command handlers, the cooldown scheduler, and the optional presence
rotator and alive monitor. The entrypoint builds one runtime and attaches it to
the py-cord bot as ``bot.runtime`` so every cog reaches the same state.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, List

import discord

from guildcord.bot.exceptions import ClientNotBuiltError
from guildcord.command.command import Command
from guildcord.command.command_handler import GuildCommandHandler, PrivateCommandHandler
from guildcord.configuration.app_configuration import AppConfig
from guildcord.guild.guild_context import GuildContext
from guildcord.guild.guild_store import GuildStore, PrefixLoader
from guildcord.permissions.access_registry import AccessRegistry
from guildcord.permissions.user_permissions import UserPermissions
from guildcord.scheduler.alive_check import AliveMonitor
from guildcord.scheduler.presence_rotation import PresenceRotator
from guildcord.scheduler.task_scheduler import TaskScheduler
from guildcord.util.logger import get_logger

logger = get_logger("bot_runtime")


class BotRuntime:
    """
    Guild registry, access lists and dispatch state for one bot client.

    Args:
        config: Loaded application configuration.
        client: The py-cord client. Operations that talk to Discord raise
            :class:`ClientNotBuiltError` while it is missing.
        scheduler: Scheduler for cooldown expiry; a new one is created when omitted.
    """

    def __init__(
        self,
        config: AppConfig,
        client: discord.Client | None = None,
        scheduler: TaskScheduler | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.scheduler = scheduler or TaskScheduler()

        self.guild_store = GuildStore(config.default_prefix)
        self.access_registry = AccessRegistry()
        self.permissions = UserPermissions(self.access_registry, self.guild_store)

        self.command_handler = GuildCommandHandler(self.permissions, self.scheduler)
        self.private_handler = PrivateCommandHandler(self.permissions)

        self.presence_rotator: PresenceRotator | None = None
        self.alive_monitor: AliveMonitor | None = None
        self.ready = False

    @property
    def default_prefix(self) -> str:
        return self.config.default_prefix

    # --------------------------
    # Client
    # --------------------------
    def attach_client(self, client: discord.Client) -> None:
        self.client = client

    def is_client_built(self) -> bool:
        return self.client is not None

    def check_client(self) -> discord.Client:
        """Return the attached client or raise :class:`ClientNotBuiltError`."""
        if self.client is None:
            raise ClientNotBuiltError()
        return self.client

    # --------------------------
    # Commands
    # --------------------------
    def add_command(self, command: Command, *, private: bool = False) -> None:
        """Register ``command`` on the default guild handler, and on the private one if asked."""
        self.command_handler.add_command(command)
        if private:
            self.private_handler.add_command(command)

    # --------------------------
    # Guilds
    # --------------------------
    def set_prefix_loader(self, loader: PrefixLoader | None) -> None:
        self.guild_store.set_prefix_loader(loader)

    def add_guild(self, guild: Any) -> bool:
        """
        Register a context for ``guild`` using the default command handler.

        Returns False if the guild is already registered.
        """
        context = GuildContext(
            guild.id,
            self.default_prefix,
            guild=guild,
            command_handler=self.command_handler,
        )
        added = self.guild_store.add(context)
        if added:
            owner_id = getattr(guild, "owner_id", None)
            if owner_id is not None:
                context.add_owner(owner_id)
        return added

    def remove_guild(self, guild_id: Any) -> bool:
        return self.guild_store.remove(guild_id) is not None

    def get_guild_context(self, guild_id: Any) -> GuildContext | None:
        return self.guild_store.get(guild_id)

    def create_guild_contexts(self) -> List[GuildContext]:
        """Create a context for every guild the client is connected to."""
        client = self.check_client()
        for guild in client.guilds:
            self.add_guild(guild)
        contexts = self.guild_store.values()
        logger.info("[BOT RUNTIME] Created %d guild context(s).", len(contexts))
        return contexts

    # --------------------------
    # Access lists
    # --------------------------
    def load_creators(self) -> None:
        """Load the creator IDs from the space-delimited ``creators`` setting."""
        creators = []
        for raw in self.config.creators:
            try:
                creators.append(int(raw))
            except ValueError:
                logger.warning("[BOT RUNTIME] Ignoring invalid creator ID %r", raw)
        self.access_registry.set_creators(creators)

    def set_app_owner(self, user_id: Any) -> None:
        self.access_registry.set_app_owner(user_id)

    async def fetch_app_owner(self) -> None:
        """Look up the application owner through the client and register it."""
        client = self.check_client()
        info = await client.application_info()
        owner = getattr(info, "owner", None)
        if owner is None:
            logger.warning("[BOT RUNTIME] Application info has no owner.")
            return
        self.set_app_owner(owner.id)

    async def handle_ready(self, prepare: Callable[[], Any] | None = None) -> None:
        """
        Run the ready sequence: load creators, run ``prepare``, look up the
        application owner, then mark the runtime ready.

        ``prepare`` may be sync or async.
        """
        self.load_creators()
        if prepare is not None:
            result = prepare()
            if inspect.isawaitable(result):
                await result
        await self.fetch_app_owner()
        self.ready = True
        logger.info("[BOT RUNTIME] Runtime ready.")

    # --------------------------
    # Background tasks
    # --------------------------
    def set_presence_rotator(self, rotator: PresenceRotator) -> None:
        """Stop the current rotator, if any, and start ``rotator``."""
        if self.presence_rotator is not None:
            self.presence_rotator.stop()
        self.presence_rotator = rotator
        rotator.start()

    def set_alive_monitor(self, monitor: AliveMonitor) -> None:
        if self.alive_monitor is not None:
            self.alive_monitor.stop()
        self.alive_monitor = monitor
        monitor.start()

    async def shutdown(self) -> None:
        """Stop background tasks and drop pending cooldown jobs."""
        if self.presence_rotator is not None:
            await self.presence_rotator.shutdown()
        if self.alive_monitor is not None:
            await self.alive_monitor.shutdown()
        await self.scheduler.shutdown()
        self.ready = False
        logger.info("[BOT RUNTIME] Runtime shut down.")

    # --------------------------
    # Counts
    # --------------------------
    @property
    def guild_count(self) -> int:
        """Number of guilds the client is connected to."""
        return len(self.check_client().guilds)

    @property
    def total_master_count(self) -> int:
        return self.guild_store.total_master_count

    @property
    def total_owner_count(self) -> int:
        return self.guild_store.total_owner_count

    @property
    def total_creator_count(self) -> int:
        return self.access_registry.creator_count
