"""
Command registries and dispatch.

:class:`GuildCommandHandler` serves guild messages. It resolves a command by its
trigger word or by a guild-local alias, checks the invoker's permission against the
guild's override and the guild's cooldown flag, starts the cooldown and runs the
command. :class:`PrivateCommandHandler` serves direct messages, resolving
permissions across all guilds and skipping aliases and cooldowns.

A dispatch miss (unknown command, insufficient permission, active cooldown) is not
an error: ``dispatch`` returns False. Exceptions raised by ``Command.execute``
propagate to the caller.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Protocol, runtime_checkable

from guildcord.command.command import Command
from guildcord.command.command_cooldown import CommandCooldown
from guildcord.command.command_event import CommandEvent
from guildcord.permissions.user_permissions import UserPermissions
from guildcord.scheduler.task_scheduler import TaskScheduler
from guildcord.util.logger import get_logger

logger = get_logger("command_handler")


@runtime_checkable
class AliasLoader(Protocol):
    """Restores the per-guild aliases of a command when it is registered."""

    def load(self, command: Command) -> None:
        ...


class _CommandRegistry:
    """Expression -> command map shared by both handlers."""

    def __init__(self, permissions: UserPermissions) -> None:
        self.permissions = permissions
        self.commands: Dict[str, Command] = {}
        # Distinct commands in the order they were first registered
        self._ordered: List[Command] = []

    def add_command(self, command: Command):
        """Register every expression of ``command``. A later registration of the same expression wins."""
        for expression in command.valid_expressions:
            self.commands[expression] = command
        if command not in self._ordered:
            self._ordered.append(command)
        return self

    def set_commands(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.add_command(command)

    def get_commands(self) -> List[Command]:
        """Distinct registered commands still reachable by at least one expression."""
        reachable = set(map(id, self.commands.values()))
        return [command for command in self._ordered if id(command) in reachable]

    def get_command(self, expression: str | None) -> Command | None:
        if expression is None:
            return None
        return self.commands.get(expression)


class GuildCommandHandler(_CommandRegistry):
    """
    Dispatcher for guild messages.

    Args:
        permissions: Resolver used to compute the invoker's level.
        scheduler: Scheduler used for cooldown expiry. Without one, commands with a
            cooldown run without being blocked.
    """

    def __init__(self, permissions: UserPermissions, scheduler: TaskScheduler | None = None) -> None:
        super().__init__(permissions)
        self.scheduler = scheduler
        self.alias_loader: AliasLoader | None = None

    def add_command(self, command: Command) -> "GuildCommandHandler":
        super().add_command(command)
        if self.alias_loader is not None:
            self.alias_loader.load(command)
        return self

    def set_alias_loader(self, loader: AliasLoader | None) -> None:
        self.alias_loader = loader

    def get_command_for_alias(self, guild_id: str, alias: str | None) -> Command | None:
        """Return the first command, in registration order, whose alias in ``guild_id`` is ``alias``."""
        if alias is None:
            return None
        for command in self.get_commands():
            if command.get_alias(guild_id) == alias:
                return command
        return None

    def resolve(self, event: CommandEvent) -> Command | None:
        command = self.get_command(event.command)
        if command is None and event.guild_context is not None:
            command = self.get_command_for_alias(event.guild_context.string_id, event.command)
        return command

    async def dispatch(self, event: CommandEvent) -> bool:
        """
        Run the command the event resolves to, if the invoker may use it right now.

        Returns:
            bool: True if the command was executed.
        """
        guild = event.guild_context
        if guild is None or event.message is None:
            return False

        command = self.resolve(event)
        if command is None:
            return False

        level = self.permissions.get_permission_level(event.author, guild)
        if not command.is_valid_permission(level, guild):
            logger.debug(
                "[COMMAND HANDLER] %s denied for %s in guild %s (level %s)",
                command.name, getattr(event.author, "id", None), guild.string_id, level.name,
            )
            return False
        if command.is_on_cooldown(guild):
            logger.debug("[COMMAND HANDLER] %s is on cooldown in guild %s", command.name, guild.string_id)
            return False

        if command.cooldown_ms > 0 and self.scheduler is not None:
            CommandCooldown(command, command.cooldown_ms, guild, self.scheduler).start_timer()

        await command.execute(event)
        return True


class PrivateCommandHandler(_CommandRegistry):
    """Dispatcher for direct messages. No aliases and no cooldowns."""

    def add_command(self, command: Command) -> "PrivateCommandHandler":
        super().add_command(command)
        return self

    async def dispatch(self, event: CommandEvent) -> bool:
        if event.message is None:
            return False

        command = self.get_command(event.command)
        if command is None:
            return False

        level = self.permissions.get_permission_level(event.author)
        if not command.is_valid_permission(level, None):
            return False

        await command.execute(event)
        return True
