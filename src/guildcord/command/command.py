"""
Base class for prefix commands.

A :class:`Command` is built once at startup and shared by every guild. Its
per-guild state (permission overrides, the cooldown flag and the alias) lives in
guild-keyed maps guarded by a per-command lock, since concurrent message handlers
may read and write them for the same guild at the same time.
"""

from __future__ import annotations

import abc
import threading
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

from guildcord.datatypes.discord_datatypes import GuildID
from guildcord.datatypes.permission_level import PermissionLevel

if TYPE_CHECKING:
    import discord

    from guildcord.command.command_event import CommandEvent
    from guildcord.guild.guild_context import GuildContext


class OverrideResult(IntEnum):
    """Outcome of :meth:`Command.override_permission`."""

    CANT_OVERRIDE = -1
    DEFAULT_PERMISSION = 1
    NEW_PERMISSION = 2


def guild_key(guild: Any) -> int:
    """Normalise a GuildContext, py-cord guild, GuildID, int or numeric string to an int key."""
    return GuildID.coerce(guild).to_int()


def alias_key(guild: Any) -> str:
    """Aliases are keyed by the guild's string ID."""
    if isinstance(guild, str):
        return guild
    return str(GuildID.coerce(guild))


class Command(abc.ABC):
    """
    A named, permission-guarded unit of behaviour.

    Args:
        valid_expressions: Trigger words. Matching is exact and case-sensitive.
        default_permission: Level required when a guild has no override.
        can_override_permission: Whether guilds may change the required level.
        cooldown_ms: Per-guild cooldown applied after each successful dispatch.
            ``0`` disables the cooldown.

    Raises:
        ValueError: If ``valid_expressions`` is empty.
    """

    def __init__(
        self,
        valid_expressions: Iterable[str],
        default_permission: PermissionLevel,
        can_override_permission: bool = True,
        cooldown_ms: int = 0,
    ) -> None:
        self.valid_expressions: List[str] = list(valid_expressions)
        if not self.valid_expressions:
            raise ValueError("A command needs at least one valid expression")
        if cooldown_ms < 0:
            raise ValueError("cooldown_ms must not be negative")

        self.default_permission = PermissionLevel(default_permission)
        self.can_override_permission = can_override_permission
        self.cooldown_ms = cooldown_ms

        self.overrides: Dict[int, PermissionLevel] = {}
        self.cooldowns: Dict[int, bool] = {}
        self.aliases: Dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.valid_expressions[0]

    def is_valid_expression(self, expression: str) -> bool:
        return expression in self.valid_expressions

    # --------------------------
    # Permissions
    # --------------------------
    def is_valid_permission(self, level: PermissionLevel, guild: "GuildContext | Any | None") -> bool:
        """Return True if ``level`` meets the guild's required level (the default when ``guild`` is None)."""
        if guild is None:
            return level >= self.default_permission
        return level >= self.get_permission_override(guild)

    def get_permission_override(self, guild: "GuildContext | Any") -> PermissionLevel:
        """Return the level required in ``guild``: its override, or the default."""
        with self._lock:
            return self.overrides.get(guild_key(guild), self.default_permission)

    def override_permission(self, level: PermissionLevel, guild: "GuildContext | Any") -> OverrideResult:
        """
        Change the level required in ``guild``.

        Setting the default level removes the override. Commands built with
        ``can_override_permission=False`` are left untouched.
        """
        if not self.can_override_permission:
            return OverrideResult.CANT_OVERRIDE

        key = guild_key(guild)
        level = PermissionLevel(level)
        with self._lock:
            if level == self.default_permission:
                self.overrides.pop(key, None)
                return OverrideResult.DEFAULT_PERMISSION
            self.overrides[key] = level
            return OverrideResult.NEW_PERMISSION

    # --------------------------
    # Cooldown
    # --------------------------
    def set_on_cooldown(self, active: bool, guild: "GuildContext | Any") -> None:
        key = guild_key(guild)
        with self._lock:
            if active:
                self.cooldowns[key] = True
            else:
                self.cooldowns.pop(key, None)

    def is_on_cooldown(self, guild: "GuildContext | Any") -> bool:
        key = guild_key(guild)
        with self._lock:
            return key in self.cooldowns

    # --------------------------
    # Aliases
    # --------------------------
    def add_alias(self, guild_id: Any, alias: str) -> None:
        """Register a guild-local trigger word. Aliases are stored lower-cased."""
        with self._lock:
            self.aliases[alias_key(guild_id)] = alias.lower()

    def get_alias(self, guild_id: Any) -> str | None:
        with self._lock:
            return self.aliases.get(alias_key(guild_id))

    def remove_alias(self, guild_id: Any) -> str | None:
        with self._lock:
            return self.aliases.pop(alias_key(guild_id), None)

    # --------------------------
    # Behaviour
    # --------------------------
    @abc.abstractmethod
    async def execute(self, event: "CommandEvent") -> None:
        """Run the command. Only called once permission and cooldown checks passed."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_help(self, guild: "GuildContext | None") -> "discord.Embed":
        """Return the help payload shown for this command in ``guild``."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, default_permission={self.default_permission.name})"
