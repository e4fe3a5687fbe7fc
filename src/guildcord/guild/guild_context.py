"""
Per-guild state: privileged members, command prefix and command handler.

One :class:`GuildContext` exists for every guild the client is connected to. It is
created by the :class:`~guildcord.guild.guild_store.GuildStore` when the guild becomes
available and dropped when the client leaves the guild.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Set

from guildcord.datatypes.discord_datatypes import GuildID, UserID
from guildcord.util.logger import get_logger

if TYPE_CHECKING:
    from guildcord.command.command_handler import GuildCommandHandler

logger = get_logger("guild_context")


class GuildContext:
    """
    Mutable state attached to one guild.

    Masters and owners are disjoint sets of user-ID strings: promoting a master to
    owner removes them from the masters, and a current owner cannot be added as a
    master. Both sets are guarded by a per-guild lock.

    Attributes:
        id (int): Guild snowflake.
        string_id (str): Guild snowflake as a string, used for alias lookups.
        guild (discord.Guild | None): Underlying py-cord guild, if known.
        prefix (str): Command prefix used in this guild.
        command_handler (GuildCommandHandler | None): Handler receiving this guild's events.
    """

    def __init__(
        self,
        guild_id: Any,
        prefix: str,
        *,
        guild: Any = None,
        command_handler: "GuildCommandHandler | None" = None,
    ) -> None:
        self._guild_id = GuildID.coerce(guild_id)
        self.guild = guild
        self.prefix = prefix
        self.command_handler = command_handler
        self._masters: Set[str] = set()
        self._owners: Set[str] = set()
        self._lock = threading.Lock()

    @classmethod
    def from_guild(cls, guild, prefix: str, command_handler: "GuildCommandHandler | None" = None) -> "GuildContext":
        return cls(guild.id, prefix, guild=guild, command_handler=command_handler)

    @property
    def id(self) -> int:
        return self._guild_id.to_int()

    @property
    def string_id(self) -> str:
        return str(self._guild_id)

    @property
    def guild_id(self) -> GuildID:
        return self._guild_id

    # --------------------------
    # Owners
    # --------------------------
    def add_owner(self, user) -> bool:
        """Add an owner, removing them from the masters. Returns False if already an owner."""
        key = str(UserID.coerce(user))
        with self._lock:
            if key in self._owners:
                return False
            self._masters.discard(key)
            self._owners.add(key)
        logger.debug("[GUILD CONTEXT] Added owner %s to guild %s", key, self.string_id)
        return True

    def remove_owner(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            if key not in self._owners:
                return False
            self._owners.discard(key)
        return True

    def is_owner(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            return key in self._owners

    # --------------------------
    # Masters
    # --------------------------
    def add_master(self, user) -> bool:
        """Add a master. Fails when the user is already a master or an owner."""
        key = str(UserID.coerce(user))
        with self._lock:
            if key in self._owners or key in self._masters:
                return False
            self._masters.add(key)
        logger.debug("[GUILD CONTEXT] Added master %s to guild %s", key, self.string_id)
        return True

    def remove_master(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            if key not in self._masters:
                return False
            self._masters.discard(key)
        return True

    def is_master(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            return key in self._masters

    @property
    def masters(self) -> Set[str]:
        """Snapshot of the master IDs."""
        with self._lock:
            return set(self._masters)

    @property
    def owners(self) -> Set[str]:
        """Snapshot of the owner IDs."""
        with self._lock:
            return set(self._owners)

    @property
    def master_count(self) -> int:
        with self._lock:
            return len(self._masters)

    @property
    def owner_count(self) -> int:
        with self._lock:
            return len(self._owners)

    def __repr__(self) -> str:
        return f"GuildContext(id={self.string_id!r}, prefix={self.prefix!r})"
