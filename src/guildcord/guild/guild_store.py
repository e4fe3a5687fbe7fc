"""
Registry of :class:`GuildContext` objects keyed by guild ID.

The store is shared between the event listeners (which add and remove guilds) and
the permission resolver (which scans every guild for owner/master membership), so
the map itself is guarded by a lock. Per-guild state is guarded by each context.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

from guildcord.datatypes.discord_datatypes import GuildID
from guildcord.guild.guild_context import GuildContext
from guildcord.util.logger import get_logger

logger = get_logger("guild_store")


@runtime_checkable
class PrefixLoader(Protocol):
    """Supplies the prefix of a guild when its context is created."""

    def load(self, guild_context: GuildContext) -> str:
        ...


class GuildStore:
    """Thread-safe guild ID -> :class:`GuildContext` map."""

    def __init__(self, default_prefix: str, prefix_loader: PrefixLoader | None = None) -> None:
        self.default_prefix = default_prefix
        self.prefix_loader = prefix_loader
        self._guilds: Dict[int, GuildContext] = {}
        self._lock = threading.Lock()

    def set_prefix_loader(self, loader: PrefixLoader | None) -> None:
        self.prefix_loader = loader

    def _resolve_prefix(self, guild_context: GuildContext) -> str:
        if self.prefix_loader is None:
            return self.default_prefix
        try:
            prefix = self.prefix_loader.load(guild_context)
        except Exception as exc:
            logger.error("[GUILD STORE] Prefix loader failed for guild %s: %s", guild_context.string_id, exc)
            return self.default_prefix
        return prefix or self.default_prefix

    @staticmethod
    def _key(guild_id: Any) -> int | None:
        try:
            return GuildID.coerce(guild_id).to_int()
        except ValueError:
            return None

    # --------------------------
    # Mutation
    # --------------------------
    def add(self, guild_context: GuildContext) -> bool:
        """
        Register a context and assign its prefix.

        The prefix comes from the prefix loader when one is set, otherwise the default
        prefix. Returns False, leaving the existing entry untouched, if the guild is
        already registered.
        """
        with self._lock:
            if guild_context.id in self._guilds:
                return False
        guild_context.prefix = self._resolve_prefix(guild_context)
        with self._lock:
            if guild_context.id in self._guilds:
                return False
            self._guilds[guild_context.id] = guild_context
        logger.debug("[GUILD STORE] Registered guild %s with prefix %r", guild_context.string_id, guild_context.prefix)
        return True

    def get_or_create(self, guild: Any, factory: Callable[[Any], GuildContext]) -> GuildContext:
        """Return the context for ``guild``, registering ``factory(guild)`` if absent."""
        existing = self.get(guild)
        if existing is not None:
            return existing
        context = factory(guild)
        if not self.add(context):
            return self.get(context.id) or context
        return context

    def upsert(self, guild_context: GuildContext) -> None:
        """Insert or replace a context without touching its prefix."""
        with self._lock:
            self._guilds[guild_context.id] = guild_context

    def remove(self, guild_id: Any) -> GuildContext | None:
        """Remove and return the context for ``guild_id``, or None if it was unknown."""
        key = self._key(guild_id)
        if key is None:
            return None
        with self._lock:
            removed = self._guilds.pop(key, None)
        if removed is not None:
            logger.debug("[GUILD STORE] Removed guild %s", key)
        return removed

    # --------------------------
    # Queries
    # --------------------------
    def get(self, guild_id: Any) -> GuildContext | None:
        """Look up a context by int, numeric string, GuildID or any object with ``id``."""
        key = self._key(guild_id)
        if key is None:
            return None
        with self._lock:
            return self._guilds.get(key)

    def __contains__(self, guild_id: Any) -> bool:
        return self.get(guild_id) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._guilds)

    def values(self) -> List[GuildContext]:
        """Snapshot list of the registered contexts."""
        with self._lock:
            return list(self._guilds.values())

    def is_owner_anywhere(self, user: Any) -> bool:
        return any(context.is_owner(user) for context in self.values())

    def is_master_anywhere(self, user: Any) -> bool:
        return any(context.is_master(user) for context in self.values())

    @property
    def total_master_count(self) -> int:
        return sum(context.master_count for context in self.values())

    @property
    def total_owner_count(self) -> int:
        return sum(context.owner_count for context in self.values())
