"""
Permission resolution for command invocations.

The resolver maps a user (and optionally the guild the command was issued in) to a
:class:`PermissionLevel` by walking a fixed precedence chain. The first matching
rule wins:

1. banned users resolve to ``NONE``
2. creators resolve to ``CREATOR``
3. the application owner resolves to ``APP_OWNER``
4. owners of the guild (or, without a guild, of any known guild) resolve to ``OWNER``
5. masters, with the same guild rule, resolve to ``MASTER``
6. everyone else resolves to ``USER``
"""

from __future__ import annotations

from typing import Any

from guildcord.datatypes.discord_datatypes import UserID
from guildcord.datatypes.permission_level import PermissionLevel
from guildcord.guild.guild_context import GuildContext
from guildcord.guild.guild_store import GuildStore
from guildcord.permissions.access_registry import AccessRegistry
from guildcord.util.logger import get_logger

logger = get_logger("user_permissions")


class UserPermissions:
    """Stateless resolver over the access registry and the guild store."""

    def __init__(self, registry: AccessRegistry, guild_store: GuildStore) -> None:
        self.registry = registry
        self.guild_store = guild_store

    def get_permission_level(self, user: Any, guild: GuildContext | None = None) -> PermissionLevel:
        """
        Resolve the permission level of ``user``.

        Args:
            user: A UserID, int, numeric string, or any object with an ``id``.
            guild: The guild context the command was issued in. ``None`` for private
                messages, in which case owner and master membership of any guild counts.

        Returns:
            PermissionLevel: The resolved level. Unidentifiable users resolve to ``NONE``.
        """
        try:
            user_id = UserID.coerce(user)
        except ValueError:
            logger.warning("[USER PERMISSIONS] Cannot resolve permissions for unidentifiable user %r", user)
            return PermissionLevel.NONE

        if self.registry.is_banned(user_id):
            return PermissionLevel.NONE
        if self.registry.is_creator(user_id):
            return PermissionLevel.CREATOR
        if self.registry.is_app_owner(user_id):
            return PermissionLevel.APP_OWNER

        if guild is not None:
            if guild.is_owner(user_id):
                return PermissionLevel.OWNER
            if guild.is_master(user_id):
                return PermissionLevel.MASTER
            return PermissionLevel.USER

        if self.guild_store.is_owner_anywhere(user_id):
            return PermissionLevel.OWNER
        if self.guild_store.is_master_anywhere(user_id):
            return PermissionLevel.MASTER
        return PermissionLevel.USER
