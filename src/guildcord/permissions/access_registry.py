"""
Process-wide access lists: banned users, creators and the application owner.

The registry is owned by the bot runtime and read by the permission resolver on
every dispatch, so all reads and writes go through a single lock.
"""

import threading
from typing import Iterable, Set

from guildcord.datatypes.discord_datatypes import UserID
from guildcord.util.logger import get_logger

logger = get_logger("access_registry")


class AccessRegistry:
    """Thread-safe holder of the banned users, creators and application owner."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._banned: Set[str] = set()
        self._creators: Set[str] = set()
        self._app_owner: str | None = None

    # --------------------------
    # Banned users
    # --------------------------
    def ban(self, user) -> bool:
        """Ban a user from every command. Returns False if already banned."""
        key = str(UserID.coerce(user))
        with self._lock:
            if key in self._banned:
                return False
            self._banned.add(key)
        logger.info("[ACCESS REGISTRY] Banned user %s", key)
        return True

    def unban(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            if key not in self._banned:
                return False
            self._banned.discard(key)
        logger.info("[ACCESS REGISTRY] Unbanned user %s", key)
        return True

    def is_banned(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            return key in self._banned

    # --------------------------
    # Creators
    # --------------------------
    def add_creator(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            if key in self._creators:
                return False
            self._creators.add(key)
        return True

    def set_creators(self, users: Iterable) -> None:
        """Replace the creator set with ``users``."""
        keys = {str(UserID.coerce(user)) for user in users}
        with self._lock:
            self._creators = keys
        logger.info("[ACCESS REGISTRY] Loaded %d creator(s)", len(keys))

    def is_creator(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            return key in self._creators

    @property
    def creators(self) -> Set[str]:
        """Snapshot of the creator IDs."""
        with self._lock:
            return set(self._creators)

    @property
    def creator_count(self) -> int:
        with self._lock:
            return len(self._creators)

    # --------------------------
    # Application owner
    # --------------------------
    def set_app_owner(self, user) -> None:
        key = str(UserID.coerce(user)) if user is not None else None
        with self._lock:
            self._app_owner = key
        logger.info("[ACCESS REGISTRY] Application owner set to %s", key)

    @property
    def app_owner(self) -> str | None:
        with self._lock:
            return self._app_owner

    def is_app_owner(self, user) -> bool:
        key = str(UserID.coerce(user))
        with self._lock:
            return self._app_owner is not None and self._app_owner == key
