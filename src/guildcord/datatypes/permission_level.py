"""
Permission tiers used to guard command execution.

Levels are totally ordered by their numeric rank, so ``level >= required`` is the
only comparison the dispatch core ever needs.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional


UNKNOWN_PERMISSION_LEVEL = "UNKNOWN_PERMISSION_LEVEL"


class PermissionLevel(IntEnum):
    """Ascending authority: NONE < USER < MASTER < OWNER < APP_OWNER < CREATOR."""

    NONE = 0
    USER = 1
    MASTER = 2
    OWNER = 3
    APP_OWNER = 4
    CREATOR = 5

    @property
    def display_name(self) -> str:
        return self.name

    @classmethod
    def from_name(cls, name: str) -> Optional["PermissionLevel"]:
        """Return the level for a case-insensitive name, or None if it is unknown."""
        if not name:
            return None
        return cls.__members__.get(name.strip().upper())

    def __str__(self) -> str:
        return self.name


def permission_string(rank: int) -> str:
    """Return the name of the level with the given rank, or UNKNOWN_PERMISSION_LEVEL."""
    try:
        return PermissionLevel(rank).name
    except ValueError:
        return UNKNOWN_PERMISSION_LEVEL
