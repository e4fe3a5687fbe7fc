"""
Type-safe wrapper classes for Discord identifiers.

Guild members are tracked by their snowflake string (masters, owners, creators and
banned users are all sets of ID strings), while guilds are keyed by their integer
snowflake. These wrappers normalise the many shapes an identifier arrives in
(``int``, ``str``, a py-cord ``User``/``Member``/``Guild`` object) into one form.
"""

from __future__ import annotations

from typing import Any, Union

import discord


class UserID:
    """
    Type-safe wrapper for Discord user snowflake IDs.

    The value is stored as a string because every user registry in the framework
    (masters, owners, creators, banned users) is a set of ID strings.

    Example:
        >>> uid = UserID(123456789012345678)
        >>> str(uid)
        '123456789012345678'
        >>> UserID("123456789012345678") == 123456789012345678
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "UserID"]) -> None:
        """
        Initialize a UserID from a string, int, or another UserID.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, UserID):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create UserID from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create UserID from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int) -> "UserID":
        return cls(value)

    @classmethod
    def from_user(cls, member: Union[discord.Member, discord.User]) -> "UserID":
        """Create a UserID from a Discord Member or User object."""
        return cls(member.id)

    @classmethod
    def coerce(cls, value: Any) -> "UserID":
        """
        Build a UserID from any supported representation.

        Accepts a UserID, an int, a numeric string, or any object exposing an ``id``
        attribute (py-cord users and members, test doubles).
        """
        if isinstance(value, (UserID, int, str)):
            return cls(value)
        user_id = getattr(value, "id", None)
        if user_id is None:
            raise ValueError(f"Cannot create UserID from {type(value).__name__}: {value}")
        return cls(user_id)

    def to_int(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"UserID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UserID):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class GuildID:
    """
    Type-safe wrapper for Discord guild snowflake IDs.

    Guild-scoped state (permission overrides, cooldowns, aliases, the guild store)
    is keyed by the integer form, available through :meth:`to_int`.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "GuildID"]) -> None:
        if isinstance(value, GuildID):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create GuildID from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create GuildID from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int) -> "GuildID":
        return cls(value)

    @classmethod
    def from_guild(cls, guild: discord.Guild) -> "GuildID":
        """Create a GuildID from a Discord Guild object."""
        return cls(guild.id)

    @classmethod
    def coerce(cls, value: Any) -> "GuildID":
        """Build a GuildID from a GuildID, int, numeric string or anything with an ``id``."""
        if isinstance(value, (GuildID, int, str)):
            return cls(value)
        guild_id = getattr(value, "id", None)
        if guild_id is None:
            raise ValueError(f"Cannot create GuildID from {type(value).__name__}: {value}")
        return cls(guild_id)

    def to_int(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"GuildID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GuildID):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)
