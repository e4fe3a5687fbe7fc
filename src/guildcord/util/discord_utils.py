"""
discord_utils.py
================

Low-level Discord helpers for Guildcord.

Stateless wrappers around py-cord calls used by commands and listeners: outbound
message delivery with uniform error handling, a simple embed builder, and author
checks. Nothing here keeps state.
"""

import datetime
from typing import Any, Union

import discord

from guildcord.util.logger import get_logger

logger = get_logger("discord_utils")

RATE_LIMIT_STATUS = 429
DEFAULT_EMBED_COLOR = discord.Color.blurple()


def is_ignored_author(author: Union[discord.User, discord.Member, None]) -> bool:
    """Return True when the author is missing or is a bot account."""
    return author is None or bool(getattr(author, "bot", False))


def build_message_embed(text: str, color: discord.Color | None = None, title: str | None = None) -> discord.Embed:
    """
    Build a plain embed carrying ``text`` as its description.

    Args:
        text (str): Embed body.
        color (discord.Color | None): Accent color. Defaults to blurple.
        title (str | None): Optional title.

    Returns:
        discord.Embed: The constructed embed.
    """
    embed = discord.Embed(
        description=text,
        color=color or DEFAULT_EMBED_COLOR,
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    if title:
        embed.title = title
    return embed


async def send_message(
    channel: discord.abc.Messageable,
    content: str | None = None,
    *,
    embed: discord.Embed | None = None,
) -> Any:
    """
    Send a message or embed to a channel.

    Missing permissions drop the message silently. A rate-limit response is
    re-raised so the caller can back off; any other HTTP failure is logged.

    Args:
        channel: Channel, thread or user to send to.
        content: Text content.
        embed: Optional embed.

    Returns:
        discord.Message | None: The sent message, or None if it was dropped.

    Raises:
        discord.HTTPException: If the request was rate limited (status 429).
    """
    kwargs = {}
    if content is not None:
        kwargs["content"] = content
    if embed is not None:
        kwargs["embed"] = embed
    if not kwargs:
        logger.debug("Refusing to send an empty message to %s", getattr(channel, "id", channel))
        return None

    try:
        return await channel.send(**kwargs)
    except discord.Forbidden:
        logger.debug(f"No permission to send to channel {getattr(channel, 'id', channel)}")
        return None
    except discord.HTTPException as exc:
        if getattr(exc, "status", None) == RATE_LIMIT_STATUS:
            raise
        logger.error(f"Failed to send message to channel {getattr(channel, 'id', channel)}: {exc}")
        return None
