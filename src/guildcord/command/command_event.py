"""
Parsed form of an inbound command message.

A message such as ``cmd-perm -command=help -level=master`` is split into the
command word (``perm``), the parameter mapping (``{"command": "help", "level":
"master"}``) and the free text that remains once the parameters are stripped.
Two parameter forms are recognised: bare ``-key=value`` where both sides are word
characters, and quoted ``-key="any text"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    import discord

    from guildcord.guild.guild_context import GuildContext


BARE_PARAMETER = re.compile(r'-(\w+)=(\w+)')
QUOTED_PARAMETER = re.compile(r'-(\w+)="([^"]+)"')
_WHITESPACE = re.compile(r"\s+")


def fix_case(text: str) -> str:
    """Lower-case the first space-separated token and trim the result."""
    parts = text.split(" ")
    parts[0] = parts[0].lower()
    return " ".join(parts).strip()


def find_parameters(text: str) -> Dict[str, str]:
    """Collect quoted parameters, then bare ones. A bare match wins on a duplicate key."""
    parameters: Dict[str, str] = {}
    for match in QUOTED_PARAMETER.finditer(text):
        parameters[match.group(1)] = match.group(2)
    for match in BARE_PARAMETER.finditer(text):
        parameters[match.group(1)] = match.group(2)
    return parameters


def strip_parameters(text: str) -> str:
    stripped = QUOTED_PARAMETER.sub("", text)
    stripped = BARE_PARAMETER.sub("", stripped)
    return _WHITESPACE.sub(" ", stripped).strip()


@dataclass(slots=True)
class CommandEvent:
    """
    One command invocation. Built per message and discarded once dispatch returns.

    Every derived field is ``None`` when the event was built without a message.

    Attributes:
        message: The py-cord message, if any.
        guild_context: Guild the message was sent in; ``None`` for private messages.
        command: First token, lower-cased, with the prefix removed.
        parameters: ``-key=value`` and ``-key="value"`` pairs found in the content.
        fixed_content: Content with only the first token lower-cased.
        final_content: ``command`` followed by the remaining tokens, with the parameters removed
            and whitespace collapsed.
    """

    message: "discord.Message | None" = None
    guild_context: "GuildContext | None" = None
    command: str | None = None
    parameters: Dict[str, str] | None = None
    fixed_content: str | None = None
    final_content: str | None = None

    @classmethod
    def parse(
        cls,
        message: "discord.Message | None",
        prefix: str,
        guild_context: "GuildContext | None" = None,
    ) -> "CommandEvent":
        """
        Parse ``message`` into an event. Never raises.

        The prefix is removed from the first token wherever it occurs in it, not
        only at the start, so ``"cmd-xcmd-"`` with prefix ``cmd-`` yields ``x``.
        """
        if message is None:
            return cls(message=None, guild_context=guild_context)

        content = getattr(message, "content", None) or ""
        first_token = content.lower().split(" ")[0]
        command = first_token.replace(prefix, "") if prefix else first_token
        fixed_content = fix_case(content)
        remainder = content.split(" ")[1:]

        return cls(
            message=message,
            guild_context=guild_context,
            command=command,
            parameters=find_parameters(fixed_content),
            fixed_content=fixed_content,
            final_content=strip_parameters(" ".join([command, *remainder])),
        )

    # --------------------------
    # Convenience accessors
    # --------------------------
    def get_parameter(self, key: str) -> str | None:
        if self.parameters is None:
            return None
        return self.parameters.get(key)

    @property
    def author(self):
        return getattr(self.message, "author", None)

    @property
    def channel(self):
        return getattr(self.message, "channel", None)

    @property
    def guild(self):
        if self.guild_context is not None and self.guild_context.guild is not None:
            return self.guild_context.guild
        return getattr(self.message, "guild", None)

    @property
    def attachments(self) -> List[Any]:
        return list(getattr(self.message, "attachments", None) or [])

    @property
    def mentions(self) -> List[Any]:
        return list(getattr(self.message, "mentions", None) or [])

    @property
    def is_private(self) -> bool:
        return self.guild_context is None
