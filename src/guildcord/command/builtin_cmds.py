"""
Built-in prefix commands.

``help`` lists the commands of the current scope, ``permission`` changes the level
a command requires in the guild, ``alias`` gives a command a guild-local trigger
word and ``master`` promotes or demotes guild masters.
"""

from __future__ import annotations

from typing import List

import discord

from guildcord.command.command import Command, OverrideResult
from guildcord.command.command_event import CommandEvent
from guildcord.datatypes.discord_datatypes import UserID
from guildcord.datatypes.permission_level import PermissionLevel, permission_string
from guildcord.guild.guild_context import GuildContext
from guildcord.util.discord_utils import build_message_embed, send_message
from guildcord.util.logger import get_logger

logger = get_logger("builtin_cmds")

ERROR_COLOR = discord.Color.red()
SUCCESS_COLOR = discord.Color.green()


class BuiltinCommand(Command):
    """Command with a static description and usage line used for its help embed."""

    description: str = ""
    usage: str = ""

    def get_help(self, guild: GuildContext | None) -> discord.Embed:
        prefix = guild.prefix if guild is not None else ""
        required = self.get_permission_override(guild) if guild is not None else self.default_permission

        embed = build_message_embed(self.description, title=f"{prefix}{self.name}")
        embed.add_field(name="Expressions", value=", ".join(self.valid_expressions), inline=False)
        embed.add_field(name="Permission", value=permission_string(required), inline=True)
        if self.usage:
            embed.add_field(name="Usage", value=f"`{prefix}{self.usage}`", inline=False)
        if guild is not None:
            alias = self.get_alias(guild.string_id)
            if alias:
                embed.add_field(name="Alias", value=alias, inline=True)
        return embed

    async def reply(self, event: CommandEvent, text: str, *, error: bool = False) -> None:
        await send_message(event.channel, embed=build_message_embed(text, ERROR_COLOR if error else SUCCESS_COLOR))

    def find_target(self, event: CommandEvent) -> Command | None:
        """Resolve the ``-command=`` parameter against the guild's handler."""
        name = event.get_parameter("command")
        guild = event.guild_context
        if not name or guild is None or guild.command_handler is None:
            return None
        return guild.command_handler.get_command(name.lower())


class HelpCommand(BuiltinCommand):
    """Lists the available commands, or shows the help of one command."""

    description = "Shows the available commands or the help of one command."
    usage = "help [command]"

    def __init__(self, handler) -> None:
        super().__init__(["help", "h"], PermissionLevel.USER, cooldown_ms=3000)
        self.handler = handler

    def commands_for(self, event: CommandEvent) -> List[Command]:
        guild = event.guild_context
        if guild is not None and guild.command_handler is not None:
            return guild.command_handler.get_commands()
        return self.handler.get_commands()

    async def execute(self, event: CommandEvent) -> None:
        guild = event.guild_context
        words = (event.final_content or "").split(" ")
        if len(words) > 1:
            name = words[1].lower()
            for command in self.commands_for(event):
                if command.is_valid_expression(name) or (guild is not None and command.get_alias(guild.string_id) == name):
                    await send_message(event.channel, embed=command.get_help(guild))
                    return
            await self.reply(event, f"Unknown command `{name}`.", error=True)
            return

        prefix = guild.prefix if guild is not None else ""
        lines = []
        for command in self.commands_for(event):
            required = command.get_permission_override(guild) if guild is not None else command.default_permission
            lines.append(f"`{prefix}{command.name}` ({permission_string(required)})")
        await send_message(event.channel, embed=build_message_embed("\n".join(lines), title="Commands"))


class PermissionCommand(BuiltinCommand):
    """Overrides the permission level a command requires in this guild."""

    description = "Changes the permission level a command requires in this guild."
    usage = "permission -command=<command> -level=<level>"

    def __init__(self) -> None:
        super().__init__(["permission", "perm"], PermissionLevel.OWNER, can_override_permission=False)

    async def execute(self, event: CommandEvent) -> None:
        guild = event.guild_context
        if guild is None:
            await self.reply(event, "This command can only be used in a guild.", error=True)
            return

        target = self.find_target(event)
        if target is None:
            await self.reply(event, "Specify a known command with `-command=`.", error=True)
            return

        level = PermissionLevel.from_name(event.get_parameter("level") or "")
        if level is None:
            names = ", ".join(member.name.lower() for member in PermissionLevel)
            await self.reply(event, f"Specify a level with `-level=`. Valid levels: {names}.", error=True)
            return

        result = target.override_permission(level, guild)
        if result is OverrideResult.CANT_OVERRIDE:
            await self.reply(event, f"The permission of `{target.name}` cannot be changed.", error=True)
        elif result is OverrideResult.DEFAULT_PERMISSION:
            await self.reply(event, f"`{target.name}` is back to its default level {level.display_name}.")
        else:
            await self.reply(event, f"`{target.name}` now requires {level.display_name}.")
        logger.info(
            "[BUILTIN COMMANDS] %s set %s to %s in guild %s (%s)",
            getattr(event.author, "id", None), target.name, level.name, guild.string_id, result.name,
        )


class AliasCommand(BuiltinCommand):
    """Gives a command a guild-local trigger word."""

    description = "Adds a guild-local alias for a command."
    usage = "alias -command=<command> -alias=<alias>"

    def __init__(self) -> None:
        super().__init__(["alias"], PermissionLevel.OWNER)

    async def execute(self, event: CommandEvent) -> None:
        guild = event.guild_context
        if guild is None:
            await self.reply(event, "This command can only be used in a guild.", error=True)
            return

        target = self.find_target(event)
        if target is None:
            await self.reply(event, "Specify a known command with `-command=`.", error=True)
            return

        alias = (event.get_parameter("alias") or "").lower()
        if not alias:
            target.remove_alias(guild.string_id)
            await self.reply(event, f"Removed the alias of `{target.name}`.")
            return

        existing = guild.command_handler.get_command(alias) or guild.command_handler.get_command_for_alias(guild.string_id, alias)
        if existing is not None and existing is not target:
            await self.reply(event, f"`{alias}` already triggers `{existing.name}`.", error=True)
            return

        target.add_alias(guild.string_id, alias)
        await self.reply(event, f"`{alias}` now triggers `{target.name}`.")


class MasterCommand(BuiltinCommand):
    """Adds or removes the mentioned users as masters of this guild."""

    description = "Adds or removes the mentioned users as guild masters."
    usage = "master -action=add|remove @user"

    def __init__(self) -> None:
        super().__init__(["master"], PermissionLevel.OWNER)

    async def execute(self, event: CommandEvent) -> None:
        guild = event.guild_context
        if guild is None:
            await self.reply(event, "This command can only be used in a guild.", error=True)
            return

        action = (event.get_parameter("action") or "").lower()
        if action not in ("add", "remove"):
            await self.reply(event, "Specify `-action=add` or `-action=remove`.", error=True)
            return

        users = event.mentions
        if not users:
            await self.reply(event, "Mention at least one user.", error=True)
            return

        changed = []
        for user in users:
            user_id = UserID.from_user(user)
            done = guild.add_master(user_id) if action == "add" else guild.remove_master(user_id)
            if done:
                changed.append(getattr(user, "mention", f"<@{user_id}>"))

        if not changed:
            await self.reply(event, "Nothing changed.", error=True)
        elif action == "add":
            await self.reply(event, f"Added {', '.join(changed)} as master.")
        else:
            await self.reply(event, f"Removed {', '.join(changed)} from the masters.")


def default_commands(handler) -> List[Command]:
    """The built-in commands, with ``help`` listing ``handler``."""
    return [HelpCommand(handler), PermissionCommand(), AliasCommand(), MasterCommand()]
