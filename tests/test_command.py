"""Tests for the command base class and cooldown timer."""

import asyncio

import pytest

from fakes import RecordingCommand
from guildcord.command.command import OverrideResult
from guildcord.command.command_cooldown import CommandCooldown
from guildcord.datatypes.permission_level import PermissionLevel
from guildcord.guild.guild_context import GuildContext
from guildcord.scheduler.task_scheduler import TaskScheduler


@pytest.fixture
def guild() -> GuildContext:
    return GuildContext(1, "cmd-")


def test_requires_expressions() -> None:
    with pytest.raises(ValueError):
        RecordingCommand(expressions=())


def test_name_and_expressions() -> None:
    command = RecordingCommand(expressions=("help", "h"))
    assert command.name == "help"
    assert command.is_valid_expression("h")
    assert not command.is_valid_expression("HELP")


def test_override_round_trip(guild) -> None:
    command = RecordingCommand(permission=PermissionLevel.USER)

    assert command.override_permission(PermissionLevel.MASTER, guild) is OverrideResult.NEW_PERMISSION
    assert command.get_permission_override(guild) is PermissionLevel.MASTER
    assert not command.is_valid_permission(PermissionLevel.USER, guild)
    assert command.is_valid_permission(PermissionLevel.MASTER, guild)

    assert command.override_permission(PermissionLevel.USER, guild) is OverrideResult.DEFAULT_PERMISSION
    assert command.get_permission_override(guild) is PermissionLevel.USER
    assert guild.id not in command.overrides


def test_override_is_per_guild(guild) -> None:
    command = RecordingCommand()
    other = GuildContext(2, "cmd-")
    command.override_permission(PermissionLevel.OWNER, guild)
    assert command.get_permission_override(other) is PermissionLevel.USER


def test_override_is_idempotent(guild) -> None:
    command = RecordingCommand(permission=PermissionLevel.USER)

    first = command.override_permission(PermissionLevel.MASTER, guild)
    second = command.override_permission(PermissionLevel.MASTER, guild)

    assert first is second is OverrideResult.NEW_PERMISSION
    assert command.overrides == {guild.id: PermissionLevel.MASTER}


def test_default_override_is_idempotent(guild) -> None:
    command = RecordingCommand(permission=PermissionLevel.USER)
    command.override_permission(PermissionLevel.OWNER, guild)

    first = command.override_permission(PermissionLevel.USER, guild)
    second = command.override_permission(PermissionLevel.USER, guild)

    assert first is second is OverrideResult.DEFAULT_PERMISSION
    assert command.overrides == {}


def test_cant_override_leaves_state_untouched(guild) -> None:
    command = RecordingCommand(can_override_permission=False)
    assert command.override_permission(PermissionLevel.CREATOR, guild) is OverrideResult.CANT_OVERRIDE
    assert command.overrides == {}
    assert command.get_permission_override(guild) is PermissionLevel.USER


def test_permission_without_guild_uses_default(guild) -> None:
    command = RecordingCommand(permission=PermissionLevel.MASTER)
    command.override_permission(PermissionLevel.USER, guild)
    assert not command.is_valid_permission(PermissionLevel.USER, None)
    assert command.is_valid_permission(PermissionLevel.OWNER, None)


def test_cooldown_flag_round_trip(guild) -> None:
    command = RecordingCommand()
    command.set_on_cooldown(True, guild)
    assert command.is_on_cooldown(guild)
    assert command.is_on_cooldown(1)
    command.set_on_cooldown(False, guild)
    assert not command.is_on_cooldown(guild)


def test_aliases_are_lower_cased_and_per_guild(guild) -> None:
    command = RecordingCommand()
    command.add_alias("1", "INFO")
    assert command.get_alias("1") == "info"
    assert command.get_alias(guild) == "info"
    assert command.get_alias("2") is None
    assert command.remove_alias("1") == "info"
    assert command.get_alias("1") is None


def test_negative_cooldown_rejected() -> None:
    with pytest.raises(ValueError):
        RecordingCommand(cooldown_ms=-1)


@pytest.mark.asyncio
async def test_cooldown_timer_sets_and_clears(guild) -> None:
    scheduler = TaskScheduler()
    command = RecordingCommand()

    CommandCooldown(command, 20, guild, scheduler).start_timer()
    assert command.is_on_cooldown(guild)

    await asyncio.sleep(0.1)
    assert not command.is_on_cooldown(guild)
    await scheduler.shutdown()
