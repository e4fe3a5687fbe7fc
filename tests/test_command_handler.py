"""Tests for guild and private command dispatch."""

import asyncio

import pytest

from fakes import FailingCommand, RecordingCommand, make_message, make_user
from guildcord.command.command_event import CommandEvent
from guildcord.command.command_handler import GuildCommandHandler, PrivateCommandHandler
from guildcord.datatypes.permission_level import PermissionLevel
from guildcord.guild.guild_context import GuildContext
from guildcord.scheduler.task_scheduler import TaskScheduler


@pytest.fixture
def guilds(guild_store):
    first, second = GuildContext(1, "cmd-"), GuildContext(2, "cmd-")
    guild_store.add(first)
    guild_store.add(second)
    return first, second


def _event(content: str, guild: GuildContext | None, user_id: int = 1000) -> CommandEvent:
    message = make_message(content, author=make_user(user_id))
    return CommandEvent.parse(message, "cmd-", guild)


class _RecordingAliasLoader:
    def __init__(self):
        self.loaded = []

    def load(self, command):
        self.loaded.append(command.name)
        command.add_alias("1", f"{command.name}-alias")


@pytest.mark.asyncio
async def test_dispatches_known_command(permissions, guilds) -> None:
    handler = GuildCommandHandler(permissions)
    command = RecordingCommand(expressions=("ping", "p"))
    handler.add_command(command)

    assert await handler.dispatch(_event("cmd-p", guilds[0])) is True
    assert len(command.events) == 1
    assert command.events[0].command == "p"


@pytest.mark.asyncio
async def test_unknown_command_is_a_miss(permissions, guilds) -> None:
    handler = GuildCommandHandler(permissions)
    handler.add_command(RecordingCommand())
    assert await handler.dispatch(_event("cmd-unknown", guilds[0])) is False


@pytest.mark.asyncio
async def test_missing_message_or_guild_is_a_miss(permissions, guilds) -> None:
    handler = GuildCommandHandler(permissions)
    handler.add_command(RecordingCommand())
    assert await handler.dispatch(CommandEvent.parse(None, "cmd-", guilds[0])) is False
    assert await handler.dispatch(_event("cmd-ping", None)) is False


@pytest.mark.asyncio
async def test_alias_resolves_only_in_its_guild(permissions, guilds) -> None:
    first, second = guilds
    command = RecordingCommand(expressions=("help", "h"))
    command.add_alias(first.string_id, "info")

    handler = GuildCommandHandler(permissions)
    handler.add_command(command)
    private = PrivateCommandHandler(permissions)
    private.add_command(command)

    assert await handler.dispatch(_event("cmd-info", first)) is True
    assert await handler.dispatch(_event("cmd-info", second)) is False
    assert await private.dispatch(_event("cmd-info", None)) is False
    assert len(command.events) == 1


@pytest.mark.asyncio
async def test_alias_scan_follows_registration_order(permissions, guilds) -> None:
    first, _ = guilds
    earlier = RecordingCommand(expressions=("one",))
    later = RecordingCommand(expressions=("two",))
    earlier.add_alias(first.string_id, "x")
    later.add_alias(first.string_id, "x")

    handler = GuildCommandHandler(permissions)
    handler.set_commands([earlier, later])

    assert handler.get_command_for_alias(first.string_id, "x") is earlier


@pytest.mark.asyncio
async def test_cooldown_blocks_reentry_until_expiry(permissions, guilds) -> None:
    first, second = guilds
    scheduler = TaskScheduler()
    handler = GuildCommandHandler(permissions, scheduler)
    command = RecordingCommand(expressions=("x",), cooldown_ms=50)
    handler.add_command(command)

    assert await handler.dispatch(_event("cmd-x", first, user_id=1)) is True
    assert command.is_on_cooldown(first)
    assert await handler.dispatch(_event("cmd-x", first, user_id=2)) is False
    # Other guilds are unaffected
    assert await handler.dispatch(_event("cmd-x", second, user_id=2)) is True

    await asyncio.sleep(0.2)
    assert not command.is_on_cooldown(first)
    assert await handler.dispatch(_event("cmd-x", first, user_id=3)) is True
    assert len(command.events) == 3
    await scheduler.shutdown()


@pytest.mark.asyncio
async def test_zero_cooldown_never_blocks(permissions, guilds) -> None:
    scheduler = TaskScheduler()
    handler = GuildCommandHandler(permissions, scheduler)
    command = RecordingCommand(expressions=("x",))
    handler.add_command(command)

    assert await handler.dispatch(_event("cmd-x", guilds[0])) is True
    assert not command.is_on_cooldown(guilds[0])
    assert scheduler.pending_count == 0
    assert await handler.dispatch(_event("cmd-x", guilds[0])) is True


@pytest.mark.asyncio
async def test_override_raises_the_bar(permissions, guilds) -> None:
    first, _ = guilds
    first.add_master(20)
    handler = GuildCommandHandler(permissions)
    command = RecordingCommand(expressions=("y",), permission=PermissionLevel.USER)
    handler.add_command(command)

    command.override_permission(PermissionLevel.MASTER, first)

    assert await handler.dispatch(_event("cmd-y", first, user_id=10)) is False
    assert await handler.dispatch(_event("cmd-y", first, user_id=20)) is True


@pytest.mark.asyncio
async def test_banned_user_cannot_dispatch(permissions, registry, guilds) -> None:
    registry.ban(10)
    handler = GuildCommandHandler(permissions)
    handler.add_command(RecordingCommand(permission=PermissionLevel.NONE))
    # NONE meets a NONE requirement
    assert await handler.dispatch(_event("cmd-ping", guilds[0], user_id=10)) is True

    strict = GuildCommandHandler(permissions)
    strict.add_command(RecordingCommand())
    assert await strict.dispatch(_event("cmd-ping", guilds[0], user_id=10)) is False


@pytest.mark.asyncio
async def test_execute_failure_propagates(permissions, guilds) -> None:
    handler = GuildCommandHandler(permissions)
    handler.add_command(FailingCommand())
    with pytest.raises(RuntimeError):
        await handler.dispatch(_event("cmd-ping", guilds[0]))


@pytest.mark.asyncio
async def test_private_handler_uses_any_guild_membership(permissions, guilds) -> None:
    first, _ = guilds
    first.add_owner(30)
    handler = PrivateCommandHandler(permissions)
    command = RecordingCommand(permission=PermissionLevel.OWNER, cooldown_ms=10_000)
    handler.add_command(command)

    assert await handler.dispatch(_event("cmd-ping", None, user_id=30)) is True
    # No cooldown in private scope
    assert await handler.dispatch(_event("cmd-ping", None, user_id=30)) is True
    assert await handler.dispatch(_event("cmd-ping", None, user_id=31)) is False


def test_last_registration_wins(permissions) -> None:
    handler = GuildCommandHandler(permissions)
    first = RecordingCommand(expressions=("a", "b"))
    second = RecordingCommand(expressions=("b",))
    handler.add_command(first).add_command(second)

    assert handler.get_command("b") is second
    assert handler.get_command("a") is first
    assert handler.get_commands() == [first, second]


def test_shadowed_command_is_not_listed(permissions) -> None:
    handler = PrivateCommandHandler(permissions)
    first = RecordingCommand(expressions=("a",))
    second = RecordingCommand(expressions=("a",))
    handler.set_commands([first, second])
    assert handler.get_commands() == [second]


def test_alias_loader_sees_every_added_command(permissions) -> None:
    loader = _RecordingAliasLoader()
    handler = GuildCommandHandler(permissions)
    handler.set_alias_loader(loader)
    command = RecordingCommand(expressions=("ping",))
    handler.add_command(command)

    assert loader.loaded == ["ping"]
    assert handler.get_command_for_alias("1", "ping-alias") is command
