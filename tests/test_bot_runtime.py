from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from fakes import RecordingCommand, make_guild
from guildcord.bot.bot_runtime import BotRuntime
from guildcord.bot.exceptions import ClientNotBuiltError
from guildcord.configuration.app_configuration import AppConfig
from guildcord.datatypes.permission_level import PermissionLevel


def _client(guilds=(), owner_id=77):
    return SimpleNamespace(
        guilds=list(guilds),
        application_info=AsyncMock(return_value=SimpleNamespace(owner=SimpleNamespace(id=owner_id))),
    )


@pytest.fixture
def runtime(app_config) -> BotRuntime:
    return BotRuntime(app_config)


def test_operations_without_client_raise(runtime) -> None:
    assert runtime.is_client_built() is False
    with pytest.raises(ClientNotBuiltError):
        runtime.check_client()
    with pytest.raises(ClientNotBuiltError):
        runtime.create_guild_contexts()
    with pytest.raises(RuntimeError):
        _ = runtime.guild_count


def test_create_guild_contexts(runtime) -> None:
    runtime.attach_client(_client([make_guild(1, owner_id=10), make_guild(2)]))

    contexts = runtime.create_guild_contexts()

    assert {context.id for context in contexts} == {1, 2}
    assert runtime.guild_count == 2
    first = runtime.get_guild_context(1)
    assert first.prefix == "cmd-"
    assert first.command_handler is runtime.command_handler
    assert first.is_owner(10)
    assert runtime.total_owner_count == 1


def test_add_and_remove_guild(runtime) -> None:
    guild = make_guild(5)
    assert runtime.add_guild(guild) is True
    assert runtime.add_guild(guild) is False
    assert runtime.remove_guild(5) is True
    assert runtime.remove_guild(5) is False


def test_prefix_loader_applies_to_new_guilds(runtime) -> None:
    runtime.set_prefix_loader(SimpleNamespace(load=lambda context: "!"))
    runtime.add_guild(make_guild(5))
    assert runtime.get_guild_context(5).prefix == "!"


def test_load_creators_skips_invalid_ids() -> None:
    runtime = BotRuntime(AppConfig(data={"creators": "900 abc 901"}))
    runtime.load_creators()
    assert runtime.access_registry.creators == {"900", "901"}
    assert runtime.total_creator_count == 2


@pytest.mark.asyncio
async def test_handle_ready_sequence(runtime) -> None:
    client = _client(owner_id=77)
    runtime.attach_client(client)
    order = []

    async def prepare():
        order.append(("prepare", runtime.total_creator_count, runtime.access_registry.app_owner))

    await runtime.handle_ready(prepare)

    assert order == [("prepare", 2, None)]
    assert runtime.access_registry.app_owner == "77"
    assert runtime.permissions.get_permission_level(77) is PermissionLevel.APP_OWNER
    assert runtime.permissions.get_permission_level(900) is PermissionLevel.CREATOR
    assert runtime.ready is True


@pytest.mark.asyncio
async def test_handle_ready_requires_client(runtime) -> None:
    with pytest.raises(ClientNotBuiltError):
        await runtime.handle_ready()
    assert runtime.ready is False


def test_set_presence_rotator_replaces_previous(runtime) -> None:
    old, new = MagicMock(), MagicMock()
    runtime.set_presence_rotator(old)
    runtime.set_presence_rotator(new)

    old.start.assert_called_once()
    old.stop.assert_called_once()
    new.start.assert_called_once()
    assert runtime.presence_rotator is new


def test_add_command_registers_private_when_asked(runtime) -> None:
    shared = RecordingCommand(expressions=("help",))
    guild_only = RecordingCommand(expressions=("alias",))
    runtime.add_command(shared, private=True)
    runtime.add_command(guild_only)

    assert runtime.command_handler.get_commands() == [shared, guild_only]
    assert runtime.private_handler.get_commands() == [shared]


@pytest.mark.asyncio
async def test_shutdown_stops_background_tasks(runtime) -> None:
    rotator, monitor = MagicMock(), MagicMock()
    rotator.shutdown = AsyncMock()
    monitor.shutdown = AsyncMock()
    runtime.set_presence_rotator(rotator)
    runtime.set_alive_monitor(monitor)
    runtime.ready = True

    await runtime.shutdown()

    rotator.shutdown.assert_awaited_once()
    monitor.shutdown.assert_awaited_once()
    assert runtime.ready is False
