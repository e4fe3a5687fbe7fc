"""
Pytest configuration and fixtures for Guildcord tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from guildcord.configuration.app_configuration import AppConfig  # noqa: E402
from guildcord.guild.guild_store import GuildStore  # noqa: E402
from guildcord.permissions.access_registry import AccessRegistry  # noqa: E402
from guildcord.permissions.user_permissions import UserPermissions  # noqa: E402


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(data={"default_prefix": "cmd-", "creators": "900 901"})


@pytest.fixture
def registry() -> AccessRegistry:
    return AccessRegistry()


@pytest.fixture
def guild_store() -> GuildStore:
    return GuildStore("cmd-")


@pytest.fixture
def permissions(registry, guild_store) -> UserPermissions:
    return UserPermissions(registry, guild_store)
