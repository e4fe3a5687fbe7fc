"""Tests for discord_utils message helpers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildcord.util.discord_utils import build_message_embed, is_ignored_author, send_message


def _http_error(cls, status: int):
    response = MagicMock()
    response.status = status
    response.reason = "error"
    return cls(response, "message")


class TestSendMessage:
    """Tests for send_message."""

    @pytest.mark.asyncio
    async def test_send_returns_message(self):
        channel = AsyncMock()
        channel.send.return_value = "sent"

        result = await send_message(channel, "hello")

        assert result == "sent"
        channel.send.assert_awaited_once_with(content="hello")

    @pytest.mark.asyncio
    async def test_send_embed_only(self):
        channel = AsyncMock()
        embed = build_message_embed("body")

        await send_message(channel, embed=embed)

        channel.send.assert_awaited_once_with(embed=embed)

    @pytest.mark.asyncio
    async def test_empty_message_is_not_sent(self):
        channel = AsyncMock()
        assert await send_message(channel) is None
        channel.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_forbidden_is_dropped(self):
        channel = AsyncMock()
        channel.send.side_effect = _http_error(discord.Forbidden, 403)

        assert await send_message(channel, "hello") is None

    @pytest.mark.asyncio
    async def test_rate_limit_is_raised(self):
        channel = AsyncMock()
        channel.send.side_effect = _http_error(discord.HTTPException, 429)

        with pytest.raises(discord.HTTPException):
            await send_message(channel, "hello")

    @pytest.mark.asyncio
    async def test_other_http_errors_are_logged(self):
        channel = AsyncMock()
        channel.send.side_effect = _http_error(discord.HTTPException, 500)

        assert await send_message(channel, "hello") is None


def test_build_message_embed():
    embed = build_message_embed("text", color=discord.Color.red(), title="Title")
    assert embed.description == "text"
    assert embed.title == "Title"
    assert embed.color == discord.Color.red()


def test_is_ignored_author():
    assert is_ignored_author(None) is True
    assert is_ignored_author(SimpleNamespace(bot=True)) is True
    assert is_ignored_author(SimpleNamespace(bot=False)) is False
