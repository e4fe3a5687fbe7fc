"""Rotating bot presence.

:class:`PresenceRotator` cycles the client's status and activity through a list of
:class:`Presence` entries on a fixed interval, optionally calling an update hook
before each change so entries can carry live values (guild counts and the like).
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

import discord

from guildcord.util.logger import get_logger

logger = get_logger("presence_rotation")

STREAMING = "streaming"
INITIAL_DELAY_SECONDS = 1.0
DEFAULT_DELAY_SECONDS = 30.0


@dataclass(slots=True)
class Presence:
    """
    One status/activity pair shown by the bot.

    Attributes:
        status: Name of a ``discord.Status`` member (``online``, ``idle``, ``dnd``, ``invisible``).
        activity: Name of a ``discord.ActivityType`` member, e.g. ``playing`` or ``watching``.
            ``streaming`` builds a ``discord.Streaming`` activity with ``url``.
        text: Activity text.
        url: Stream URL, only used for streaming presences.
    """

    status: str
    activity: str
    text: str
    url: str | None = None

    @classmethod
    def from_config(cls, entry: Dict[str, Any]) -> "Presence":
        return cls(
            status=str(entry.get("status", "online")).lower(),
            activity=str(entry.get("activity", "playing")).lower(),
            text=str(entry.get("text", "")),
            url=entry.get("url"),
        )

    def build_activity(self) -> discord.BaseActivity:
        if self.activity == STREAMING:
            return discord.Streaming(name=self.text, url=self.url)
        activity_type = getattr(discord.ActivityType, self.activity, discord.ActivityType.playing)
        return discord.Activity(type=activity_type, name=self.text)

    async def apply(self, client: discord.Client) -> None:
        """Set this presence on ``client``."""
        status = getattr(discord.Status, self.status, discord.Status.online)
        await client.change_presence(status=status, activity=self.build_activity())


class PresenceRotator:
    """
    Periodically applies the next presence in round-robin order.

    Args:
        client: Client whose presence is changed.
        presences: Entries to cycle through. An empty list makes every tick a no-op.
        delay_seconds: Seconds between changes.
        updater: Optional hook, sync or async, called before every change.
    """

    def __init__(
        self,
        client: discord.Client,
        presences: Iterable[Presence] | None = None,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        updater: Callable[[], Any] | None = None,
    ) -> None:
        self.client = client
        self.presences: List[Presence] = list(presences or [])
        self.delay_seconds = delay_seconds
        self.updater = updater
        self.current_index = 0
        self._task: asyncio.Task | None = None

    @classmethod
    def from_config(cls, client: discord.Client, config, updater: Callable[[], Any] | None = None) -> "PresenceRotator":
        presences = [Presence.from_config(entry) for entry in config.presence_entries]
        return cls(client, presences, delay_seconds=config.presence_interval, updater=updater)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> None:
        """Run the update hook and apply the next presence."""
        if self.updater is not None:
            result = self.updater()
            if inspect.isawaitable(result):
                await result

        if not self.presences:
            return
        if self.current_index >= len(self.presences):
            self.current_index = 0
        presence = self.presences[self.current_index]
        self.current_index += 1
        await presence.apply(self.client)

    async def _run_loop(self) -> None:
        logger.info("[PRESENCE] Rotating %d presence(s) every %.1fs", len(self.presences), self.delay_seconds)
        try:
            await asyncio.sleep(INITIAL_DELAY_SECONDS)
            while True:
                try:
                    await self.tick()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("[PRESENCE] Failed to update presence: %s", exc)
                await asyncio.sleep(self.delay_seconds)
        except asyncio.CancelledError:
            logger.info("[PRESENCE] Presence rotation cancelled")
            raise

    def start(self) -> None:
        """Start the rotation task if not already running."""
        if self.running:
            logger.warning("[PRESENCE] Presence rotation already running")
            return
        self._task = asyncio.create_task(self._run_loop())

    def stop(self) -> None:
        """Cancel the rotation task without waiting for it."""
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    async def shutdown(self) -> None:
        """Cancel the rotation task and wait for it to finish."""
        task = self._task
        self._task = None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
