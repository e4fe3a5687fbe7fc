"""Periodic connection check for the bot client."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

import discord

from guildcord.util.logger import get_logger

logger = get_logger("alive_check")

DEFAULT_INTERVAL_SECONDS = 60.0


class AliveMonitor:
    """
    Checks every ``interval_seconds`` whether the client is still connected.

    A connected client is logged as alive when ``should_log`` is set. Otherwise the
    optional ``on_offline`` hook, sync or async, is called.
    """

    def __init__(
        self,
        client: discord.Client,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        on_offline: Callable[[], Any] | None = None,
        should_log: bool = True,
    ) -> None:
        self.client = client
        self.interval_seconds = interval_seconds
        self.on_offline = on_offline
        self.should_log = should_log
        self._task: asyncio.Task | None = None

    def is_alive(self) -> bool:
        return not self.client.is_closed() and self.client.is_ready()

    async def check(self) -> bool:
        """Run one check. Returns True if the client is connected."""
        if self.is_alive():
            if self.should_log:
                logger.info("[ALIVE CHECK] Alive")
            return True

        logger.warning("[ALIVE CHECK] Client is not connected")
        if self.on_offline is not None:
            result = self.on_offline()
            if inspect.isawaitable(result):
                await result
        return False

    async def _run_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.check()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.error("[ALIVE CHECK] Offline handler failed: %s", exc)
        except asyncio.CancelledError:
            logger.info("[ALIVE CHECK] Alive check cancelled")
            raise

    def start(self) -> None:
        if self._task and not self._task.done():
            logger.warning("[ALIVE CHECK] Alive check already running")
            return
        logger.info("[ALIVE CHECK] Checking connection every %.1fs", self.interval_seconds)
        self._task = asyncio.create_task(self._run_loop())

    def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    async def shutdown(self) -> None:
        task = self._task
        self._task = None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
