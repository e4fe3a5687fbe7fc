"""Per-guild cooldown timer for a command."""

from __future__ import annotations

from typing import Any

from guildcord.command.command import Command, guild_key
from guildcord.scheduler.task_scheduler import TaskScheduler
from guildcord.util.logger import get_logger

logger = get_logger("command_cooldown")


class CommandCooldown:
    """
    Blocks a command in one guild for ``cooldown_ms`` milliseconds.

    :meth:`start_timer` raises the cooldown flag synchronously and schedules a
    one-shot callback that clears it. The callback only holds the command and the
    integer guild ID, never the guild context itself.
    """

    def __init__(self, command: Command, cooldown_ms: int, guild: Any, scheduler: TaskScheduler) -> None:
        self.command = command
        self.cooldown_ms = cooldown_ms
        self.guild_id = guild_key(guild)
        self.scheduler = scheduler

    def start_timer(self) -> int:
        """Set the cooldown and schedule its expiry. Returns the scheduler job ID."""
        self.command.set_on_cooldown(True, self.guild_id)
        return self.scheduler.schedule_once(self.cooldown_ms, _expiry_callback(self.command, self.guild_id))


def _expiry_callback(command: Command, guild_id: int):
    def expire() -> None:
        command.set_on_cooldown(False, guild_id)
        logger.debug("[COMMAND COOLDOWN] Cooldown of %s expired in guild %s", command.name, guild_id)

    return expire
