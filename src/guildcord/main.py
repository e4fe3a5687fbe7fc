"""
Guildcord Bot
=============

Entrypoint for a Discord bot built on the Guildcord command framework: prefix
commands dispatched per guild, tiered permissions with per-guild overrides,
cooldowns, rotating presence and a periodic connection check.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. GUILDCORD_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("GUILDCORD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()

import asyncio
import discord
from dotenv import load_dotenv

from guildcord.bot.bot_runtime import BotRuntime
from guildcord.command.builtin_cmds import default_commands
from guildcord.configuration.app_configuration import AppConfig
from guildcord.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Returns
    -------
    str
        Discord bot token extracted from the loaded environment.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Construct the Discord intents required for prefix commands.

    Returns
    -------
    discord.Intents
        Intents enabling guild, member, message and message content events.
    """
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot) -> None:
    """Register the event and message cogs with the provided bot instance."""
    from guildcord.bot.cogs import events_listener, message_listener

    events_listener.setup(discord_bot_instance)
    message_listener.setup(discord_bot_instance)

    logger.info("All cogs loaded successfully.")


def build_runtime(config: AppConfig) -> BotRuntime:
    """Create the runtime and register the built-in commands."""
    runtime = BotRuntime(config)
    for command in default_commands(runtime.private_handler):
        runtime.add_command(command, private=command.name == "help")
    return runtime


def create_bot(runtime: BotRuntime) -> discord.Bot:
    """Instantiate the Discord bot, attach the runtime and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    bot.runtime = runtime
    runtime.attach_client(bot)
    load_cogs(bot)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and handle lifecycle logging around the connection."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot, runtime: BotRuntime) -> None:
    """Stop background tasks and close the Discord connection."""
    try:
        await runtime.shutdown()
    except Exception as exc:
        logger.exception("Error during runtime shutdown: %s", exc)

    if not bot.is_closed():
        await bot.close()

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the configuration, runtime and bot, returning an exit code."""
    token = load_environment()
    config = AppConfig(BASE_DIR / "config" / "app_config.yml")

    try:
        runtime = build_runtime(config)
        bot = create_bot(runtime)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, runtime)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting Guildcord bot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
