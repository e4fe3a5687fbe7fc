from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, List
import yaml

from guildcord.util.logger import get_logger

logger = get_logger("app_configuration")


DEFAULT_CONFIG_PATH = Path("./config/app_config.yml")
DEFAULT_PREFIX = "cmd-"
DEFAULT_PRESENCE_INTERVAL = 30.0
DEFAULT_ALIVE_CHECK_INTERVAL = 60.0


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The instance caches the parsed contents of the config file and exposes typed
    shortcuts for the values the framework consumes: the default command prefix,
    the creator IDs, the presence rotation and the alive check. One instance is
    built by the entrypoint and handed to :class:`~guildcord.bot.bot_runtime.BotRuntime`;
    there is no module-level instance, so tests can build their own from a dict.
    """

    def __init__(self, config_path: Path | None = None, data: Dict[str, Any] | None = None) -> None:
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._data: Dict[str, Any] = {}
        if data is not None:
            self._data = dict(data)
        else:
            self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                if not isinstance(data, dict):
                    return {}
                return data
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _section(self, key: str) -> Dict[str, Any]:
        value = self._data.get(key, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        An unreadable or malformed file leaves an empty mapping, so every shortcut
        falls back to its default.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def default_prefix(self) -> str:
        """Prefix used for private messages and for guilds without a loaded prefix."""
        value = self._data.get("default_prefix")
        return str(value) if value else DEFAULT_PREFIX

    @property
    def creators(self) -> List[str]:
        """Creator user IDs.

        The value is a space-delimited string of IDs; a YAML list is accepted too.
        """
        value = self._data.get("creators", "")
        if isinstance(value, (list, tuple)):
            return [str(item).strip() for item in value if str(item).strip()]
        return [part for part in str(value or "").split(" ") if part]

    @property
    def presence_interval(self) -> float:
        """Seconds between presence changes. Default is 30 seconds."""
        return float(self._section("presence").get("interval_seconds", DEFAULT_PRESENCE_INTERVAL))

    @property
    def presence_entries(self) -> List[Dict[str, Any]]:
        """Raw presence entries (status, activity, text, url) in rotation order."""
        entries = self._section("presence").get("entries", [])
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, dict)]

    @property
    def alive_check_interval(self) -> float:
        """Seconds between connection checks. Default is 60 seconds."""
        return float(self._section("alive_check").get("interval_seconds", DEFAULT_ALIVE_CHECK_INTERVAL))

    @property
    def alive_check_logging(self) -> bool:
        """Whether a successful connection check is logged."""
        return bool(self._section("alive_check").get("log_alive", True))
