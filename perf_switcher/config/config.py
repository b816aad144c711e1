from configparser import ConfigParser, Error as ConfigParserError
import logging
import os
import sys

import pyinotify

from perf_switcher.config.config_event_handler import ConfigEventHandler
from perf_switcher.globals import (
    APP_NAME,
    BACKEND_TYPES,
    CLI_TOOL,
    RETRY_DELAY_MS,
    RETRY_MAX_ATTEMPTS,
    SYSTEM_CONFIG_FILE,
    USER_CONFIG_DIR,
)

log = logging.getLogger(__name__)


def find_config_file(args_config_file) -> str:
    """
    Find the config file to use.

    Look for a config file in the following priorization order:
    1. Command line argument
    2. User config file
    3. System config file

    :param args_config_file: Path to the config file provided as a command line argument
    :return: The path to the config file to use
    """
    user_config_file = os.path.join(USER_CONFIG_DIR, APP_NAME, f"{APP_NAME}.conf")

    if args_config_file is not None:                                # (1) Command line argument was specified
        # Check if the config file path points to a valid file
        if os.path.isfile(args_config_file): return args_config_file
        else:
            # Not a valid file
            print(f"Config file specified with '--config {args_config_file}' not found.")
            sys.exit(1)
    elif os.path.isfile(user_config_file): return user_config_file  # (2) User config file
    else: return SYSTEM_CONFIG_FILE                                 # (3) System config file (default if nothing else is found)


class _Config:
    def __init__(self) -> None:
        self.path: str = ""
        self._config: ConfigParser = ConfigParser()
        self.watch_manager: pyinotify.WatchManager = pyinotify.WatchManager()
        self.config_handler = ConfigEventHandler(self)

        # check for file changes using threading
        self.notifier: pyinotify.ThreadedNotifier = pyinotify.ThreadedNotifier(self.watch_manager, self.config_handler)

    def set_path(self, path: str) -> None:
        self.path = path
        mask = pyinotify.IN_CREATE | pyinotify.IN_DELETE | pyinotify.IN_MODIFY | pyinotify.IN_MOVED_FROM | pyinotify.IN_MOVED_TO
        if os.path.isdir(os.path.dirname(path)):
            self.watch_manager.add_watch(os.path.dirname(path), mask=mask)
        self.update_config()

    def has_config(self) -> bool:
        return os.path.isfile(self.path)

    def update_config(self) -> None:
        # create new ConfigParser to prevent old data from remaining
        config = ConfigParser()
        try: config.read(self.path)
        except ConfigParserError as e: log.error("The following error occured while parsing the config file: %s", e)
        self._config = config

    def get_int(self, section: str, option: str, default: int, minimum: int = 0) -> int:
        try:
            value = self._config.getint(section, option, fallback=default)
        except ValueError:
            log.warning("Invalid value for '%s' in [%s]: %s", option, section, self._config.get(section, option))
            return default
        if value < minimum:
            log.warning("Value for '%s' in [%s] must be at least %d, using %d", option, section, minimum, default)
            return default
        return value

    def get_bool(self, section: str, option: str, default: bool) -> bool:
        try:
            return self._config.getboolean(section, option, fallback=default)
        except ValueError:
            log.warning("Invalid value for '%s' in [%s]: %s", option, section, self._config.get(section, option))
            return default

    def backend_type(self) -> str:
        kind = self._config.get("backend", "type", fallback="auto").strip().lower()
        if kind not in BACKEND_TYPES:
            log.warning("Invalid backend type '%s', using auto", kind)
            return "auto"
        return kind

    def cli_tool(self) -> str:
        return self._config.get("backend", "cli_tool", fallback=CLI_TOOL).strip() or CLI_TOOL

    def retry_policy(self) -> tuple[int, int]:
        return (
            self.get_int("retry", "max_attempts", RETRY_MAX_ATTEMPTS, minimum=1),
            self.get_int("retry", "delay_ms", RETRY_DELAY_MS),
        )

    def notifications_enabled(self) -> bool:
        return self.get_bool("notifications", "enabled", True)

    def log_level(self) -> str:
        return self._config.get("logging", "level", fallback="info").strip().upper()


config = _Config()
