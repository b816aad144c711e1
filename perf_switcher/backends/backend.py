#!/usr/bin/env python3
import logging
from shutil import which

from perf_switcher.backends.shared import ProfileBackend
from perf_switcher.globals import BACKEND_TYPES, CLI_TOOL

log = logging.getLogger(__name__)


def select_backend(kind: str = "auto", tool: str = CLI_TOOL, bus=None) -> ProfileBackend:
    """
    Create the backend used for the whole session.

    "auto" prefers D-Bus when asusd owns its name, then asusctl when it is on
    PATH, and falls back to D-Bus so failures surface through retries.
    """
    if kind not in BACKEND_TYPES:
        raise ValueError(f"Invalid backend: {kind}. Must be one of {list(BACKEND_TYPES)}")

    if kind == "auto":
        from perf_switcher.backends.dbus_backend import service_has_owner

        if service_has_owner(bus):
            kind = "dbus"
        elif which(tool):
            kind = "cli"
        else:
            kind = "dbus"
        log.info("Auto-selected %s backend", kind)

    if kind == "cli":
        from perf_switcher.backends.cli_backend import CliProfileBackend
        return CliProfileBackend(tool)

    from perf_switcher.backends.dbus_backend import DBusProfileBackend
    return DBusProfileBackend(bus)
