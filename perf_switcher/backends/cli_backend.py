#!/usr/bin/env python3
import logging
from typing import Callable, Sequence

from gi.repository import Gio, GLib

from perf_switcher.backends.cli_parser import parse_active_profile, parse_profile_list
from perf_switcher.backends.shared import ErrorCallback, ProfileBackend, ResultCallback
from perf_switcher.errors import BackendError, TransportError
from perf_switcher.globals import CLI_GET_ARGS, CLI_LIST_ARGS, CLI_SET_ARGS, CLI_TOOL
from perf_switcher.types import ProfileId

log = logging.getLogger(__name__)


class CliProfileBackend(ProfileBackend):
    """
    asusd backend driving the asusctl command line tool.

    One subprocess is spawned per call. Its output is collected on the main
    loop, the process is reaped before the callbacks run.
    """

    name = "cli"

    def __init__(self, tool: str = CLI_TOOL):
        self.tool = tool

    def _run(self, args: Sequence[str], parse: Callable[[str], object], on_result: ResultCallback, on_error: ErrorCallback) -> None:
        argv = [self.tool, *args]
        log.debug("Running: %s", " ".join(argv))
        try:
            proc = Gio.Subprocess.new(argv, Gio.SubprocessFlags.STDOUT_PIPE | Gio.SubprocessFlags.STDERR_PIPE)
        except GLib.Error as e:
            on_error(TransportError(f"Unable to run {self.tool}: {e.message}"))
            return
        proc.communicate_utf8_async(None, None, self._on_communicated, (argv, parse, on_result, on_error))

    def _on_communicated(self, proc, result, user_data) -> None:
        argv, parse, on_result, on_error = user_data
        try:
            _, stdout, stderr = proc.communicate_utf8_finish(result)
        except GLib.Error as e:
            on_error(TransportError(f"{' '.join(argv)} failed: {e.message}"))
            return

        if not proc.get_successful():
            on_error(TransportError(
                f"{' '.join(argv)} exited with status {proc.get_exit_status()}: {(stderr or '').strip()}"
            ))
            return

        try:
            value = parse(stdout or "")
        except BackendError as e:
            on_error(e)
            return
        on_result(value)

    def list_supported(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        self._run(CLI_LIST_ARGS, parse_profile_list, on_result, on_error)

    def get_current(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        self._run(CLI_GET_ARGS, parse_active_profile, on_result, on_error)

    def set_current(self, profile: ProfileId, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        self._run((*CLI_SET_ARGS, profile.value), lambda _: profile, on_result, on_error)
