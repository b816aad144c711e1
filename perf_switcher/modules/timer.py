from typing import Callable

from gi.repository import GLib


class GLibScheduler:
    """
    One-shot timers on the GLib main loop.

    Callbacks run on the loop thread, the same thread that delivers D-Bus
    replies and subprocess completions.
    """

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> int:
        """
        Run callback once after delay_ms milliseconds.

        :return: source id to pass to cancel()
        """
        def fire() -> bool:
            callback()
            return GLib.SOURCE_REMOVE

        return GLib.timeout_add(delay_ms, fire)

    def cancel(self, handle: int) -> None:
        """
        Cancel a pending timer.

        If the timer already fired or was cancelled, nothing happens.
        """
        source = GLib.main_context_default().find_source_by_id(handle)
        if source is not None and not source.is_destroyed():
            source.destroy()
