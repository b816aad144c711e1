import logging
from shutil import which

from gi.repository import Gio, GLib

from perf_switcher.config.config import config
from perf_switcher.globals import APP_TITLE
from perf_switcher.profiles import PROFILE_ICONS
from perf_switcher.types import ProfileId

log = logging.getLogger(__name__)


def notify_failure(profile: ProfileId, message: str) -> bool:
    """
    Show a desktop notification for a failed profile switch.

    notify-send is started without waiting for it, GSubprocess reaps it.

    :return: True if the notification was sent
    """
    if not config.notifications_enabled():
        log.debug("Notifications disabled, not showing: %s", message)
        return False
    if which("notify-send") is None:
        log.warning("notify-send not found, can't show: %s", message)
        return False

    argv = ["notify-send", "-u", "normal", "-i", PROFILE_ICONS.get(profile, "dialog-error-symbolic"), APP_TITLE, message]
    try:
        Gio.Subprocess.new(argv, Gio.SubprocessFlags.STDOUT_SILENCE | Gio.SubprocessFlags.STDERR_SILENCE)
    except GLib.Error as e:
        log.error("Failed to send notification: %s", e.message)
        return False
    return True
