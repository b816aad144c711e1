from os import getenv, path

APP_NAME = "perf-switcher"
APP_TITLE = "Perf Switcher"
APP_VERSION = "1.0.0"
GITHUB = "https://github.com/perf-switcher/perf-switcher"

# asusd D-Bus endpoint
# discovered via: busctl --system list | grep asus
DBUS_SERVICE_NAME = "xyz.ljones.Asusd"
DBUS_OBJECT_PATH = "/xyz/ljones"
DBUS_INTERFACE_NAME = "xyz.ljones.Platform"
DBUS_PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

PROFILE_PROPERTY = "PlatformProfile"
PROFILE_CHOICES_PROPERTY = "PlatformProfileChoices"

# asusctl command lines, the tool name is prepended at call time
CLI_TOOL = "asusctl"
CLI_LIST_ARGS = ("profile", "-l")
CLI_GET_ARGS = ("profile", "-p")
CLI_SET_ARGS = ("profile", "-P")

BACKEND_TYPES = ("auto", "dbus", "cli")

RETRY_MAX_ATTEMPTS = 3
RETRY_DELAY_MS = 1000

FAILURE_MESSAGE = "Failed to switch to {profile} profile. Please try again or check system logs."

SYSTEM_CONFIG_FILE = "/etc/perf-switcher.conf"
USER_CONFIG_DIR = getenv("XDG_CONFIG_HOME", default=path.expanduser("~/.config"))
LOG_DIR = path.join(getenv("XDG_STATE_HOME", default=path.expanduser("~/.local/state")), APP_NAME)
LOG_FILE = path.join(LOG_DIR, "perf-switcher.log")
