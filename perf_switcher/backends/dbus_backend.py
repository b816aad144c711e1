#!/usr/bin/env python3
"""
asusd backend talking to the xyz.ljones.Platform D-Bus interface.

Interface tree: gdbus introspect --system --dest xyz.ljones.Asusd --object-path /

Properties are read and written with plain org.freedesktop.DBus.Properties
calls on the bus connection. No proxy is built, so nothing here introspects
asusd or waits for it on the main loop.
"""

import logging
from typing import Callable

from dasbus.connection import SystemMessageBus
from dasbus.typing import UInt32, Variant, get_variant, unwrap_variant
from gi.repository import Gio, GLib

from perf_switcher.backends.shared import ErrorCallback, ProfileBackend, ResultCallback
from perf_switcher.errors import ParseError, TransportError
from perf_switcher.globals import (
    DBUS_INTERFACE_NAME,
    DBUS_OBJECT_PATH,
    DBUS_PROPERTIES_INTERFACE,
    DBUS_SERVICE_NAME,
    PROFILE_CHOICES_PROPERTY,
    PROFILE_PROPERTY,
)
from perf_switcher.profiles import decode_catalog, decode_code, encode_profile
from perf_switcher.types import ProfileId, Subscription

log = logging.getLogger(__name__)

# use the bus default timeout
CALL_TIMEOUT = -1


def unwrap(value):
    """Return a plain Python value for replies that may still hold variants."""
    return unwrap_variant(value) if isinstance(value, Variant) else value


def service_has_owner(bus=None) -> bool:
    """
    Check if asusd currently owns its well-known name on the system bus.

    Blocking, only called while choosing the backend before the main loop runs.
    """
    try:
        bus = bus or SystemMessageBus()
        return bool(bus.proxy.NameHasOwner(DBUS_SERVICE_NAME))
    except Exception as e:
        log.debug("Unable to query owner of %s: %s", DBUS_SERVICE_NAME, e)
        return False


class DBusProfileBackend(ProfileBackend):
    name = "dbus"

    def __init__(self, bus=None):
        self._bus = bus if bus is not None else SystemMessageBus()

    def _call(self, method: str, parameters: Variant, on_reply: Callable, on_error: ErrorCallback) -> None:
        def callback(connection, result):
            try:
                reply = connection.call_finish(result)
            except GLib.Error as e:
                log.debug("%s call failed: %s", method, e.message)
                on_error(TransportError(f"{method} on {DBUS_INTERFACE_NAME} failed: {e.message}"))
                return
            on_reply(unwrap(reply))

        try:
            self._bus.connection.call(
                DBUS_SERVICE_NAME, DBUS_OBJECT_PATH, DBUS_PROPERTIES_INTERFACE, method, parameters,
                None, Gio.DBusCallFlags.NONE, CALL_TIMEOUT, None, callback,
            )
        except Exception as e:
            on_error(TransportError(f"Unable to call {method} on {DBUS_SERVICE_NAME}: {e}"))

    def _get(self, prop: str, on_value: Callable, on_error: ErrorCallback) -> None:
        # Get replies with a single (v) tuple
        self._call("Get", get_variant("(ss)", (DBUS_INTERFACE_NAME, prop)), lambda reply: on_value(reply[0]), on_error)

    def list_supported(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        def on_value(values):
            if not isinstance(values, (list, tuple)):
                on_error(ParseError(f"{PROFILE_CHOICES_PROPERTY} is not a list: {values!r}"))
                return
            on_result(decode_catalog(values))

        self._get(PROFILE_CHOICES_PROPERTY, on_value, on_error)

    def get_current(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        def on_value(value):
            profile = decode_code(value)
            if profile is None:
                on_error(ParseError(f"Unknown {PROFILE_PROPERTY} value: {value!r}"))
                return
            on_result(profile)

        self._get(PROFILE_PROPERTY, on_value, on_error)

    def set_current(self, profile: ProfileId, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        value = get_variant(UInt32, encode_profile(profile))
        parameters = get_variant("(ssv)", (DBUS_INTERFACE_NAME, PROFILE_PROPERTY, value))
        self._call("Set", parameters, lambda _: on_result(profile), on_error)


class DBusPropertiesSource:
    """PropertiesChanged signal of the asusd object."""

    def __init__(self, bus=None):
        self._bus = bus if bus is not None else SystemMessageBus()

    def connect(self, callback: Callable) -> Subscription:
        """
        Subscribe callback(interface, changed, invalidated) to the signal.

        The match rule is added without waiting for asusd, so this works
        before the service has started.

        :raises TransportError: if the signal can't be subscribed
        """
        def on_signal(connection, sender, path, interface, signal, parameters):
            changed_interface, changed, invalidated = unwrap(parameters)
            callback(changed_interface, changed, invalidated)

        try:
            connection = self._bus.connection
            handle = connection.signal_subscribe(
                DBUS_SERVICE_NAME, DBUS_PROPERTIES_INTERFACE, "PropertiesChanged", DBUS_OBJECT_PATH,
                None, Gio.DBusSignalFlags.NONE, on_signal,
            )
        except Exception as e:
            raise TransportError(f"Unable to subscribe to PropertiesChanged of {DBUS_SERVICE_NAME}: {e}") from e

        return Subscription(id=handle, cancel=lambda: connection.signal_unsubscribe(handle))
