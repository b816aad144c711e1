import logging
from typing import Iterable, Mapping, Optional

from perf_switcher.errors import PerfSwitcherError
from perf_switcher.globals import DBUS_INTERFACE_NAME, PROFILE_PROPERTY
from perf_switcher.modules.state_store import ProfileStateStore
from perf_switcher.profiles import decode_code
from perf_switcher.types import Subscription

log = logging.getLogger(__name__)


class ChangeSubscriber:
    """
    Feeds PropertiesChanged signals of asusd into the state store.

    This is the only path for profile changes made outside of this process,
    the daemon is never polled.
    """

    def __init__(self, store: ProfileStateStore, source):
        """
        :param store: the store receiving decoded profiles
        :param source: push source with connect(callback) -> Subscription,
            normally a DBusPropertiesSource
        """
        self._store = store
        self._source = source
        self._subscription: Optional[Subscription] = None

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def subscribe(self) -> bool:
        """
        Connect to the push source once.

        :return: True if a subscription is active afterwards
        """
        if self._subscription is not None:
            log.debug("Already subscribed (id %d)", self._subscription.id)
            return True
        try:
            self._subscription = self._source.connect(self.handle_properties_changed)
        except PerfSwitcherError as e:
            log.warning("Profile changes made outside perf-switcher won't be tracked: %s", e)
            return False
        log.debug("Subscribed to %s changes (id %d)", DBUS_INTERFACE_NAME, self._subscription.id)
        return True

    def unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is None:
            return
        try:
            subscription.cancel()
        except Exception as e:
            log.error("Error cancelling subscription %d: %s", subscription.id, e)

    def handle_properties_changed(self, interface: str, changed: Mapping, invalidated: Iterable = ()) -> None:
        if interface != DBUS_INTERFACE_NAME or PROFILE_PROPERTY not in changed:
            return

        value = changed[PROFILE_PROPERTY]
        profile = decode_code(value)
        if profile is None:
            log.warning("Ignoring unknown %s value: %r", PROFILE_PROPERTY, value)
            return
        self._store.set_active(profile)
