import gi
gi.require_version("Gtk", "3.0")
gi.require_version("AppIndicator3", "0.1")
from gi.repository import Gtk, GLib, AppIndicator3 as appindicator

import logging

from perf_switcher.globals import APP_NAME
from perf_switcher.modules.sync_engine import SyncEngine
from perf_switcher.profiles import PROFILE_ICONS
from perf_switcher.types import DEFAULT_PROFILE, ProfileId, SyncState

log = logging.getLogger(__name__)

TITLE = "Perf Mode"


class ProfileIndicator:
    """
    Status menu with one radio item per supported profile.

    The items stay insensitive until the active profile is known. A click
    only issues a request, the checked item follows the store so a failed
    switch never shows the requested profile as active.
    """

    def __init__(self, engine: SyncEngine, on_quit=None):
        self.engine = engine
        self.on_quit = on_quit
        self._items: dict[ProfileId, Gtk.RadioMenuItem] = {}
        self._catalog = None
        self._updating = False

        self.indicator = appindicator.Indicator.new(APP_NAME, PROFILE_ICONS[DEFAULT_PROFILE], appindicator.IndicatorCategory.HARDWARE)
        self.indicator.set_status(appindicator.IndicatorStatus.ACTIVE)
        self.indicator.set_title(TITLE)

        engine.connect(self.sync)
        engine.connect_failure(lambda profile, message: GLib.idle_add(self._resync))
        self.sync(engine.current())

    def build_menu(self, catalog) -> Gtk.Menu:
        menu = Gtk.Menu()
        header = Gtk.MenuItem(label=TITLE)
        header.set_sensitive(False)
        menu.append(header)

        self._items = {}
        group = None
        for profile in catalog:
            item = Gtk.RadioMenuItem.new_with_label_from_widget(group, profile.value)
            item.connect("toggled", self._on_toggled, profile)
            menu.append(item)
            self._items[profile] = item
            group = item

        menu.append(Gtk.SeparatorMenuItem())
        refresh = Gtk.MenuItem(label="Refresh")
        refresh.connect("activate", lambda *args: self.engine.reset())
        menu.append(refresh)

        _quit = Gtk.MenuItem(label="Quit")
        _quit.connect("activate", self.quit)
        menu.append(_quit)
        menu.show_all()
        return menu

    def sync(self, state: SyncState) -> None:
        if state.catalog != self._catalog:
            self._catalog = state.catalog
            self.indicator.set_menu(self.build_menu(state.catalog))

        active = state.active_profile
        self._updating = True
        try:
            for profile, item in self._items.items():
                item.set_sensitive(active is not None)
                if profile == active: item.set_active(True)
        finally:
            self._updating = False

        if active is not None:
            self.indicator.set_icon_full(PROFILE_ICONS[active], active.value)
            self.indicator.set_label(active.value, max(len(p.value) for p in ProfileId))

    def _resync(self) -> bool:
        self.sync(self.engine.current())
        return GLib.SOURCE_REMOVE

    def _on_toggled(self, item: Gtk.RadioMenuItem, profile: ProfileId) -> None:
        if self._updating or not item.get_active():
            return
        self.engine.request_profile(profile)
        # show the confirmed profile until the switch went through
        GLib.idle_add(self._resync)

    def quit(self, *args) -> None:
        self.engine.shutdown()
        if self.on_quit is not None:
            self.on_quit()
        Gtk.main_quit()


def main(engine: SyncEngine, on_quit=None) -> None:
    ProfileIndicator(engine, on_quit=on_quit)
    engine.start()
    Gtk.main()
