#!/usr/bin/env python3
#
# perf-switcher - Quiet/Balanced/Performance switcher for asusd
#
import sys

import click
from gi.repository import GLib

from perf_switcher.backends.backend import select_backend
from perf_switcher.config.config import config as conf, find_config_file
from perf_switcher.globals import APP_VERSION, BACKEND_TYPES, GITHUB
from perf_switcher.modules.retry import RetryExecutor
from perf_switcher.modules.state_store import ProfileStateStore
from perf_switcher.modules.subscriber import ChangeSubscriber
from perf_switcher.modules.sync_engine import SyncEngine
from perf_switcher.modules.timer import GLibScheduler
from perf_switcher.prints import print_error, print_info, print_info_block, print_profile_list
from perf_switcher.tools import setup_logger
from perf_switcher.types import ProfileId


def build_engine(backend_kind: str) -> SyncEngine:
    from perf_switcher.backends.dbus_backend import DBusPropertiesSource

    backend = select_backend(backend_kind, conf.cli_tool())
    max_attempts, delay_ms = conf.retry_policy()
    retry = RetryExecutor(GLibScheduler(), max_attempts=max_attempts, delay_ms=delay_ms)
    store = ProfileStateStore()
    subscriber = ChangeSubscriber(store, DBusPropertiesSource())
    return SyncEngine(backend, retry, subscriber=subscriber, store=store)


def run_until_ready(engine: SyncEngine, on_ready) -> int:
    """
    Start the engine and run the main loop until on_ready(engine, finish) calls finish(code).
    """
    loop = GLib.MainLoop()
    outcome = {"code": 0}
    started = {"done": False}

    def finish(code: int) -> None:
        outcome["code"] = code
        loop.quit()

    def ready_check() -> bool:
        on_ready(engine, finish)
        return GLib.SOURCE_REMOVE

    def on_state(state) -> None:
        if state.active_profile is not None and not started["done"]:
            started["done"] = True
            # leave the store notification before acting on the state
            GLib.idle_add(ready_check)

    engine.connect(on_state)
    engine.start()
    try:
        loop.run()
    except KeyboardInterrupt:
        outcome["code"] = 130
    finally:
        engine.shutdown()
    return outcome["code"]


def show_state(engine: SyncEngine, finish) -> None:
    state = engine.current()
    print_info_block(
        "Perf Switcher",
        f"Backend: {engine.backend.name}",
        f"Active profile: {state.active_profile.value}",
        *([f"Last error: {state.last_error.value}"] if state.last_error else []),
    )
    print_profile_list(state.catalog, state.active_profile)
    finish(0)


def show_list(engine: SyncEngine, finish) -> None:
    for profile in engine.current().catalog:
        print(profile.value)
    finish(0)


def switch_to(target: ProfileId):
    def on_ready(engine: SyncEngine, finish) -> None:
        def on_state(state) -> None:
            if state.active_profile == target:
                print_info(f"Switched to {target.value} profile")
                finish(0)

        def on_failure(profile, message) -> None:
            print_error(message)
            finish(1)

        engine.connect(on_state)
        engine.connect_failure(on_failure)
        if not engine.request_profile(target):
            if engine.current().active_profile == target:
                print_info(f"{target.value} profile is already active")
                finish(0)
            else:
                print_error(f"{target.value} profile is not supported on this system")
                finish(1)

    return on_ready


@click.command()
@click.option("--tray", is_flag=True, help="Show the profile switcher in the system tray")
@click.option("--get", "get_state", is_flag=True, help="Show the active and supported profiles")
@click.option("--list", "list_profiles", is_flag=True, help="List the supported profiles")
@click.option("--set", "set_profile", type=click.Choice([p.value for p in ProfileId], case_sensitive=False), help="Switch to the given profile")
@click.option("--backend", type=click.Choice(BACKEND_TYPES), help="Talk to asusd over D-Bus or through asusctl")
@click.option("--config", is_flag=False, required=False, help="Use config file at defined path")
@click.option("--debug", is_flag=True, help="Show debug info (include when submitting bugs)")
@click.option("--version", is_flag=True, help="Show currently installed version")
def main(tray, get_state, list_profiles, set_profile, backend, config, debug, version):
    if version:
        print(f"perf-switcher {APP_VERSION}\n{GITHUB}")
        return

    if not (tray or get_state or list_profiles or set_profile):
        print("\n" + "-" * 32 + " perf-switcher " + "-" * 32 + "\n")
        print("Quiet/Balanced/Performance profile switcher for asusd")
        print("\nExample usage:\nperf-switcher --tray")
        print("\n-----\n")
        click.echo(click.get_current_context().get_help())
        return

    conf.set_path(find_config_file(config))
    setup_logger("DEBUG" if debug else conf.log_level())

    engine = build_engine(backend or conf.backend_type())

    if tray:
        from perf_switcher.gui import tray as tray_app
        from perf_switcher.notifications import notify_failure

        engine.connect_failure(notify_failure)
        conf.notifier.start()
        try:
            tray_app.main(engine, on_quit=conf.notifier.stop)
        except KeyboardInterrupt:
            engine.shutdown()
            conf.notifier.stop()
        return

    if set_profile:
        code = run_until_ready(engine, switch_to(ProfileId.from_name(set_profile)))
    elif list_profiles:
        code = run_until_ready(engine, show_list)
    else:
        code = run_until_ready(engine, show_state)
    sys.exit(code)


if __name__ == "__main__":
    main()
