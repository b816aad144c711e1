"""
Pytest configuration and shared fixtures.

The fakes below replace the GLib main loop, asusd and the D-Bus signal so the
sync core can be driven step by step without a bus.
"""

from itertools import count
from typing import Callable, Dict, List

import pytest

from perf_switcher.backends.shared import ProfileBackend
from perf_switcher.errors import TransportError
from perf_switcher.modules.retry import RetryExecutor
from perf_switcher.modules.state_store import ProfileStateStore
from perf_switcher.modules.subscriber import ChangeSubscriber
from perf_switcher.modules.sync_engine import SyncEngine
from perf_switcher.types import ALL_PROFILES, ProfileId, Subscription


class FakeScheduler:
    """Timers that only fire when the test says so."""

    def __init__(self) -> None:
        self._ids = count(1)
        self.timers: Dict[int, Callable[[], None]] = {}
        self.delays: List[int] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self.timers[handle] = callback
        self.delays.append(delay_ms)
        return handle

    def cancel(self, handle: int) -> None:
        self.timers.pop(handle, None)

    def fire_next(self) -> bool:
        if not self.timers:
            return False
        handle = min(self.timers)
        self.timers.pop(handle)()
        return True

    def run_all(self, limit: int = 100) -> None:
        while limit and self.fire_next():
            limit -= 1


class FakeBackend(ProfileBackend):
    """
    Backend answering from scripted outcomes.

    An outcome that is an exception goes to on_error, anything else to
    on_result. Without a scripted outcome the backend answers with its
    current catalog/profile. With deferred=True completions wait in
    pending until complete_next() is called.
    """

    name = "fake"

    def __init__(self, catalog=ALL_PROFILES, current=ProfileId.BALANCED) -> None:
        self.catalog = catalog
        self.current = current
        self.calls: list = []
        self.outcomes: Dict[str, list] = {"list_supported": [], "get_current": [], "set_current": []}
        self.deferred = False
        self.pending: List[Callable[[], None]] = []

    def script(self, operation: str, *outcomes) -> None:
        self.outcomes[operation].extend(outcomes)

    def fail(self, operation: str, times: int) -> None:
        self.script(operation, *(TransportError(f"{operation} failed") for _ in range(times)))

    def complete_next(self) -> None:
        self.pending.pop(0)()

    def _complete(self, operation, default, on_result, on_error, on_success=None) -> None:
        queue = self.outcomes[operation]
        outcome = queue.pop(0) if queue else default

        def done() -> None:
            if isinstance(outcome, Exception):
                on_error(outcome)
                return
            if on_success is not None:
                on_success(outcome)
            on_result(outcome)

        if self.deferred:
            self.pending.append(done)
        else:
            done()

    def list_supported(self, on_result, on_error) -> None:
        self.calls.append(("list_supported",))
        self._complete("list_supported", self.catalog, on_result, on_error)

    def get_current(self, on_result, on_error) -> None:
        self.calls.append(("get_current",))
        self._complete("get_current", self.current, on_result, on_error)

    def set_current(self, profile, on_result, on_error) -> None:
        self.calls.append(("set_current", profile))
        self._complete("set_current", profile, on_result, on_error, on_success=lambda p: setattr(self, "current", p))

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


class FakeSource:
    """Push source standing in for the PropertiesChanged signal."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.callbacks: list = []
        self.connects = 0
        self.cancels = 0

    def connect(self, callback) -> Subscription:
        self.connects += 1
        if self.fail:
            raise TransportError("system bus unavailable")
        self.callbacks.append(callback)

        def cancel() -> None:
            self.cancels += 1
            self.callbacks.remove(callback)

        return Subscription(id=self.connects, cancel=cancel)

    def emit(self, interface: str, changed: dict) -> None:
        for callback in list(self.callbacks):
            callback(interface, changed, [])


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> ProfileStateStore:
    return ProfileStateStore()


@pytest.fixture
def retry(scheduler) -> RetryExecutor:
    return RetryExecutor(scheduler)


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def subscriber(store, source) -> ChangeSubscriber:
    return ChangeSubscriber(store, source)


@pytest.fixture
def engine(backend, retry, subscriber, store) -> SyncEngine:
    return SyncEngine(backend, retry, subscriber=subscriber, store=store)


@pytest.fixture
def failures(engine) -> list:
    """Failure notifications emitted by the engine."""
    received = []
    engine.connect_failure(lambda profile, message: received.append((profile, message)))
    return received


@pytest.fixture
def notifications(store) -> list:
    """Every SyncState pushed to store observers."""
    received = []
    store.connect(received.append)
    return received
