import logging
from typing import Callable, List, Optional

from perf_switcher.backends.shared import ProfileBackend
from perf_switcher.errors import BackendError
from perf_switcher.globals import FAILURE_MESSAGE
from perf_switcher.modules.retry import RetryContext, RetryExecutor
from perf_switcher.modules.state_store import Observer, ProfileStateStore
from perf_switcher.modules.subscriber import ChangeSubscriber
from perf_switcher.profiles import check_code_table, resolve_catalog
from perf_switcher.types import ALL_PROFILES, DEFAULT_PROFILE, ErrorKind, ProfileId, SyncState

log = logging.getLogger(__name__)

FailureListener = Callable[[ProfileId, str], None]


def _error_kind(error: Exception) -> ErrorKind:
    return error.kind if isinstance(error, BackendError) else ErrorKind.TRANSPORT


class SyncEngine:
    """
    Keeps the local profile state in sync with asusd.

    On start the supported profiles and the active profile are fetched, then
    the change subscription is established. Profile requests go through the
    retry executor and update the store once the backend confirmed them.
    Nothing here blocks: every step continues from a main loop callback.
    """

    def __init__(
        self,
        backend: ProfileBackend,
        retry: RetryExecutor,
        subscriber: Optional[ChangeSubscriber] = None,
        store: Optional[ProfileStateStore] = None,
        default_profile: ProfileId = DEFAULT_PROFILE,
    ):
        self.backend = backend
        self.store = store if store is not None else ProfileStateStore()
        self._retry = retry
        self._subscriber = subscriber
        self._default_profile = default_profile
        self._failure_listeners: List[FailureListener] = []
        # at most one discovery and one switch run at a time
        self._discovery: Optional[RetryContext] = None
        self._switch: Optional[RetryContext] = None
        self._switch_target: Optional[ProfileId] = None
        self._started = False
        self._ready = False
        self._shut_down = False

    @property
    def ready(self) -> bool:
        """True once discovery finished and an active profile is known."""
        return self._ready and not self._shut_down

    def current(self) -> SyncState:
        return self.store.current()

    def connect(self, observer: Observer) -> bool:
        return self.store.connect(observer)

    def connect_failure(self, listener: FailureListener) -> None:
        """Register listener(profile, message) for failed profile switches."""
        if listener not in self._failure_listeners:
            self._failure_listeners.append(listener)

    # ==================== Startup ====================

    def start(self) -> None:
        if self._started:
            log.warning("Sync engine already started")
            return
        if self._shut_down:
            log.warning("Sync engine was shut down, not starting")
            return
        check_code_table()
        self._started = True
        log.info("Starting profile sync using %s backend", self.backend.name)
        self._discover(on_done=self._subscribe)

    def reset(self) -> None:
        """
        Fetch the supported and active profiles again.

        A discovery still in flight is dropped first. The change subscription
        is kept, or established if the dropped discovery never got that far.
        """
        if not self._started or self._shut_down:
            log.warning("Sync engine not running, ignoring reset")
            return
        if self._discovery is not None:
            self._retry.cancel(self._discovery)
        self._ready = False
        self._discover(on_done=self._subscribe)

    def _discover(self, on_done: Optional[Callable[[], None]]) -> None:
        def catalog_fetched(catalog) -> None:
            if self._shut_down:
                return
            self.store.set_last_error(None)
            if not catalog:
                log.warning("Backend reported no usable profiles, using built-in profiles")
            self.store.set_catalog(resolve_catalog(catalog))
            self._fetch_current(on_done)

        def catalog_failed(error: Exception) -> None:
            if self._shut_down:
                return
            log.error("Failed to fetch supported profiles: %s", error)
            self.store.set_last_error(_error_kind(error))
            self.store.set_catalog(ALL_PROFILES)
            self._fetch_current(on_done)

        self._track_discovery(
            self._retry.run("list supported profiles", self.backend.list_supported, catalog_fetched, catalog_failed)
        )

    def _fetch_current(self, on_done: Optional[Callable[[], None]]) -> None:
        def current_fetched(profile) -> None:
            if self._shut_down:
                return
            if not isinstance(profile, ProfileId):
                log.error("Unknown profile value: %r, using %s", profile, self._default_profile.value)
                profile = self._default_profile
            elif profile not in self.store.current().catalog:
                log.warning("Active profile %s is not in the supported profiles", profile.value)
            self.store.set_last_error(None)
            self._finish_discovery(profile, on_done)

        def current_failed(error: Exception) -> None:
            if self._shut_down:
                return
            log.error("Failed to fetch current profile: %s", error)
            self.store.set_last_error(_error_kind(error))
            self._finish_discovery(self._default_profile, on_done)

        self._track_discovery(
            self._retry.run("get current profile", self.backend.get_current, current_fetched, current_failed)
        )

    def _finish_discovery(self, profile: ProfileId, on_done: Optional[Callable[[], None]]) -> None:
        self.store.set_active(profile)
        self._ready = True
        if on_done is not None:
            on_done()

    def _subscribe(self) -> None:
        if self._subscriber is not None:
            self._subscriber.subscribe()

    # ==================== Requests ====================

    def request_profile(self, target: ProfileId) -> bool:
        """
        Ask the backend to switch to target.

        :return: True if a backend request was issued, False if target is
            already active or the request was refused
        :raises ValueError: if target is not a ProfileId
        """
        if not isinstance(target, ProfileId):
            raise ValueError(f"Invalid profile: {target!r}. Must be one of {[p.value for p in ProfileId]}")

        state = self.store.current()
        if target == state.active_profile:
            # going back to the active profile drops a switch still retrying
            self._cancel_switch()
            return False
        if self._shut_down:
            log.warning("Sync engine was shut down, ignoring request for %s", target.value)
            return False
        if state.catalog and target not in state.catalog:
            log.warning("Profile %s is not supported, ignoring request", target.value)
            return False
        if self._switch is not None and self._switch.active and self._switch_target == target:
            log.debug("Switch to %s already in progress", target.value)
            return False

        self._cancel_switch()
        log.info("Switching to %s profile", target.value)

        def switched(_) -> None:
            if self._shut_down:
                return
            self.store.set_last_error(None)
            self.store.set_active(target)

        def switch_failed(error: Exception) -> None:
            if self._shut_down:
                return
            self.store.set_last_error(_error_kind(error))
            self._report_failure(target)

        self._switch_target = target
        self._switch = self._retry.run(
            f"set profile {target.value}",
            lambda on_result, on_error: self.backend.set_current(target, on_result, on_error),
            switched,
            switch_failed,
        )
        return True

    def _cancel_switch(self) -> None:
        """Drop the pending switch, the latest request wins."""
        if self._switch is not None and self._switch.active:
            log.info("Cancelling switch to %s profile", self._switch_target.value)
            self._retry.cancel(self._switch)
        self._switch = None
        self._switch_target = None

    def _track_discovery(self, ctx: RetryContext) -> None:
        # a discovery step that completed synchronously has already tracked the next one
        if ctx.active:
            self._discovery = ctx

    def _report_failure(self, profile: ProfileId) -> None:
        message = FAILURE_MESSAGE.format(profile=profile.value)
        log.error(message)
        for listener in list(self._failure_listeners):
            try:
                listener(profile, message)
            except Exception as e:
                log.error("Error in failure listener %s: %s", getattr(listener, "__name__", listener), e)

    # ==================== Shutdown ====================

    def shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True
        self._retry.cancel_all()
        if self._subscriber is not None:
            self._subscriber.unsubscribe()
        self.store.clear_observers()
        self._failure_listeners.clear()
        log.info("Profile sync stopped")
