import logging
from dataclasses import replace
from typing import Callable, List, Optional

from perf_switcher.errors import ReentrantMutationError
from perf_switcher.types import ErrorKind, ProfileCatalog, ProfileId, SyncState

log = logging.getLogger(__name__)

Observer = Callable[[SyncState], None]


class ProfileStateStore:
    """
    Holds the synchronized profile state and notifies observers on change.

    All mutations happen on the main loop, one at a time. Observers run
    synchronously in registration order before the mutating call returns and
    must not mutate the store themselves.
    """

    def __init__(self) -> None:
        self._state = SyncState()
        self._observers: List[Observer] = []
        self._notifying = False

    def current(self) -> SyncState:
        return self._state

    def connect(self, observer: Observer) -> bool:
        """
        Register an observer called with the new SyncState on every change.

        :return: True if registration was successful
        """
        if observer in self._observers:
            return False
        self._observers.append(observer)
        return True

    def disconnect(self, observer: Observer) -> bool:
        """
        Unregister an observer.

        :return: True if the observer was found and removed, False otherwise
        """
        if observer in self._observers:
            self._observers.remove(observer)
            return True
        return False

    def clear_observers(self) -> None:
        self._observers.clear()

    def set_active(self, profile: ProfileId) -> bool:
        """
        Set the active profile.

        :return: True if the state changed, False if profile was already active
        :raises ValueError: if profile is not a ProfileId
        """
        if not isinstance(profile, ProfileId):
            raise ValueError(f"Invalid profile: {profile!r}. Must be one of {[p.value for p in ProfileId]}")
        if profile == self._state.active_profile:
            return False
        log.info("Active profile: %s", profile.value)
        return self._commit(replace(self._state, active_profile=profile))

    def set_catalog(self, catalog: ProfileCatalog) -> bool:
        """
        Set the supported profiles.

        :return: True if the state changed
        :raises ValueError: if catalog is empty or holds unknown values
        """
        catalog = tuple(catalog)
        if not catalog:
            raise ValueError("Catalog must contain at least one profile")
        if not all(isinstance(profile, ProfileId) for profile in catalog):
            raise ValueError(f"Catalog contains unknown profiles: {catalog!r}")
        if catalog == self._state.catalog:
            return False
        log.info("Supported profiles: %s", ", ".join(p.value for p in catalog))
        return self._commit(replace(self._state, catalog=catalog))

    def set_last_error(self, kind: Optional[ErrorKind]) -> bool:
        if kind == self._state.last_error:
            return False
        return self._commit(replace(self._state, last_error=kind))

    def _commit(self, state: SyncState) -> bool:
        if self._notifying:
            raise ReentrantMutationError("Store mutated from within an observer callback")

        self._state = state
        self._notifying = True
        try:
            for observer in list(self._observers):
                try:
                    observer(state)
                except Exception as e:
                    log.error("Error in state observer %s: %s", getattr(observer, "__name__", observer), e)
        finally:
            self._notifying = False
        return True
