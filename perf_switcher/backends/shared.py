#!/usr/bin/env python3
from abc import ABC, abstractmethod
from typing import Any, Callable

from perf_switcher.types import ProfileId

ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class ProfileBackend(ABC):
    """
    Common interface of the asusd backends.

    Every primitive returns immediately and reports its outcome later on the
    main loop through exactly one of the two callbacks. Failures are handed
    to on_error as BackendError instances.
    """

    name = ""

    @abstractmethod
    def list_supported(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        """Report the supported profiles as a ProfileCatalog."""

    @abstractmethod
    def get_current(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        """Report the active ProfileId."""

    @abstractmethod
    def set_current(self, profile: ProfileId, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        """Switch to profile and report it back on success."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
