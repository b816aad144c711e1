from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple


class ProfileId(Enum):
    QUIET = "Quiet"
    BALANCED = "Balanced"
    PERFORMANCE = "Performance"

    @classmethod
    def from_name(cls, name: str) -> Optional["ProfileId"]:
        """Case-insensitive lookup by display name, None when unknown."""
        if not isinstance(name, str):
            return None
        wanted = name.strip().lower()
        for profile in cls:
            if profile.value.lower() == wanted:
                return profile
        return None

    def __str__(self) -> str:
        return self.value


ProfileCatalog = Tuple[ProfileId, ...]

ALL_PROFILES: ProfileCatalog = tuple(ProfileId)
DEFAULT_PROFILE = ProfileId.BALANCED


class ErrorKind(Enum):
    TRANSPORT = "transport"
    PARSE = "parse"
    UNKNOWN_PROFILE = "unknown_profile"


@dataclass(frozen=True)
class SyncState:
    active_profile: Optional[ProfileId] = None
    catalog: ProfileCatalog = ()
    last_error: Optional[ErrorKind] = None


@dataclass
class Subscription:
    """Handle of an established push subscription."""
    id: int
    cancel: Callable[[], None]
