#!/usr/bin/env python3
"""
Profile metadata and the asusd integer code table.

asusd reports the platform profile as an unsigned integer. The mapping was
confirmed by switching profiles and reading PlatformProfile back.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional

from perf_switcher.errors import ProfileTableError
from perf_switcher.types import ALL_PROFILES, ProfileCatalog, ProfileId

log = logging.getLogger(__name__)

# Mapping from profiles to asusd PlatformProfile values
PROFILE_TO_CODE: Dict[ProfileId, int] = {
    ProfileId.BALANCED: 0,
    ProfileId.PERFORMANCE: 1,
    ProfileId.QUIET: 2,
}

# Mapping from asusd PlatformProfile values to profiles
CODE_TO_PROFILE: Dict[int, ProfileId] = {code: profile for profile, code in PROFILE_TO_CODE.items()}

# Icon shown in the status menu per profile
PROFILE_ICONS = {
    ProfileId.QUIET: "power-profile-power-saver-symbolic",
    ProfileId.BALANCED: "power-profile-balanced-symbolic",
    ProfileId.PERFORMANCE: "power-profile-performance-symbolic",
}


def check_code_table(
    forward: Mapping[ProfileId, int] = PROFILE_TO_CODE,
    reverse: Mapping[int, ProfileId] = CODE_TO_PROFILE,
) -> None:
    """
    Verify that the forward and reverse code tables agree.

    :raises ProfileTableError: if a profile has no code, two profiles share a
        code, or an entry has no matching entry in the other direction
    """
    missing = [profile.value for profile in ProfileId if profile not in forward]
    if missing:
        raise ProfileTableError(f"No code defined for profiles: {', '.join(missing)}")

    if len(set(forward.values())) != len(forward):
        raise ProfileTableError(f"Duplicate codes in profile table: {dict(forward)}")

    for profile, code in forward.items():
        if reverse.get(code) is not profile:
            raise ProfileTableError(f"Code {code} of {profile.value} has no matching reverse entry")

    for code, profile in reverse.items():
        if forward.get(profile) != code:
            raise ProfileTableError(f"Reverse entry {code} -> {profile.value} has no matching forward entry")


def decode_code(value) -> Optional[ProfileId]:
    """Decode an asusd integer, None when the value is not a known code."""
    # bool is an int subclass, True must not turn into Performance
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return CODE_TO_PROFILE.get(value)


def encode_profile(profile: ProfileId) -> int:
    if profile not in PROFILE_TO_CODE:
        raise ValueError(f"Invalid profile: {profile}. Must be one of {list(PROFILE_TO_CODE)}")
    return PROFILE_TO_CODE[profile]


def normalize_catalog(profiles: Iterable[Optional[ProfileId]]) -> ProfileCatalog:
    """Drop unknown entries and duplicates, keep the reported order."""
    catalog = []
    for profile in profiles:
        if isinstance(profile, ProfileId) and profile not in catalog:
            catalog.append(profile)
    return tuple(catalog)


def decode_catalog(values: Iterable) -> ProfileCatalog:
    catalog = []
    for value in values:
        profile = decode_code(value)
        if profile is None:
            log.debug("Dropping unknown profile code: %r", value)
            continue
        catalog.append(profile)
    return normalize_catalog(catalog)


def resolve_catalog(catalog: ProfileCatalog) -> ProfileCatalog:
    """An empty catalog falls back to every built-in profile."""
    catalog = normalize_catalog(catalog)
    return catalog if catalog else ALL_PROFILES
