import logging
import re

from perf_switcher.errors import ParseError, UnknownProfileError
from perf_switcher.profiles import normalize_catalog
from perf_switcher.types import ProfileCatalog, ProfileId

log = logging.getLogger(__name__)

# asusctl prints e.g. "Starting version 6.2.0" before the actual output
BANNER_LINE = re.compile(r"^\s*(starting\s+)?version\b", re.IGNORECASE)
ACTIVE_LINE = re.compile(r"^\s*Active profile is\s+(\S+)\s*$", re.MULTILINE)


class ProfileListParser:
    def __init__(self, output: str):
        self.names: list[str] = []
        self._parse(output)

    def _parse(self, data: str):
        for line in data.splitlines():
            line = line.strip()
            if not line or BANNER_LINE.match(line): continue
            self.names.append(line.split()[0])

    def catalog(self) -> ProfileCatalog:
        if not self.names:
            raise ParseError("profile list output contains no profiles")
        profiles = []
        for name in self.names:
            profile = ProfileId.from_name(name)
            if profile is None: log.debug("Dropping unknown profile name: %s", name)
            profiles.append(profile)
        return normalize_catalog(profiles)


def parse_profile_list(output: str) -> ProfileCatalog:
    return ProfileListParser(output).catalog()


def parse_active_profile(output: str) -> ProfileId:
    match = ACTIVE_LINE.search(output)
    if match is None:
        raise ParseError(f"no 'Active profile is' line in output: {output.strip()!r}")
    profile = ProfileId.from_name(match.group(1))
    if profile is None:
        raise UnknownProfileError(f"unknown active profile: {match.group(1)}")
    return profile
