from perf_switcher.types import ErrorKind


class PerfSwitcherError(Exception):
    pass


class BackendError(PerfSwitcherError):
    """
    A recoverable failure of a backend primitive.

    Every backend error is retried the same way, the kind only records how
    the failure was detected.
    """

    kind: ErrorKind = ErrorKind.TRANSPORT


class TransportError(BackendError):
    """Bus unreachable, tool missing or nonzero exit status."""

    kind = ErrorKind.TRANSPORT


class ParseError(BackendError):
    """Output or value that can't be decoded to a profile."""

    kind = ErrorKind.PARSE


class UnknownProfileError(BackendError):
    """A well formed profile name outside of the known profiles."""

    kind = ErrorKind.UNKNOWN_PROFILE


class ProfileTableError(PerfSwitcherError):
    pass


class ReentrantMutationError(PerfSwitcherError, RuntimeError):
    pass
