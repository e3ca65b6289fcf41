"""Shared exception types for the nuctl CLI and its test harness."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


class NuctlError(RuntimeError):
    """Base error for nuctl CLI operations."""


class CommandError(NuctlError):
    """Raised when the command line cannot be parsed or dispatched."""


class FunctionConfigError(NuctlError):
    """Raised when a function configuration document is invalid."""


class FunctionNotFoundError(NuctlError):
    """Raised when a named function does not exist on the platform."""

    def __init__(self, namespace: str, name: str) -> None:
        """Initialise the error with the missing function's identity."""
        super().__init__(f"Function {name!r} not found in namespace {namespace!r}.")


class PlatformNotSupportedError(NuctlError):
    """Raised when NUCTL_PLATFORM names a platform nuctl cannot create."""

    def __init__(self, kind: str) -> None:
        """Initialise the error with the rejected platform kind."""
        super().__init__(f"Can't create platform - unsupported: {kind!r}.")


class PlatformStateError(NuctlError):
    """Raised when the platform cannot read or write its stored functions."""


class CommandRunnerError(NuctlError):
    """Raised when a shell command cannot be run or exits unsuccessfully."""


class SuiteSetupError(NuctlError):
    """Raised when the integration suite cannot be set up or torn down."""


class RetryTimeoutError(NuctlError):
    """Raised when a polled operation never reached the expected outcome."""

    def __init__(self, duration: dt.timedelta, attempts: int) -> None:
        """Record how long we waited and how often we tried."""
        self.duration = duration
        self.attempts = attempts
        super().__init__(
            f"Timed out waiting until successful after {attempts} attempt(s) "
            f"in {duration.total_seconds():g}s."
        )
