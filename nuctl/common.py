"""Small helpers shared by the CLI and the integration harness."""

from __future__ import annotations

import logging
import os
import time
import typing as typ
from pathlib import Path

from .errors import RetryTimeoutError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

SOURCE_DIR_ENV = "NUCTL_SOURCE_DIR"

_logger = logging.getLogger(__name__)


def retry_until_successful(
    duration: dt.timedelta,
    interval: dt.timedelta,
    callback: cabc.Callable[[], bool],
    *,
    clock: cabc.Callable[[], float] = time.monotonic,
    sleep: cabc.Callable[[float], None] = time.sleep,
) -> None:
    """Call ``callback`` every ``interval`` until it returns True.

    The first attempt happens immediately; ``interval`` is slept between
    attempts only. The deadline is measured on ``clock`` rather than by
    counting attempts, so a slow callback uses up the window too.

    Raises:
        RetryTimeoutError: ``duration`` elapsed without a successful attempt.

    """
    deadline = clock() + duration.total_seconds()
    pause = interval.total_seconds()
    attempts = 0

    while clock() < deadline:
        attempts += 1
        if callback():
            return
        _logger.debug("Attempt %d unsuccessful, retrying in %gs", attempts, pause)
        sleep(pause)

    raise RetryTimeoutError(duration, attempts)


def get_source_dir(env: cabc.Mapping[str, str] | None = None) -> Path:
    """Return the repository root, honouring NUCTL_SOURCE_DIR when set."""
    source = os.environ if env is None else env
    if override := source.get(SOURCE_DIR_ENV):
        return Path(override)
    return Path(__file__).resolve().parent.parent
