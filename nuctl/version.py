"""Client version information populated from the environment."""

from __future__ import annotations

import dataclasses
import os
import platform
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_LABEL = "latest"
UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True)
class Info:
    """Build identity reported by `nuctl version`."""

    label: str = UNKNOWN
    git_commit: str = UNKNOWN
    os: str = UNKNOWN
    arch: str = UNKNOWN

    def render(self) -> str:
        """Return the human-readable version block."""
        return (
            "Client version:\n"
            f'"Label: {self.label}, Git commit: {self.git_commit}, '
            f'OS: {self.os}, Arch: {self.arch}"'
        )


_info = Info()


def set_from_env(env: cabc.Mapping[str, str] | None = None) -> Info:
    """Populate version info from NUCTL_* variables so no build step is needed."""
    global _info  # noqa: PLW0603

    source = os.environ if env is None else env
    _info = Info(
        label=source.get("NUCTL_LABEL") or DEFAULT_LABEL,
        git_commit=source.get("NUCTL_GIT_COMMIT") or UNKNOWN,
        os=source.get("NUCTL_OS") or platform.system().lower(),
        arch=source.get("NUCTL_ARCH") or platform.machine().lower() or UNKNOWN,
    )
    return _info


def get() -> Info:
    """Return the current version info."""
    return _info
