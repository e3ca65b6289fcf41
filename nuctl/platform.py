"""Deployment platforms that nuctl commands operate against."""

from __future__ import annotations

import dataclasses
import logging
import typing as typ
from pathlib import Path

from .errors import (
    FunctionConfigError,
    FunctionNotFoundError,
    PlatformNotSupportedError,
    PlatformStateError,
)
from .functionconfig import FunctionConfig, dump_yaml, parse_yaml

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PLATFORM_ENV = "NUCTL_PLATFORM"
LOCAL_STATE_DIR_ENV = "NUCTL_LOCAL_STATE_DIR"
PLATFORM_LOCAL = "local"
PLATFORM_AUTO = "auto"
DEFAULT_STATE_DIRNAME = ".nuctl/local-platform"

STATE_READY = "ready"
STATE_IMPORTED = "imported"

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class FunctionRecord:
    """A stored function configuration and its current state."""

    config: FunctionConfig
    state: str

    @property
    def name(self) -> str:
        """Return the function name."""
        return self.config.meta.name

    @property
    def namespace(self) -> str:
        """Return the function namespace."""
        return self.config.meta.namespace


class Platform(typ.Protocol):
    """Operations every platform supports."""

    kind: str

    def create_function(self, config: FunctionConfig, state: str) -> FunctionRecord:
        """Create or replace a function."""
        ...

    def get_functions(
        self, namespace: str, name: str | None = None
    ) -> list[FunctionRecord]:
        """Return functions in ``namespace``, optionally a single one by name."""
        ...

    def delete_function(self, namespace: str, name: str) -> None:
        """Remove a function."""
        ...


def _checked_component(value: str, field: str) -> str:
    """Return ``value`` if it is safe to use as a single path component."""
    if value in {"", ".", ".."} or "/" in value or "\\" in value:
        msg = f"Invalid function {field}: {value!r}."
        raise FunctionConfigError(msg)
    return value


class LocalPlatform:
    """Keep function records as YAML files under a state directory.

    Each function lives at ``<state_dir>/<namespace>/<name>.yaml`` holding a
    ``config`` mapping and a ``status`` mapping with the function's state.
    """

    kind = PLATFORM_LOCAL

    def __init__(self, state_dir: Path) -> None:
        """Remember where records are kept; directories are created lazily."""
        self.state_dir = Path(state_dir)

    def _record_path(self, namespace: str, name: str) -> Path:
        filename = _checked_component(name, "name") + ".yaml"
        return self._namespace_dir(namespace) / filename

    def _namespace_dir(self, namespace: str) -> Path:
        return self.state_dir / _checked_component(namespace, "namespace")

    def create_function(self, config: FunctionConfig, state: str) -> FunctionRecord:
        """Write the function record, replacing an existing one."""
        path = self._record_path(config.meta.namespace, config.meta.name)
        document = {"config": config.to_dict(), "status": {"state": state}}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dump_yaml(document), encoding="utf-8")
        except OSError as error:
            msg = f"Failed to store function record {path}: {error}"
            raise PlatformStateError(msg) from error
        _logger.debug(
            "Stored function %s/%s in state %s",
            config.meta.namespace,
            config.meta.name,
            state,
        )
        return FunctionRecord(config=config, state=state)

    def get_functions(
        self, namespace: str, name: str | None = None
    ) -> list[FunctionRecord]:
        """Return stored functions, raising when a named function is missing."""
        if name is not None:
            path = self._record_path(namespace, name)
            if not path.is_file():
                raise FunctionNotFoundError(namespace, name)
            return [self._read_record(path)]

        directory = self._namespace_dir(namespace)
        if not directory.is_dir():
            return []
        return [self._read_record(path) for path in sorted(directory.glob("*.yaml"))]

    def delete_function(self, namespace: str, name: str) -> None:
        """Delete the function record."""
        path = self._record_path(namespace, name)
        if not path.is_file():
            raise FunctionNotFoundError(namespace, name)
        try:
            path.unlink()
        except OSError as error:
            msg = f"Failed to delete function record {path}: {error}"
            raise PlatformStateError(msg) from error
        _logger.debug("Deleted function %s/%s", namespace, name)

    @staticmethod
    def _read_record(path: Path) -> FunctionRecord:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as error:
            msg = f"Failed to read function record {path}: {error}"
            raise PlatformStateError(msg) from error
        document = parse_yaml(text)
        if not isinstance(document, dict):
            msg = f"Function record {path} is corrupt."
            raise FunctionConfigError(msg)
        status = document.get("status") or {}
        return FunctionRecord(
            config=FunctionConfig.from_dict(document.get("config")),
            state=str(status.get("state") or STATE_READY),
        )


def default_state_dir(env: cabc.Mapping[str, str]) -> Path:
    """Return the local platform's state directory."""
    if override := env.get(LOCAL_STATE_DIR_ENV):
        return Path(override)
    return Path.home() / DEFAULT_STATE_DIRNAME


def create_platform(kind: str | None, env: cabc.Mapping[str, str]) -> Platform:
    """Create the platform named by ``kind``; ``auto`` resolves to local."""
    resolved = (kind or PLATFORM_AUTO).strip().lower()
    if resolved in {PLATFORM_LOCAL, PLATFORM_AUTO}:
        return LocalPlatform(default_state_dir(env))
    raise PlatformNotSupportedError(resolved)
