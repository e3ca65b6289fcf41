"""Function configuration model and its YAML representation.

A configuration document has two top-level sections::

    metadata:
      name: hello
      namespace: nuclio
      labels: {team: data}
    spec:
      runtime: python:3.12
      handler: main:handler

``meta`` is accepted as an alias for ``metadata`` when reading. Empty fields
are omitted when writing so round-tripped documents stay minimal.
"""

from __future__ import annotations

import dataclasses
import io
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import FunctionConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_NAMESPACE = "nuclio"
METADATA_KEY = "metadata"
METADATA_ALIAS = "meta"
SPEC_KEY = "spec"
FUNCTIONS_KEY = "functions"

_yaml = YAML(typ="safe")
_yaml.default_flow_style = False
_yaml.explicit_start = False
_yaml.explicit_end = False
_yaml.indent(mapping=2, sequence=4, offset=2)
_yaml.sort_base_mapping_type_on_output = False


@dataclasses.dataclass
class FunctionMeta:
    """Identity of a function."""

    name: str
    namespace: str = DEFAULT_NAMESPACE
    labels: dict[str, str] = dataclasses.field(default_factory=dict)
    annotations: dict[str, str] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class FunctionSpec:
    """How a function is built and run."""

    runtime: str = ""
    handler: str = ""
    description: str = ""
    image: str = ""
    replicas: int | None = None
    env: dict[str, str] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class FunctionConfig:
    """A complete function configuration."""

    meta: FunctionMeta
    spec: FunctionSpec = dataclasses.field(default_factory=FunctionSpec)

    @classmethod
    def from_dict(
        cls,
        data: object,
        *,
        default_name: str | None = None,
    ) -> FunctionConfig:
        """Build a configuration from a decoded YAML mapping."""
        if not isinstance(data, dict):
            msg = "Function configuration must be a mapping."
            raise FunctionConfigError(msg)

        raw_meta = data.get(METADATA_KEY, data.get(METADATA_ALIAS)) or {}
        raw_spec = data.get(SPEC_KEY) or {}
        _require_mapping(raw_meta, METADATA_KEY)
        _require_mapping(raw_spec, SPEC_KEY)

        name = raw_meta.get("name") or default_name
        if not name:
            msg = "Function configuration is missing metadata.name."
            raise FunctionConfigError(msg)

        meta = FunctionMeta(
            name=str(name),
            namespace=str(raw_meta.get("namespace") or DEFAULT_NAMESPACE),
            labels=_string_mapping(raw_meta.get("labels"), "metadata.labels"),
            annotations=_string_mapping(
                raw_meta.get("annotations"), "metadata.annotations"
            ),
        )
        spec = FunctionSpec(
            runtime=str(raw_spec.get("runtime") or ""),
            handler=str(raw_spec.get("handler") or ""),
            description=str(raw_spec.get("description") or ""),
            image=str(raw_spec.get("image") or ""),
            replicas=_optional_int(raw_spec.get("replicas"), "spec.replicas"),
            env=_string_mapping(raw_spec.get("env"), "spec.env"),
        )
        return cls(meta=meta, spec=spec)

    def to_dict(self) -> dict[str, object]:
        """Return the YAML-ready mapping, omitting empty fields."""
        return {
            METADATA_KEY: _prune(dataclasses.asdict(self.meta)),
            SPEC_KEY: _prune(dataclasses.asdict(self.spec)),
        }


def _require_mapping(value: object, field: str) -> None:
    if not isinstance(value, dict):
        msg = f"Function configuration field {field!r} must be a mapping."
        raise FunctionConfigError(msg)


def _string_mapping(value: object, field: str) -> dict[str, str]:
    if value is None:
        return {}
    _require_mapping(value, field)
    return {str(key): str(item) for key, item in typ.cast(dict, value).items()}


def _optional_int(value: object, field: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(typ.cast(typ.Any, value))
    except (TypeError, ValueError) as error:
        msg = f"Function configuration field {field!r} must be an integer."
        raise FunctionConfigError(msg) from error


def _prune(values: dict[str, object]) -> dict[str, object]:
    return {key: value for key, value in values.items() if value not in ("", None, {})}


def parse_yaml(text: str) -> object:
    """Decode a single YAML document, raising FunctionConfigError on bad input."""
    try:
        return _yaml.load(text)
    except YAMLError as error:
        msg = f"Failed to parse function configuration: {error}"
        raise FunctionConfigError(msg) from error


def load_config(text: str) -> FunctionConfig:
    """Decode a single function configuration document."""
    data = parse_yaml(text)
    if data is None:
        msg = "Function configuration document is empty."
        raise FunctionConfigError(msg)
    return FunctionConfig.from_dict(data)


def load_import_document(text: str) -> list[FunctionConfig]:
    """Decode a document holding one configuration or a ``functions`` mapping."""
    data = parse_yaml(text)
    if data is None:
        msg = "Import document is empty."
        raise FunctionConfigError(msg)
    if isinstance(data, dict) and FUNCTIONS_KEY in data:
        functions = data[FUNCTIONS_KEY] or {}
        _require_mapping(functions, FUNCTIONS_KEY)
        return [
            FunctionConfig.from_dict(body, default_name=str(name))
            for name, body in functions.items()
        ]
    return [FunctionConfig.from_dict(data)]


def dump_yaml(data: object) -> str:
    """Encode ``data`` as a YAML document."""
    buffer = io.StringIO()
    _yaml.dump(data, buffer)
    return buffer.getvalue()


def dump_configs(configs: cabc.Iterable[FunctionConfig]) -> str:
    """Encode configurations as YAML, separating documents with ``---``."""
    return "---\n".join(dump_yaml(config.to_dict()) for config in configs)
