"""Command line entry points for nuctl."""

from __future__ import annotations

import logging
import os
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, CycloptsError, Parameter

from . import version
from .errors import CommandError, FunctionConfigError, NuctlError
from .functionconfig import (
    DEFAULT_NAMESPACE,
    FunctionConfig,
    FunctionMeta,
    dump_configs,
    load_config,
    load_import_document,
)
from .platform import (
    PLATFORM_ENV,
    STATE_IMPORTED,
    STATE_READY,
    FunctionRecord,
    Platform,
    create_platform,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

OutputFormat = typ.Literal["text", "yaml"]

PROGRAM_NAME = "nuctl"
OUTPUT_TEXT = "text"
OUTPUT_YAML = "yaml"
TABLE_HEADER = ("NAMESPACE", "NAME", "STATE", "RUNTIME", "HANDLER")
ERROR_NAME_REQUIRED = "Function name is required; pass it or set metadata.name."
NO_FUNCTIONS_FOUND = "No functions found"

_logger = logging.getLogger(__name__)


class RootCommandeer:
    """Own the nuctl command tree and the streams it reads and writes.

    A commandeer holds per-invocation state (streams, environment), so callers
    that run nuctl repeatedly should build a fresh instance for every call.
    """

    def __init__(self) -> None:
        """Build the command tree bound to the process streams."""
        self._out: typ.IO[str] = sys.stdout
        self._err: typ.IO[str] = sys.stderr
        self._in: typ.IO[str] = sys.stdin
        self._env: dict[str, str] = {}
        self.app = self._build_app()

    def set_out(self, stream: typ.IO[str]) -> None:
        """Send command output to ``stream``."""
        self._out = stream

    def set_err(self, stream: typ.IO[str]) -> None:
        """Send error messages to ``stream``."""
        self._err = stream

    def set_in(self, stream: typ.IO[str]) -> None:
        """Read command input (e.g. import documents) from ``stream``."""
        self._in = stream

    def execute(
        self,
        argv: cabc.Sequence[str] | None = None,
        env: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Parse ``argv`` and run the selected command.

        Args:
            argv: Full argument vector; ``argv[0]`` is the program name.
                Defaults to ``sys.argv``.
            env: Environment the command resolves its platform from.
                Defaults to ``os.environ``.

        Raises:
            NuctlError: The command line was invalid or the command failed.
                The message is also written to the error stream.

        """
        args = list(sys.argv if argv is None else argv)
        self._env = dict(os.environ if env is None else env)

        try:
            try:
                command, bound, *_ = self.app.parse_args(
                    args[1:],
                    print_error=False,
                    exit_on_error=False,
                )
            except CycloptsError as error:
                raise CommandError(str(error)) from error
            command(*bound.args, **bound.kwargs)
        except NuctlError as error:
            self._err.write(f"Error: {error}\n")
            self._err.flush()
            raise

    def _platform(self) -> Platform:
        platform = create_platform(self._env.get(PLATFORM_ENV), self._env)
        _logger.debug("Using platform %s", platform.kind)
        return platform

    def _write(self, text: str) -> None:
        self._out.write(text)
        if not text.endswith("\n"):
            self._out.write("\n")
        self._out.flush()

    def _build_app(self) -> App:
        app = App(name=PROGRAM_NAME, help="Manage nuclio functions.")
        get_app = App(name="get", help="Display resource information.")
        import_app = App(name="import", help="Import resource configurations.")
        delete_app = App(name="delete", help="Delete resources.")

        @app.command()
        def deploy(
            name: str | None = None,
            *,
            file: typ.Annotated[str | None, Parameter(name="--file")] = None,
            runtime: str | None = None,
            handler: str | None = None,
            description: str | None = None,
            image: str | None = None,
            namespace: str | None = None,
        ) -> None:
            """Deploy a function from flags and an optional configuration file."""
            config = self._config_from_file(file, name)
            if name:
                config.meta.name = name
            if namespace:
                config.meta.namespace = namespace
            overrides = {
                "runtime": runtime,
                "handler": handler,
                "description": description,
                "image": image,
            }
            for field, value in overrides.items():
                if value:
                    setattr(config.spec, field, value)
            if not config.meta.name:
                raise CommandError(ERROR_NAME_REQUIRED)

            self._platform().create_function(config, STATE_READY)
            self._write(f"Function deployed: {config.meta.name}")

        @get_app.command(name="function")
        def get_function(
            name: str | None = None,
            *,
            namespace: str = DEFAULT_NAMESPACE,
            output: typ.Annotated[
                OutputFormat, Parameter(name=["--output", "-o"])
            ] = OUTPUT_TEXT,
        ) -> None:
            """Display one function, or every function in the namespace."""
            records = self._platform().get_functions(namespace, name)
            if output == OUTPUT_YAML:
                if records:
                    self._write(dump_configs(record.config for record in records))
                return
            if not records:
                self._write(NO_FUNCTIONS_FOUND)
                return
            self._write(render_function_table(records))

        @import_app.command(name="function")
        def import_function(
            *,
            file: typ.Annotated[str | None, Parameter(name="--file")] = None,
            namespace: str | None = None,
        ) -> None:
            """Import function configurations from a file or standard input."""
            text = _read_text(file) if file else self._in.read()
            platform = self._platform()
            for config in load_import_document(text):
                if namespace:
                    config.meta.namespace = namespace
                platform.create_function(config, STATE_IMPORTED)
                self._write(f"Function imported: {config.meta.name}")

        @delete_app.command(name="function")
        def delete_function(
            name: str,
            *,
            namespace: str = DEFAULT_NAMESPACE,
        ) -> None:
            """Delete a function."""
            self._platform().delete_function(namespace, name)
            self._write(f"Function deleted: {name}")

        @app.command(name="version")
        def show_version() -> None:
            """Display the client version."""
            self._write(version.get().render())

        app.command(get_app)
        app.command(import_app)
        app.command(delete_app)
        return app

    def _config_from_file(self, file: str | None, name: str | None) -> FunctionConfig:
        if not file:
            return FunctionConfig(meta=FunctionMeta(name=name or ""))
        return load_config(_read_text(file))


def _read_text(file: str) -> str:
    try:
        return Path(file).read_text(encoding="utf-8")
    except OSError as error:
        msg = f"Failed to read {file!r}: {error}"
        raise FunctionConfigError(msg) from error


def render_function_table(records: cabc.Sequence[FunctionRecord]) -> str:
    """Render records as a left-aligned table with a header row."""
    rows = [TABLE_HEADER]
    rows.extend(
        (
            record.namespace,
            record.name,
            record.state,
            record.config.spec.runtime,
            record.config.spec.handler,
        )
        for record in records
    )
    widths = [max(len(row[column]) for row in rows) for column in range(len(TABLE_HEADER))]
    lines = [
        "  ".join(
            cell.ljust(width) for cell, width in zip(row, widths, strict=True)
        ).rstrip()
        for row in rows
    ]
    return "\n".join(lines)


def main(argv: list[str] | tuple[str, ...] | None = None) -> int:
    """Entry point for the nuctl CLI."""
    commandeer = RootCommandeer()
    try:
        commandeer.execute(None if argv is None else [PROGRAM_NAME, *argv])
    except NuctlError:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
