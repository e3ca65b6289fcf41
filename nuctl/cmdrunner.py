"""Run shell commands and collect their output."""

from __future__ import annotations

import dataclasses
import shutil
import subprocess
import typing as typ

from .errors import CommandRunnerError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import logging
    from pathlib import Path

DEFAULT_SHELL = "/bin/sh"


@dataclasses.dataclass(frozen=True)
class RunResult:
    """Outcome of a single shell command."""

    output: str
    stderr: str
    exit_code: int


class ShellRunner:
    """Execute command strings through ``<shell> -c``."""

    def __init__(self, logger: logging.Logger, shell: str | None = None) -> None:
        """Resolve the shell binary, failing early when it is unavailable."""
        requested = shell or DEFAULT_SHELL
        resolved = shutil.which(requested)
        if resolved is None:
            msg = f"Shell {requested!r} was not found."
            raise CommandRunnerError(msg)
        self._logger = logger
        self.shell = resolved

    def run(
        self,
        command: str,
        *,
        cwd: Path | None = None,
        env: cabc.Mapping[str, str] | None = None,
        check: bool = True,
    ) -> RunResult:
        """Run ``command`` and return its output.

        Args:
            command: Command line interpreted by the shell.
            cwd: Working directory for the command.
            env: Complete environment for the child; inherits ours when None.
            check: Raise CommandRunnerError on a non-zero exit code.

        Returns:
            The captured stdout, stderr and exit code.

        """
        self._logger.debug("Executing command: %s", command)
        try:
            completed = subprocess.run(  # noqa: S603
                [self.shell, "-c", command],
                capture_output=True,
                text=True,
                cwd=None if cwd is None else str(cwd),
                env=None if env is None else dict(env),
                check=False,
            )
        except OSError as error:
            msg = f"Failed to execute {command!r}: {error}"
            raise CommandRunnerError(msg) from error

        result = RunResult(
            output=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )
        self._logger.debug(
            "Command executed (exit_code=%d): %s", result.exit_code, command
        )
        if check and result.exit_code != 0:
            detail = result.stderr.strip() or result.output.strip()
            msg = f"Command {command!r} exited with {result.exit_code}: {detail}"
            raise CommandRunnerError(msg)
        return result
