"""Shared pytest fixtures for nuctl tests."""

from __future__ import annotations

import collections
import dataclasses
import pathlib
import subprocess
import typing as typ

import pytest

if typ.TYPE_CHECKING:
    import collections.abc as cabc

pytest_plugins = ["nuctl.testing.fixtures"]

SHELL = "/bin/sh"


@dataclasses.dataclass(frozen=True)
class ShellCall:
    """A shell command the runner is expected to issue, and its result."""

    command: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""


class ShellCommandMismatchError(AssertionError):
    """Raised when the runner issues a command nobody scripted."""


class ShellMox:
    """Script the ``sh -c`` commands that ``ShellRunner`` passes to subprocess."""

    def __init__(self, monkeypatch: pytest.MonkeyPatch, shell: str = SHELL) -> None:
        """Patch ``subprocess.run`` for the rest of the test."""
        self.shell = shell
        self.run_options: list[dict[str, object]] = []
        self._pending: collections.deque[ShellCall] = collections.deque()
        monkeypatch.setattr(subprocess, "run", self._run)

    def expect(
        self,
        command: str,
        *,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> ShellMox:
        """Queue ``command`` with the result it should produce."""
        self._pending.append(ShellCall(command, exit_code, stdout, stderr))
        return self

    def _run(
        self,
        args: cabc.Sequence[str],
        **kwargs: object,
    ) -> subprocess.CompletedProcess[str]:
        argv = list(args)
        if not self._pending:
            msg = f"Unexpected shell invocation: {argv}"
            raise ShellCommandMismatchError(msg)

        call = self._pending.popleft()
        expected = [self.shell, "-c", call.command]
        if argv != expected:
            msg = f"Expected {expected} but received {argv}"
            raise ShellCommandMismatchError(msg)

        self.run_options.append(kwargs)
        return subprocess.CompletedProcess(
            argv,
            call.exit_code,
            stdout=call.stdout,
            stderr=call.stderr,
        )

    def verify(self) -> None:
        """Fail when scripted commands were never issued."""
        if self._pending:
            msg = f"Shell commands never issued: {[c.command for c in self._pending]}"
            raise ShellCommandMismatchError(msg)


@pytest.fixture
def shell_mox(monkeypatch: pytest.MonkeyPatch) -> typ.Iterator[ShellMox]:
    """Script shell commands and check they were all issued."""
    mox = ShellMox(monkeypatch)
    yield mox
    mox.verify()


@pytest.fixture
def local_state_dir(
    tmp_path: pathlib.Path,
    monkeypatch: pytest.MonkeyPatch,
) -> pathlib.Path:
    """Point the local platform at a per-test state directory."""
    state_dir = tmp_path / "local-platform"
    monkeypatch.setenv("NUCTL_LOCAL_STATE_DIR", str(state_dir))
    return state_dir
