"""Shared fixtures for harness unit tests."""

from __future__ import annotations

import dataclasses
import io
import typing as typ

import pytest

from nuctl.errors import CommandError
from nuctl.testing import NuctlSuite

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dataclasses.dataclass
class FakeClock:
    """Monotonic clock that only advances when the poller sleeps."""

    now: float = 0.0
    sleeps: list[float] = dataclasses.field(default_factory=list)

    def __call__(self) -> float:
        """Return the current fake time."""
        return self.now

    def sleep(self, seconds: float) -> None:
        """Advance the clock instead of blocking."""
        self.sleeps.append(seconds)
        self.now += seconds


class FakeCommandeer:
    """Stand-in root command that records how it was wired and invoked."""

    def __init__(self, owner: FakeNuctl) -> None:
        """Attach the commandeer to the recorder that scripts its behaviour."""
        self._owner = owner
        self.out: typ.IO[str] | None = None
        self.err: typ.IO[str] | None = None
        self.input: typ.IO[str] | None = None
        self.env: dict[str, str] | None = None

    def set_out(self, stream: typ.IO[str]) -> None:
        """Record the output stream."""
        self.out = stream

    def set_err(self, stream: typ.IO[str]) -> None:
        """Record the error stream."""
        self.err = stream

    def set_in(self, stream: typ.IO[str]) -> None:
        """Record the input stream."""
        self.input = stream

    def execute(
        self,
        argv: cabc.Sequence[str] | None = None,
        env: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Write the scripted output and fail when the script says so."""
        assert argv is not None
        assert self.out is not None
        assert self.input is not None
        self._owner.calls.append(list(argv))
        self.env = dict(env or {})
        self._owner.stdin.append(self.input.read())
        self.out.write(self._owner.render(list(argv)))
        succeed = (
            self._owner.outcomes.pop(0)
            if self._owner.outcomes
            else self._owner.default_outcome
        )
        if not succeed:
            msg = "scripted failure"
            raise CommandError(msg)


@dataclasses.dataclass
class FakeNuctl:
    """Script outcomes and output for FakeCommandeer instances."""

    outcomes: list[bool] = dataclasses.field(default_factory=list)
    default_outcome: bool = True
    output: str = ""
    responder: cabc.Callable[[list[str]], str] | None = None
    calls: list[list[str]] = dataclasses.field(default_factory=list)
    stdin: list[str] = dataclasses.field(default_factory=list)
    instances: list[FakeCommandeer] = dataclasses.field(default_factory=list)

    def factory(self) -> FakeCommandeer:
        """Build and remember a new commandeer."""
        commandeer = FakeCommandeer(self)
        self.instances.append(commandeer)
        return commandeer

    def render(self, argv: list[str]) -> str:
        """Return the text the next invocation writes."""
        if self.responder is not None:
            return self.responder(argv)
        return self.output


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a clock the poller can advance without sleeping."""
    return FakeClock()


@pytest.fixture
def fake_nuctl() -> FakeNuctl:
    """Provide a scriptable nuctl stand-in."""
    return FakeNuctl()


@pytest.fixture
def echo() -> io.StringIO:
    """Collect what the suite mirrors to the terminal."""
    return io.StringIO()


@pytest.fixture
def suite(fake_nuctl: FakeNuctl, fake_clock: FakeClock, echo: io.StringIO) -> NuctlSuite:
    """Return a suite wired to the fake nuctl and the fake clock."""
    nuctl_suite = NuctlSuite(fake_nuctl.factory, echo=echo)
    nuctl_suite.clock = fake_clock
    nuctl_suite.sleep = fake_clock.sleep
    return nuctl_suite
