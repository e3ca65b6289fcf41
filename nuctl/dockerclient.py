"""Container runtime client backed by the docker command line."""

from __future__ import annotations

import shlex
import typing as typ

if typ.TYPE_CHECKING:
    import logging

    from .cmdrunner import ShellRunner


class DockerShellClient:
    """Issue docker commands through a ShellRunner."""

    def __init__(self, logger: logging.Logger, runner: ShellRunner) -> None:
        """Store the runner used for every docker invocation."""
        self._logger = logger
        self._runner = runner

    def get_version(self) -> str:
        """Return the docker server version."""
        result = self._runner.run("docker version --format '{{.Server.Version}}'")
        return result.output.strip()

    def get_container_names(self, name_filter: str = "") -> list[str]:
        """Return names of all containers (running or not) matching the filter."""
        command = "docker ps --all --format '{{.Names}}'"
        if name_filter:
            command += f" --filter {shlex.quote('name=' + name_filter)}"
        result = self._runner.run(command)
        return [line.strip() for line in result.output.splitlines() if line.strip()]

    def remove_container(self, name: str) -> None:
        """Forcibly remove a container by name."""
        self._logger.debug("Removing container %s", name)
        self._runner.run(f"docker rm --force {shlex.quote(name)}")
