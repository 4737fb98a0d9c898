"""Runner registry - Resolves a task resource to the runner serving it."""

import logging
import shutil
from typing import Any

from ..constants import DOCKER_RUNNERS
from ..errors import FloeError, InvalidWorkflowError
from .base import RunnerProtocol, parse_resource
from .docker import DockerRunner
from .kubernetes import KubernetesRunner
from .podman import PodmanRunner

DOCKER_RUNNER_CLASSES = {
    "docker": DockerRunner,
    "podman": PodmanRunner,
    "kubernetes": KubernetesRunner,
}

# CLI tool each container runner shells out to
RUNNER_TOOLS = {name: cls.executable for name, cls in DOCKER_RUNNER_CLASSES.items()}


class RunnerRegistry:
    """Maps resource URI schemes to runners."""

    def __init__(self, runners: dict[str, RunnerProtocol] | None = None):
        self._runners: dict[str, RunnerProtocol] = dict(runners or {})

    def register_scheme(self, scheme: str, runner: RunnerProtocol) -> None:
        self._runners[scheme] = runner

    @property
    def schemes(self) -> list[str]:
        return sorted(self._runners)

    def for_resource(self, resource: str) -> RunnerProtocol:
        """
        Get the runner for a resource URI.

        Raises:
            InvalidWorkflowError: If no runner serves the URI scheme
        """
        scheme, _ = parse_resource(resource)
        try:
            return self._runners[scheme]
        except KeyError:
            raise InvalidWorkflowError(f"Unsupported resource scheme [{scheme}] in [{resource}]") from None


def create_docker_runner(
    name: str = "docker", options: dict[str, Any] | None = None, logger: logging.Logger | None = None
) -> RunnerProtocol:
    """
    Create the runner serving the ``docker://`` scheme.

    Args:
        name: One of docker, podman, kubernetes
        options: Runner-specific options
        logger: Logger for the runner

    Returns:
        Runner instance
    """
    if name not in DOCKER_RUNNER_CLASSES:
        raise FloeError(f"Unknown docker runner [{name}], expected one of {', '.join(DOCKER_RUNNERS)}")
    return DOCKER_RUNNER_CLASSES[name](options, logger=logger)


def default_registry(
    docker_runner: str = "docker", options: dict[str, Any] | None = None, logger: logging.Logger | None = None
) -> RunnerRegistry:
    """Registry with the ``docker://`` scheme served by the chosen container runner."""
    registry = RunnerRegistry()
    registry.register_scheme("docker", create_docker_runner(docker_runner, options, logger=logger))
    return registry


def check_runner_tools() -> dict[str, str | None]:
    """
    Find the CLI tool of every container runner.

    Returns:
        Dict of runner name to tool path (None if missing)
    """
    return {name: shutil.which(tool) for name, tool in RUNNER_TOOLS.items()}
