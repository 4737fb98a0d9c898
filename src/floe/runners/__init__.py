"""
Runners layer - Execution backends for Task resources.

Runners run one resource (a container image) with an environment and
secrets and report its exit status and output. They know nothing about
workflows - Task states call them.
"""

from .base import CommandRunner, RunnerProtocol, RunResult, parse_resource
from .docker import DockerRunner
from .kubernetes import KubernetesRunner
from .podman import PodmanRunner
from .registry import RunnerRegistry, check_runner_tools, create_docker_runner, default_registry

__all__ = [
    "CommandRunner",
    "DockerRunner",
    "KubernetesRunner",
    "PodmanRunner",
    "RunResult",
    "RunnerProtocol",
    "RunnerRegistry",
    "check_runner_tools",
    "create_docker_runner",
    "default_registry",
    "parse_resource",
]
