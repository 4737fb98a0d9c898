"""Base runner classes and protocols."""

import json
import logging
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..errors import InvalidWorkflowError, RuntimeStatesError, StatesTimeoutError


@dataclass
class RunResult:
    """Result of running a resource."""

    exit_status: int
    output: str = ""
    error_output: str = ""

    @property
    def success(self) -> bool:
        return self.exit_status == 0


class RunnerProtocol(Protocol):
    """Protocol for task runners."""

    def run(
        self,
        resource: str,
        env: dict[str, Any] | None = None,
        secrets: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        """
        Execute a resource.

        Args:
            resource: Resource URI, e.g. ``docker://alpine:latest``
            env: Environment variables for the resource
            secrets: Credentials made available to the resource
            timeout: Seconds after which the run is abandoned

        Returns:
            RunResult with the exit status and raw standard output
        """
        ...


def parse_resource(resource: str) -> tuple[str, str]:
    """
    Split a resource URI into scheme and reference.

    Examples:
        docker://alpine:latest -> ("docker", "alpine:latest")
    """
    scheme, separator, reference = resource.partition("://")
    if not separator or not scheme or not reference:
        raise InvalidWorkflowError(f"Invalid resource [{resource}], expected scheme://reference")
    return scheme, reference


def format_env_value(value: Any) -> str:
    """Strings are passed as-is, everything else JSON encoded."""
    return value if isinstance(value, str) else json.dumps(value)


def write_secrets_file(secrets: dict[str, Any]) -> Path:
    """Write secrets to a private temporary JSON file."""
    with tempfile.NamedTemporaryFile("w", prefix="floe-secrets-", suffix=".json", delete=False) as f:
        json.dump(secrets, f)
    return Path(f.name)


class CommandRunner:
    """
    Runner that launches a CLI tool (docker, podman, kubectl) per task.

    Subclasses build the command line; this class handles secrets files,
    timeouts and exit status.
    """

    scheme = "docker"
    executable = "docker"

    def __init__(self, options: dict[str, Any] | None = None, logger: logging.Logger | None = None):
        self.options = dict(options or {})
        self.logger = logger or logging.getLogger(__name__)

    def run(
        self,
        resource: str,
        env: dict[str, Any] | None = None,
        secrets: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        scheme, image = parse_resource(resource)
        if scheme != self.scheme:
            raise InvalidWorkflowError(f"{type(self).__name__} cannot run [{resource}]")

        secrets_file = write_secrets_file(secrets) if secrets else None
        try:
            cmd = self.build_command(image, env or {}, secrets_file)
            self.logger.info("Running %s image [%s]", self.executable, image)
            return self.execute(cmd, timeout)
        finally:
            if secrets_file:
                secrets_file.unlink(missing_ok=True)

    def build_command(self, image: str, env: dict[str, Any], secrets_file: Path | None) -> list[str]:
        raise NotImplementedError

    def execute(self, cmd: list[str], timeout: float | None = None) -> RunResult:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as err:
            raise StatesTimeoutError(f"{cmd[0]} timed out after {timeout}s") from err
        except FileNotFoundError as err:
            raise RuntimeStatesError(f"{cmd[0]} not found - please install it") from err

        if result.returncode != 0:
            self.logger.warning("%s exited with status %d: %s", cmd[0], result.returncode, result.stderr.strip())

        return RunResult(exit_status=result.returncode, output=result.stdout, error_output=result.stderr)
