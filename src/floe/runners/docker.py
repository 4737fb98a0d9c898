"""Docker runner - Runs task images with the docker CLI."""

from pathlib import Path
from typing import Any

from ..constants import SECRETS_ENV_VAR, SECRETS_MOUNT_PATH
from .base import CommandRunner, format_env_value


class DockerRunner(CommandRunner):
    """
    Run ``docker://image`` resources as ``docker run --rm image``.

    Options:
        network: Network to attach the container to
        pull_policy: ``always``, ``missing`` or ``never``
    """

    executable = "docker"

    def global_options(self) -> list[str]:
        return []

    def build_command(self, image: str, env: dict[str, Any], secrets_file: Path | None) -> list[str]:
        cmd = [self.executable, *self.global_options(), "run", "--rm"]

        if network := self.options.get("network"):
            cmd += ["--net", network]
        if pull_policy := self.options.get("pull_policy"):
            cmd += ["--pull", pull_policy]

        for key, value in env.items():
            cmd += ["-e", f"{key}={format_env_value(value)}"]

        if secrets_file:
            cmd += ["-e", f"{SECRETS_ENV_VAR}={SECRETS_MOUNT_PATH}", "-v", f"{secrets_file}:{SECRETS_MOUNT_PATH}:z"]

        cmd.append(image)
        return cmd
