"""Kubernetes runner - Runs task images as pods with kubectl."""

import json
import re
import uuid
from pathlib import Path
from typing import Any

from ..constants import SECRETS_ENV_VAR, SECRETS_MOUNT_PATH
from ..errors import RuntimeStatesError
from .base import CommandRunner, RunResult, format_env_value

SECRET_KEY = "credentials"


def pod_name_for(image: str) -> str:
    """Build a unique, DNS-compatible pod name from an image reference."""
    base = image.rsplit("/", 1)[-1].split(":", 1)[0].split("@", 1)[0]
    base = re.sub(r"[^a-z0-9-]", "-", base.lower()).strip("-")[:40] or "task"
    return f"floe-{base}-{uuid.uuid4().hex[:8]}"


class KubernetesRunner(CommandRunner):
    """
    Run ``docker://image`` resources as one-off pods with ``kubectl run``.

    Secrets are stored in a Kubernetes Secret named after the pod,
    mounted at /run/secrets and deleted once the pod finishes.

    Options:
        namespace: Namespace for pods and secrets
        kubeconfig: Path to a kubeconfig file
        context: kubeconfig context to use
        pull_policy: Pod image pull policy
    """

    executable = "kubectl"
    _pod_name: str | None = None

    def base_command(self) -> list[str]:
        cmd = [self.executable]
        if kubeconfig := self.options.get("kubeconfig"):
            cmd += ["--kubeconfig", str(kubeconfig)]
        if context := self.options.get("context"):
            cmd += ["--context", context]
        if namespace := self.options.get("namespace"):
            cmd += ["--namespace", namespace]
        return cmd

    def run(
        self,
        resource: str,
        env: dict[str, Any] | None = None,
        secrets: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> RunResult:
        self._pod_name = None
        try:
            return super().run(resource, env=env, secrets=secrets, timeout=timeout)
        finally:
            if secrets and self._pod_name:
                self.execute(self.base_command() + ["delete", "secret", self._pod_name, "--ignore-not-found"])

    def build_command(self, image: str, env: dict[str, Any], secrets_file: Path | None) -> list[str]:
        pod_name = pod_name_for(image)
        self._pod_name = pod_name

        container: dict[str, Any] = {
            "name": pod_name,
            "image": image,
            "env": [{"name": key, "value": format_env_value(value)} for key, value in env.items()],
        }
        if pull_policy := self.options.get("pull_policy"):
            container["imagePullPolicy"] = pull_policy

        spec: dict[str, Any] = {"containers": [container]}

        if secrets_file:
            self.create_secret(pod_name, secrets_file)
            container["env"].append({"name": SECRETS_ENV_VAR, "value": f"{SECRETS_MOUNT_PATH}/{SECRET_KEY}"})
            container["volumeMounts"] = [{"name": "secrets", "mountPath": SECRETS_MOUNT_PATH, "readOnly": True}]
            spec["volumes"] = [{"name": "secrets", "secret": {"secretName": pod_name}}]

        overrides = {"apiVersion": "v1", "spec": spec}
        return self.base_command() + [
            "run",
            pod_name,
            "--image",
            image,
            "--restart=Never",
            "--rm",
            "--attach",
            "--quiet",
            f"--overrides={json.dumps(overrides)}",
        ]

    def create_secret(self, name: str, secrets_file: Path) -> None:
        result = self.execute(
            self.base_command() + ["create", "secret", "generic", name, f"--from-file={SECRET_KEY}={secrets_file}"]
        )
        if not result.success:
            raise RuntimeStatesError(f"Failed to create secret {name}: {result.error_output.strip()}")
