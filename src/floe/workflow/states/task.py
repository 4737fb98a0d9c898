"""Task state - Runs an external resource through a runner."""

import json
from typing import Any

from ...errors import InvalidWorkflowError, RuntimeStatesError, TaskFailedError
from .base import RetryCatchState


def parse_output(raw: str) -> Any:
    """Decode runner output as JSON, wrapping anything else as ``{"results": raw}``."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {"results": raw}


class Task(RetryCatchState):
    """
    Run ``Resource`` with the projected input as environment.

    The runner is chosen by the resource URI scheme (``docker://image``).
    ``Credentials`` is a payload template resolved against the workflow's
    credentials only, and handed to the runner as secrets.
    """

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)

        self.resource = payload.get("Resource")
        if not isinstance(self.resource, str) or "://" not in self.resource:
            raise InvalidWorkflowError(f"State [{name}] requires a Resource URI like docker://image")

        self.credentials = self._optional_template("Credentials")
        self.timeout_seconds: float | None = payload.get("TimeoutSeconds")
        self.heartbeat_seconds: float | None = payload.get("HeartbeatSeconds")

    def execute(self, workflow, input: Any) -> Any:
        context = workflow.context
        input = self.process_input(context, input)
        env = self.parameters.value(context, input) if self.parameters else input
        if not isinstance(env, dict):
            raise RuntimeStatesError(f"State [{self.name}]: task input must be an object, got {type(env).__name__}")

        secrets = self.credentials.value({}, workflow.credentials) if self.credentials else None

        runner = workflow.runners.for_resource(self.resource)
        result = runner.run(self.resource, env=env, secrets=secrets, timeout=self.timeout_seconds)
        if not result.success:
            raise TaskFailedError(
                f"{self.resource} exited with status {result.exit_status}",
                exit_status=result.exit_status,
                output=result.output,
            )

        return self.process_result(context, input, parse_output(result.output))
