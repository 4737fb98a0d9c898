"""Execution context - Mutable record of a single workflow run."""

import copy
import re
import uuid
from datetime import datetime, timezone
from typing import Any

from ..constants import Status


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC3339 string with millisecond precision."""
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an RFC3339 timestamp.

    Returns:
        Timezone-aware datetime, or None if the value is not a valid timestamp
    """
    if not isinstance(value, str):
        return None

    match = _RFC3339_RE.match(value)
    if not match:
        return None

    fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return datetime.fromisoformat(f"{match.group('date')}T{match.group('time')}.{fraction}{offset}")
    except ValueError:
        return None


class Context:
    """
    Run-scoped execution record, addressable with ``$$`` paths.

    Subtrees:
    - Execution: run metadata (Id, Input, StartTime, EndTime, Status)
    - State: scratch space of the state being run, overwritten every step
    - States: append-only history of finished state snapshots
    - StateMachine / Task: namespaces for nested executions

    A context can be rebuilt from ``to_dict()`` output to resume a run.
    """

    def __init__(self, context: dict | None = None, input: Any = None):
        self.root: dict[str, Any] = copy.deepcopy(context) if context else {}

        execution = self.root.setdefault("Execution", {})
        execution.setdefault("Id", str(uuid.uuid4()))
        execution.setdefault("Input", {} if input is None else input)

        self.root.setdefault("State", {})
        self.root.setdefault("States", [])
        self.root.setdefault("StateMachine", {})
        self.root.setdefault("Task", {})

    @property
    def execution(self) -> dict[str, Any]:
        return self.root["Execution"]

    @property
    def state(self) -> dict[str, Any]:
        return self.root["State"]

    @state.setter
    def state(self, value: dict[str, Any]) -> None:
        self.root["State"] = value

    @property
    def states(self) -> list[dict[str, Any]]:
        return self.root["States"]

    @property
    def state_machine(self) -> dict[str, Any]:
        return self.root["StateMachine"]

    @property
    def task(self) -> dict[str, Any]:
        return self.root["Task"]

    @property
    def state_name(self) -> str | None:
        return self.state.get("Name")

    @property
    def input(self) -> Any:
        return self.state.get("Input")

    @property
    def output(self) -> Any:
        return self.state.get("Output")

    @property
    def status(self) -> str:
        return self.execution.get("Status", Status.PENDING.value)

    @status.setter
    def status(self, value: Status | str) -> None:
        self.execution["Status"] = value.value if isinstance(value, Status) else value

    def started(self) -> bool:
        return "StartTime" in self.execution

    def ended(self) -> bool:
        return "EndTime" in self.execution

    def running(self) -> bool:
        return self.started() and not self.ended()

    def fork(self, input: Any, extra: dict[str, Any] | None = None) -> "Context":
        """
        Create a child context for a Map iteration or Parallel branch.

        The child shares the execution id and state machine metadata
        but has its own State scratch space and history.
        """
        root = {
            "Execution": {
                "Id": self.execution["Id"],
                "Input": input,
                "ParentStateName": self.state_name,
            },
            "StateMachine": copy.deepcopy(self.state_machine),
            "Task": copy.deepcopy(self.task),
        }
        if extra:
            root.update(copy.deepcopy(extra))
        return Context(root)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.root)

    def __repr__(self) -> str:
        return f"Context(id={self.execution['Id']!r}, state={self.state_name!r}, status={self.status!r})"
