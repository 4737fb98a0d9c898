"""Wait state - Blocks the run for a fixed time."""

import time
from typing import Any

from ...errors import InvalidWorkflowError, RuntimeStatesError
from ..choice_rule import is_numeric
from ..context import parse_timestamp, utc_now
from ..path import Path
from .base import State

WAIT_FIELDS = ("Seconds", "SecondsPath", "Timestamp", "TimestampPath")


class Wait(State):
    """
    Sleep on the calling thread, then pass input through.

    Exactly one of Seconds, SecondsPath, Timestamp or TimestampPath is set.
    """

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)

        fields = [field for field in WAIT_FIELDS if field in payload]
        if len(fields) != 1:
            raise InvalidWorkflowError(f"State [{name}] requires exactly one of {', '.join(WAIT_FIELDS)}")

        self.seconds = payload.get("Seconds")
        self.timestamp = payload.get("Timestamp")
        self.seconds_path = Path(payload["SecondsPath"]) if "SecondsPath" in payload else None
        self.timestamp_path = Path(payload["TimestampPath"]) if "TimestampPath" in payload else None

        if self.seconds is not None and (not is_numeric(self.seconds) or self.seconds < 0):
            raise InvalidWorkflowError(f"State [{name}]: Seconds must be a non-negative number")
        if self.timestamp is not None and parse_timestamp(self.timestamp) is None:
            raise InvalidWorkflowError(f"State [{name}]: Timestamp must be an RFC3339 timestamp")

    def wait_seconds(self, context, input: Any) -> float:
        if self.seconds is not None:
            return self.seconds

        if self.seconds_path:
            seconds = self.seconds_path.value(context, input)
            if not is_numeric(seconds) or seconds < 0:
                raise RuntimeStatesError(f"SecondsPath [{self.seconds_path.payload}] is not a non-negative number")
            return seconds

        raw = self.timestamp if self.timestamp is not None else self.timestamp_path.value(context, input)
        target = parse_timestamp(raw)
        if target is None:
            raise RuntimeStatesError(f"TimestampPath [{self.timestamp_path.payload}] is not a timestamp")
        return max(0.0, (target - utc_now()).total_seconds())

    def run(self, workflow, input: Any) -> tuple[str | None, Any]:
        context = workflow.context
        input = self.process_input(context, input)

        seconds = self.wait_seconds(context, input)
        if seconds > 0:
            workflow.logger.info("State [%s] waiting %ss", self.name, seconds)
            time.sleep(seconds)

        return self.transition(), self.process_output(context, input)
