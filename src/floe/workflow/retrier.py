"""Retry policies for Task, Map and Parallel states."""

from ..constants import DEFAULT_BACKOFF_RATE, DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS, ErrorName
from ..errors import InvalidWorkflowError, StatesError
from .choice_rule import is_numeric


def error_matches(error_equals: list[str], error: Exception) -> bool:
    """
    Check whether an error is selected by an ``ErrorEquals`` list.

    An entry matches on ``States.ALL``, on the error name of a
    StatesError, or on the error's string form.
    """
    names = {str(error)}
    if isinstance(error, StatesError):
        names.add(error.error)
    return ErrorName.ALL.value in error_equals or bool(names.intersection(error_equals))


def parse_error_equals(payload: dict, owner: str) -> list[str]:
    error_equals = payload.get("ErrorEquals")
    if not isinstance(error_equals, list) or not error_equals:
        raise InvalidWorkflowError(f"{owner} requires a non-empty ErrorEquals list")
    return error_equals


class Retrier:
    """A single ``Retry`` entry."""

    def __init__(self, payload: dict):
        self.payload = payload
        self.error_equals = parse_error_equals(payload, "Retrier")
        self.interval_seconds = payload.get("IntervalSeconds", DEFAULT_INTERVAL_SECONDS)
        self.max_attempts = payload.get("MaxAttempts", DEFAULT_MAX_ATTEMPTS)
        self.backoff_rate = payload.get("BackoffRate", DEFAULT_BACKOFF_RATE)

        for key, value in (
            ("IntervalSeconds", self.interval_seconds),
            ("MaxAttempts", self.max_attempts),
            ("BackoffRate", self.backoff_rate),
        ):
            if not is_numeric(value) or value < 0:
                raise InvalidWorkflowError(f"Retrier {key} must be a non-negative number, got {value!r}")

    def matches(self, error: Exception) -> bool:
        return error_matches(self.error_equals, error)

    def sleep_duration(self, attempt: int) -> float:
        """Seconds to wait before retry ``attempt`` (1-based)."""
        return self.interval_seconds * self.backoff_rate * attempt

    def __repr__(self) -> str:
        return f"Retrier(error_equals={self.error_equals!r}, max_attempts={self.max_attempts})"
