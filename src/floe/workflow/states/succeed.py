"""Succeed state - Ends the run successfully."""

from typing import Any

from ...constants import Status
from .base import State


class Succeed(State):
    implicit_end = True
    requires_transition = False

    @property
    def status(self) -> str:
        return Status.SUCCESS.value

    def run(self, workflow, input: Any) -> tuple[str | None, Any]:
        return None, input
