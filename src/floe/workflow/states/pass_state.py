"""Pass state - Moves data without doing work."""

from typing import Any

from .base import ResultState


class Pass(ResultState):
    """Project input, optionally inject a fixed ``Result``, and move on."""

    def __init__(self, name: str, payload: dict):
        super().__init__(name, payload)
        self.has_result = "Result" in payload
        self.result = payload.get("Result")

    def run(self, workflow, input: Any) -> tuple[str | None, Any]:
        context = workflow.context
        input = self.process_input(context, input)

        if self.has_result:
            result = self.result
        elif self.parameters:
            result = self.parameters.value(context, input)
        else:
            result = input

        output = self.process_output(context, self.apply_result_path(input, result))
        return self.transition(), output
