"""Map state - Runs a sub state machine for every item of an array."""

from typing import Any

from ...errors import InvalidWorkflowError, RuntimeStatesError
from ..path import Path
from .base import RetryCatchState
from .parallel import raise_for_branch


class Map(RetryCatchState):
    """
    Run ``ItemProcessor`` (or the older ``Iterator``) once per item.

    Items are processed one after another, each in its own forked context
    with ``$$.Map.Item.Index`` and ``$$.Map.Item.Value`` set. The result is
    the list of iteration outputs, in item order.
    """

    def __init__(self, name: str, payload: dict):
        from ..definition import StateMachine

        super().__init__(name, payload)

        processor = payload.get("ItemProcessor") or payload.get("Iterator")
        if not isinstance(processor, dict):
            raise InvalidWorkflowError(f"State [{name}] requires an ItemProcessor")

        self.item_processor = StateMachine(processor, name=f"{name}.ItemProcessor")
        self.items_path = Path(payload.get("ItemsPath", "$"))
        self.item_selector = self._optional_template("ItemSelector") or self.parameters
        self.max_concurrency: int = payload.get("MaxConcurrency", 0)

    def execute(self, workflow, input: Any) -> Any:
        context = workflow.context
        input = self.process_input(context, input)

        items = self.items_path.value(context, input)
        if not isinstance(items, list):
            raise RuntimeStatesError(f"State [{self.name}]: ItemsPath [{self.items_path.payload}] is not an array")

        results = []
        for index, item in enumerate(items):
            item_context = {"Map": {"Item": {"Index": index, "Value": item}}}
            if self.item_selector:
                item_input = self.item_selector.value({**context.root, **item_context}, input)
            else:
                item_input = item

            child = workflow.fork(self.item_processor, item_input, extra=item_context)
            child.run()
            raise_for_branch(child, f"{self.name} iteration {index}")
            results.append(child.output)

        return self.process_result(context, input, results)
