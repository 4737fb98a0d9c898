"""
Workflow layer - State machine interpreter.

Definitions are DATA parsed once into states.
A Workflow drives one run of a definition over its Context.
"""

from .choice_rule import BooleanRule, ChoiceRule, DataRule
from .context import Context
from .definition import StateMachine
from .path import Path, ReferencePath
from .payload_template import PayloadTemplate
from .workflow import Workflow, WorkflowCallbacks

__all__ = [
    "BooleanRule",
    "ChoiceRule",
    "Context",
    "DataRule",
    "Path",
    "PayloadTemplate",
    "ReferencePath",
    "StateMachine",
    "Workflow",
    "WorkflowCallbacks",
]
