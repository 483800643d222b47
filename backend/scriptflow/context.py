"""
Execution Context for a single step invocation.

One context is built per step invocation and is never shared across threads.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

from .definition import ErrorBoundary, ScriptStepSpec
from .scope import VariableScope


@dataclass
class ExecutionContext:
    """
    Everything a step executor needs about the running invocation.

    `advance` signals the surrounding graph to move past the current step.
    `boundary_handler` is called by the error propagator when a boundary
    catches a domain error.
    """
    current_step: ScriptStepSpec
    process_definition_id: str
    scope: VariableScope
    advance: Callable[["ExecutionContext"], Any]
    boundary_handler: Callable[[ErrorBoundary, "ExecutionContext"], Any] | None = None
    execution_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    # Bookkeeping
    advanced_count: int = 0

    @property
    def step_id(self) -> str:
        return self.current_step.id

    def leave(self) -> None:
        """Advance the graph past the current step."""
        self.advanced_count += 1
        self.advance(self)

    def __str__(self) -> str:
        return (
            f"Execution[{self.execution_id}] - step {self.current_step.id}"
            f" - definition {self.process_definition_id}"
        )
