"""
Base Script Engine.

Abstract base class for all script engines, plus the request/result types
exchanged with them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..scope import VariableScope


@dataclass(frozen=True)
class EvaluationRequest:
    """
    Everything a script engine needs to evaluate one script.

    input_variables is None when the engine inherits the ambient scope;
    otherwise it is the only variable container the engine may read.
    """
    script: str
    language: str
    scope: VariableScope
    input_variables: VariableScope | None = None
    store_script_variables: bool = False
    trace_tags: dict[str, str] = field(default_factory=dict)
    execution_id: str | None = None

    def visible_variables(self) -> dict[str, Any]:
        """Variables the script is allowed to read."""
        if self.input_variables is not None:
            return self.input_variables.snapshot()
        return self.scope.snapshot()


@dataclass
class ScriptResult:
    """
    Result of evaluating a script.

    script_variables holds the top-level variables the script created or
    rebound, for engines that can report them.
    """
    value: Any = None
    script_variables: dict[str, Any] = field(default_factory=dict)


class ScriptEngine(ABC):
    """
    Abstract base class for script engines.

    Each language has an engine subclass that implements evaluate().
    """

    # Override in subclasses
    language: str = "base"

    @abstractmethod
    def evaluate(self, request: EvaluationRequest) -> ScriptResult:
        """
        Evaluate a script.

        Args:
            request: The evaluation request

        Returns:
            ScriptResult with the produced value
        """
        pass
