"""
scriptflow - Script Step Execution.

Provides:
  - Process definition parsing and validation
  - Expression evaluation for skip conditions and input bindings
  - Runtime overrides of step scripts
  - Pluggable script engines (python, expression, template)
  - The script step executor and its fault classification
  - Error boundary propagation
  - A sequential process runner
"""

from .config import EngineConfig, get_config, reload_config

from .definition import (
    ErrorBoundary,
    InputBinding,
    InputMode,
    ParseError,
    ProcessDefinition,
    ScriptStepSpec,
    StepType,
    ValidationError,
    load_process,
    parse_process,
    validate_process,
)

from .errors import (
    DomainError,
    EngineFault,
    Fault,
    FaultKind,
    MalformedResultError,
    ScriptEvaluationError,
    SkipExpressionError,
    UnhandledDomainError,
    UnknownLanguageError,
    classify_fault,
    root_cause,
)

from .expressions import (
    ExpressionError,
    ExpressionEvaluator,
    evaluate_condition,
    evaluate_expression,
)

from .scope import VariableScope
from .context import ExecutionContext

from .overrides import OverrideStore, resolve_script
from .skip import SkipExpressionEvaluator

from .scripting import (
    EvaluationRequest,
    ScriptEngine,
    ScriptResult,
    ScriptingEngines,
    register_engine,
)

from .inputs import build_request, process_input_bindings
from .propagation import BoundaryErrorPropagator, ErrorPropagator

from .executor import ScriptStepExecutor, StepOutcome
from .runner import ProcessRunner, RunResult

__all__ = [
    # Configuration
    "EngineConfig",
    "get_config",
    "reload_config",

    # Definitions
    "ErrorBoundary",
    "InputBinding",
    "InputMode",
    "ParseError",
    "ProcessDefinition",
    "ScriptStepSpec",
    "StepType",
    "ValidationError",
    "load_process",
    "parse_process",
    "validate_process",

    # Faults
    "DomainError",
    "EngineFault",
    "Fault",
    "FaultKind",
    "MalformedResultError",
    "ScriptEvaluationError",
    "SkipExpressionError",
    "UnhandledDomainError",
    "UnknownLanguageError",
    "classify_fault",
    "root_cause",

    # Expressions
    "ExpressionError",
    "ExpressionEvaluator",
    "evaluate_condition",
    "evaluate_expression",

    # Scope and context
    "VariableScope",
    "ExecutionContext",

    # Overrides and skipping
    "OverrideStore",
    "resolve_script",
    "SkipExpressionEvaluator",

    # Script engines
    "EvaluationRequest",
    "ScriptEngine",
    "ScriptResult",
    "ScriptingEngines",
    "register_engine",

    # Execution
    "build_request",
    "process_input_bindings",
    "BoundaryErrorPropagator",
    "ErrorPropagator",
    "ScriptStepExecutor",
    "StepOutcome",
    "ProcessRunner",
    "RunResult",
]
