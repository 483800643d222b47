"""
Process Definition Parser

Parses and validates YAML process definitions made of script steps.

Example:
    name: order-review
    version: "2"
    variables:
      amount: 250
    steps:
      - id: compute_fee
        type: script
        language: python
        script: amount * 0.02
        resultVariable: fee
        inputs:
          - target: amount
            source: order.amount
        boundaries:
          - errorCode: E_LIMIT
            target: notify
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml


class ParseError(Exception):
    """Error parsing a process definition."""
    pass


class ValidationError(Exception):
    """Error validating a process definition."""
    pass


# =============================================================================
# Step Types
# =============================================================================

class StepType(str, Enum):
    """Valid step kinds in a process."""
    SCRIPT = "script"


class InputMode(str, Enum):
    """
    Which variables a script engine may see.

    Resolved once when the definition is built:
      - inherit: the full ambient scope
      - empty: nothing (excludeAmbientVariables without bindings)
      - bound: only the variables produced by the input bindings
    """
    INHERIT = "inherit"
    EMPTY = "empty"
    BOUND = "bound"


@dataclass(frozen=True)
class InputBinding:
    """Maps an expression over the ambient scope onto an input variable."""
    target: str
    source: str


@dataclass(frozen=True)
class ScriptStepSpec:
    """
    A script step definition.

    Shared by every execution of the process, so it is frozen: runtime
    overrides travel with the invocation, never through this object.
    """
    id: str
    script: str
    language: str = "python"
    result_variable: str | None = None
    skip_expression: str | None = None
    store_script_variables: bool = False
    exclude_ambient_variables: bool = False
    inputs: tuple[InputBinding, ...] = ()
    type: StepType = StepType.SCRIPT

    @property
    def input_mode(self) -> InputMode:
        if self.inputs:
            return InputMode.BOUND
        if self.exclude_ambient_variables:
            return InputMode.EMPTY
        return InputMode.INHERIT


@dataclass(frozen=True)
class ErrorBoundary:
    """Catches domain errors thrown by a step. A None code catches all."""
    error_code: str | None
    target: str

    def matches(self, error_code: str) -> bool:
        return self.error_code is None or self.error_code == error_code


# =============================================================================
# Process
# =============================================================================

@dataclass
class ProcessDefinition:
    """Complete process definition."""
    name: str
    version: str = "1"
    id: str = ""
    description: str = ""
    variables: dict[str, Any] = field(default_factory=dict)
    steps: list[ScriptStepSpec] = field(default_factory=list)
    boundaries: dict[str, tuple[ErrorBoundary, ...]] = field(default_factory=dict)

    # Computed
    step_index: dict[str, ScriptStepSpec] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            self.id = f"{self.name}:{self.version}"
        self.step_index = {s.id: s for s in self.steps}

    def boundaries_for(self, step_id: str) -> tuple[ErrorBoundary, ...]:
        return self.boundaries.get(step_id, ())


def _get(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present, so camelCase and snake_case both work."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def parse_inputs(data: Any, step_id: str) -> tuple[InputBinding, ...]:
    """Parse the input bindings of a step."""
    if not data:
        return ()
    if not isinstance(data, list):
        raise ParseError(f"Step '{step_id}' inputs must be a list of {{target, source}} mappings")

    bindings = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or "target" not in item or "source" not in item:
            raise ParseError(f"Step '{step_id}' input #{i} needs 'target' and 'source'")
        bindings.append(InputBinding(target=str(item["target"]), source=str(item["source"])))
    return tuple(bindings)


def parse_boundaries(data: Any, step_id: str) -> tuple[ErrorBoundary, ...]:
    """Parse the error boundaries attached to a step."""
    if not data:
        return ()
    if not isinstance(data, list):
        raise ParseError(f"Step '{step_id}' boundaries must be a list")

    boundaries = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or "target" not in item:
            raise ParseError(f"Step '{step_id}' boundary #{i} is missing 'target'")
        code = _get(item, "errorCode", "error_code")
        boundaries.append(ErrorBoundary(
            error_code=str(code) if code is not None else None,
            target=str(item["target"]),
        ))
    return tuple(boundaries)


def parse_step(data: dict[str, Any], path: str = "", default_language: str = "python") -> ScriptStepSpec:
    """Parse a single step from YAML data."""
    if not isinstance(data, dict):
        raise ParseError(f"Step at {path} must be a mapping")
    if "id" not in data:
        raise ParseError(f"Step missing required 'id' field at {path}")

    step_id = str(data["id"])

    try:
        step_type = StepType(data.get("type", StepType.SCRIPT.value))
    except ValueError:
        valid = ", ".join(t.value for t in StepType)
        raise ParseError(
            f"Step '{step_id}' has invalid type '{data['type']}'. "
            f"Valid types: {valid}"
        )

    script = data.get("script")
    if script is None:
        raise ParseError(f"Step '{step_id}' missing required 'script' field")

    return ScriptStepSpec(
        id=step_id,
        type=step_type,
        script=str(script),
        language=str(_get(data, "language", "scriptFormat", default=default_language)),
        result_variable=_get(data, "resultVariable", "result_variable"),
        skip_expression=_get(data, "skipExpression", "skip_expression"),
        store_script_variables=bool(_get(data, "storeScriptVariables", "store_script_variables", default=False)),
        exclude_ambient_variables=bool(
            _get(data, "excludeAmbientVariables", "exclude_ambient_variables", default=False)
        ),
        inputs=parse_inputs(data.get("inputs"), step_id),
    )


def parse_process(
    yaml_content: str,
    definition_id: str | None = None,
    default_language: str = "python",
) -> ProcessDefinition:
    """Parse a YAML process definition."""
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Process must be a YAML mapping")

    if "name" not in data:
        raise ParseError("Process missing required 'name' field")

    steps = []
    boundaries: dict[str, tuple[ErrorBoundary, ...]] = {}
    for i, step_data in enumerate(data.get("steps") or []):
        step = parse_step(step_data, f"steps[{i}]", default_language=default_language)
        steps.append(step)
        step_boundaries = parse_boundaries(step_data.get("boundaries"), step.id)
        if step_boundaries:
            boundaries[step.id] = step_boundaries

    return ProcessDefinition(
        name=str(data["name"]),
        version=str(data.get("version", "1")),
        id=definition_id or str(data.get("id") or ""),
        description=data.get("description", ""),
        variables=dict(data.get("variables") or {}),
        steps=steps,
        boundaries=boundaries,
    )


def validate_process(definition: ProcessDefinition, known_languages: set[str] | None = None) -> list[str]:
    """
    Validate a process definition.
    Returns list of warnings (empty if valid).
    Raises ValidationError for fatal issues.
    """
    warnings = []

    seen_ids: set[str] = set()
    for step in definition.steps:
        if step.id in seen_ids:
            raise ValidationError(f"Duplicate step ID: '{step.id}'")
        seen_ids.add(step.id)

    for step_id, step_boundaries in definition.boundaries.items():
        for boundary in step_boundaries:
            if boundary.target not in definition.step_index:
                raise ValidationError(
                    f"Boundary on step '{step_id}' targets non-existent step '{boundary.target}'"
                )

    for step in definition.steps:
        if known_languages is not None and step.language.lower() not in known_languages:
            warnings.append(f"Step '{step.id}' uses unregistered language '{step.language}'")
        if step.inputs and step.exclude_ambient_variables:
            warnings.append(
                f"Step '{step.id}' has input bindings; excludeAmbientVariables is redundant"
            )
        if not step.script.strip():
            warnings.append(f"Step '{step.id}' has an empty script")

    return warnings


def load_process(path: Path | str, default_language: str = "python") -> ProcessDefinition:
    """Load and validate a process definition from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ParseError(f"Process file not found: {path}")

    definition = parse_process(path.read_text(), default_language=default_language)
    validate_process(definition)
    return definition
