"""
Evaluation Request Assembly.

Builds the EvaluationRequest for a script step, deciding which variables
the script engine may see:
  - bound: only the values produced by the step's input bindings
  - empty: no variables at all
  - inherit: the full ambient scope (no input container attached)
"""

from typing import Iterable

from .context import ExecutionContext
from .definition import InputBinding, InputMode, ScriptStepSpec
from .expressions import ExpressionEvaluator
from .scope import VariableScope
from .scripting import EvaluationRequest

TRACE_TAGS = {"type": "scriptTask"}


def process_input_bindings(
    bindings: Iterable[InputBinding],
    ambient: VariableScope,
    evaluator: ExpressionEvaluator | None = None,
) -> VariableScope:
    """
    Resolve input bindings into a fresh, isolated variable container.

    Bindings are resolved in declaration order against a snapshot of the
    ambient scope; later bindings do not see earlier ones.

    Args:
        bindings: The step's input bindings
        ambient: The ambient scope to read from
        evaluator: Expression evaluator (a new one is built if omitted)

    Returns:
        A new VariableScope holding only the bound variables
    """
    evaluator = evaluator or ExpressionEvaluator()
    evaluator.set_context(ambient.snapshot())

    container = VariableScope()
    for binding in bindings:
        container.set(binding.target, evaluator.evaluate(binding.source))
    return container


def build_request(
    step: ScriptStepSpec,
    script: str,
    ctx: ExecutionContext,
    evaluator: ExpressionEvaluator | None = None,
) -> EvaluationRequest:
    """
    Build the evaluation request for one invocation of a script step.

    Args:
        step: The step definition
        script: The effective script text for this invocation
        ctx: The execution context
        evaluator: Expression evaluator used for input bindings

    Returns:
        The EvaluationRequest to hand to the script engines
    """
    mode = step.input_mode
    if mode is InputMode.BOUND:
        input_variables = process_input_bindings(step.inputs, ctx.scope, evaluator)
    elif mode is InputMode.EMPTY:
        input_variables = VariableScope.empty()
    else:
        input_variables = None

    return EvaluationRequest(
        script=script,
        language=step.language,
        scope=ctx.scope,
        input_variables=input_variables,
        store_script_variables=step.store_script_variables,
        trace_tags=dict(TRACE_TAGS),
        execution_id=ctx.execution_id,
    )
