"""
Script Step Executor.

Runs one script step of a process:
  - Skips the step when its skip expression says so
  - Resolves the effective script text (runtime override first)
  - Builds the evaluation request with the step's input scoping
  - Evaluates the script and classifies any fault
  - Binds the result variable and advances the graph exactly once

Fault handling:
  - Domain error at the root: handed to the error propagator, no advance
  - Other engine fault at the root: that root fault is raised
  - Anything else: the original fault is raised unchanged
"""

import logging
from enum import Enum

from .config import EngineConfig, get_config
from .context import ExecutionContext
from .errors import EngineFault, FaultKind, MalformedResultError, classify_fault
from .expressions import ExpressionEvaluator
from .inputs import build_request
from .overrides import OverrideStore, resolve_script
from .propagation import ErrorPropagator
from .scripting import ScriptingEngines
from .skip import SkipExpressionEvaluator

logger = logging.getLogger(__name__)


class StepOutcome(str, Enum):
    """How an invocation ended, when it did not raise."""
    SKIPPED = "skipped"
    COMPLETED = "completed"
    ERROR_PROPAGATED = "error_propagated"


class ScriptStepExecutor:
    """
    Executes script steps.

    Holds only collaborators, never per-invocation state, so one executor
    can serve concurrent process instances.

    Usage:
        executor = ScriptStepExecutor(propagator=BoundaryErrorPropagator(definition))
        executor.execute(ctx)
    """

    def __init__(
        self,
        propagator: ErrorPropagator,
        config: EngineConfig | None = None,
        overrides: OverrideStore | None = None,
        engines: ScriptingEngines | None = None,
        skip_evaluator: SkipExpressionEvaluator | None = None,
    ):
        self.config = config or get_config()
        self.overrides = overrides
        self.engines = engines or ScriptingEngines()
        self.propagator = propagator
        self.skip_evaluator = skip_evaluator or SkipExpressionEvaluator(self.config, overrides)

    def execute(self, ctx: ExecutionContext) -> StepOutcome:
        step = ctx.current_step

        skip_expression = step.skip_expression
        if self.skip_evaluator.is_enabled(skip_expression, step.id, ctx) and \
                self.skip_evaluator.should_skip(skip_expression, step.id, ctx):
            ctx.leave()
            return StepOutcome.SKIPPED

        script = resolve_script(step, ctx.process_definition_id, self.overrides, self.config)
        return self._safely_execute_script(ctx, script)

    def _safely_execute_script(self, ctx: ExecutionContext, script: str) -> StepOutcome:
        try:
            self._execute_script(ctx, script)
        except EngineFault as e:
            logger.warning("Exception while executing %s : %s", ctx, e)

            fault = classify_fault(e)
            if fault.kind is FaultKind.DOMAIN:
                self.propagator.propagate(fault.error, ctx)
                return StepOutcome.ERROR_PROPAGATED
            if fault.kind is FaultKind.ENGINE and fault.error is not e:
                raise fault.error from None
            raise

        ctx.leave()
        return StepOutcome.COMPLETED

    def _execute_script(self, ctx: ExecutionContext, script: str) -> None:
        step = ctx.current_step
        request = build_request(step, script, ctx, ExpressionEvaluator())
        result = self.engines.evaluate(request).value

        if self.config.is_legacy_language(step.language) and isinstance(result, str) and result == script:
            raise MalformedResultError(script, str(ctx), step.language)

        if step.result_variable is not None:
            ctx.scope.set(step.result_variable, result)
