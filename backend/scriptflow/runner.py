"""
Process Runner.

A minimal sequential driver for process definitions: steps run one after
another in definition order, and a domain error caught by a boundary
continues at the boundary's target step. It exists to exercise the step
executor end to end; it does not schedule, persist or parallelize.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from .config import EngineConfig, get_config
from .context import ExecutionContext
from .definition import ErrorBoundary, ProcessDefinition
from .errors import EngineFault
from .executor import ScriptStepExecutor, StepOutcome
from .overrides import OverrideStore
from .propagation import BoundaryErrorPropagator, ErrorPropagator
from .scope import VariableScope
from .scripting import ScriptingEngines

logger = logging.getLogger(__name__)


def _log_advance(ctx: ExecutionContext) -> None:
    logger.debug(f"Leaving step '{ctx.step_id}'")


@dataclass
class RunResult:
    """Result of running a process definition."""
    success: bool
    completed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    variables: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0


class ProcessRunner:
    """
    Runs the script steps of a process definition in order.

    Usage:
        runner = ProcessRunner(load_process("order.yaml"))
        result = runner.run({"amount": 250})
    """

    # Guards against boundaries that loop back forever
    MAX_STEP_EXECUTIONS = 1000

    def __init__(
        self,
        definition: ProcessDefinition,
        config: EngineConfig | None = None,
        overrides: OverrideStore | None = None,
        engines: ScriptingEngines | None = None,
        propagator: ErrorPropagator | None = None,
    ):
        self.definition = definition
        self.config = config or get_config()
        self.executor = ScriptStepExecutor(
            propagator=propagator or BoundaryErrorPropagator(definition),
            config=self.config,
            overrides=overrides,
            engines=engines,
        )

    def run(self, variables: dict[str, Any] | None = None) -> RunResult:
        start = time.time()
        scope = VariableScope(self.definition.variables)
        scope.set_all(variables or {})

        result = RunResult(success=True)
        steps = self.definition.steps
        positions = {step.id: i for i, step in enumerate(steps)}

        index = 0
        executions = 0
        while index < len(steps):
            executions += 1
            if executions > self.MAX_STEP_EXECUTIONS:
                result.success = False
                result.errors.append(f"Aborted after {self.MAX_STEP_EXECUTIONS} step executions")
                break

            step = steps[index]
            outcome: dict[str, Any] = {}

            def on_boundary(boundary: ErrorBoundary, ctx: ExecutionContext) -> None:
                outcome["boundary"] = boundary

            ctx = ExecutionContext(
                current_step=step,
                process_definition_id=self.definition.id,
                scope=scope,
                advance=_log_advance,
                boundary_handler=on_boundary,
            )

            logger.info(f"Executing step '{step.id}' ({step.language})")
            try:
                status = self.executor.execute(ctx)
            except EngineFault as e:
                logger.error(f"Step '{step.id}' failed: {e}")
                result.success = False
                result.errors.append(f"{step.id}: {e}")
                break

            if status is StepOutcome.ERROR_PROPAGATED and "boundary" in outcome:
                target = outcome["boundary"].target
                if target not in positions:
                    result.success = False
                    result.errors.append(f"{step.id}: boundary targets unknown step '{target}'")
                    break
                index = positions[target]
                continue

            if status is StepOutcome.SKIPPED:
                result.skipped.append(step.id)
            elif status is StepOutcome.COMPLETED:
                result.completed.append(step.id)
            index += 1

        result.variables = scope.snapshot()
        result.duration_ms = int((time.time() - start) * 1000)
        return result
