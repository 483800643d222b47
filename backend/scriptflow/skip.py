"""
Skip Expressions.

A step with a skip expression is bypassed when the expression evaluates to
True. Skip expressions only take effect when they are enabled, either
engine-wide through the configuration or per process instance through the
_SKIP_EXPRESSION_ENABLED variable.
"""

import logging

from .config import EngineConfig
from .context import ExecutionContext
from .errors import SkipExpressionError
from .expressions import ExpressionError, ExpressionEvaluator
from .overrides import SKIP_EXPRESSION_KEY, OverrideStore

logger = logging.getLogger(__name__)

SKIP_ENABLED_VARIABLE = "_SKIP_EXPRESSION_ENABLED"


class SkipExpressionEvaluator:
    """Decides whether a step is bypassed. Never writes to the scope."""

    def __init__(self, config: EngineConfig, overrides: OverrideStore | None = None):
        self.config = config
        self.overrides = overrides

    def _effective_expression(self, expression: str | None, step_id: str, ctx: ExecutionContext) -> str | None:
        if self.overrides is None or not self.config.enable_override_cache:
            return expression

        props = self.overrides.get_element_properties(step_id, ctx.process_definition_id)
        if props and props.get(SKIP_EXPRESSION_KEY):
            return str(props[SKIP_EXPRESSION_KEY])
        return expression

    def is_enabled(self, expression: str | None, step_id: str, ctx: ExecutionContext) -> bool:
        """Check whether the skip expression of a step is active."""
        expression = self._effective_expression(expression, step_id, ctx)
        if not expression or not expression.strip():
            return False

        if self.config.skip_expressions_enabled:
            return True

        return bool(ctx.scope.get(SKIP_ENABLED_VARIABLE, False))

    def should_skip(self, expression: str | None, step_id: str, ctx: ExecutionContext) -> bool:
        """
        Evaluate the skip expression of a step.

        Raises:
            SkipExpressionError: If the expression fails or is not boolean
        """
        expression = self._effective_expression(expression, step_id, ctx)
        if not expression:
            return False

        evaluator = ExpressionEvaluator(ctx.scope.snapshot())
        try:
            skip = evaluator.evaluate_bool(expression)
        except ExpressionError as e:
            raise SkipExpressionError(
                f"Skip expression '{expression}' of step '{step_id}' failed: {e}"
            ) from e

        if skip:
            logger.info(f"Skipping step '{step_id}' ({expression})")
        return skip
