"""
Expression Script Engine.

Evaluates a script body that is a single simpleeval expression.
"""

from .base import EvaluationRequest, ScriptEngine, ScriptResult
from .registry import register_engine
from ..expressions import ExpressionEvaluator


@register_engine("expression", "simpleeval")
class ExpressionEngine(ScriptEngine):
    """Single-expression scripts, e.g. `amount * 0.2 if vip else amount`."""

    def evaluate(self, request: EvaluationRequest) -> ScriptResult:
        evaluator = ExpressionEvaluator(request.visible_variables())
        return ScriptResult(value=evaluator.evaluate(request.script))
