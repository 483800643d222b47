"""
Template Script Engine.

The legacy minimal expression language. Scripts are text with ${...}
placeholders:
  - "${amount * 2}"            - a lone placeholder yields the raw value (240)
  - "Dear ${customer.name}"    - mixed text yields a string ("Dear Ada")

A placeholder that cannot be evaluated is left in the output untouched, so
a script made only of unresolvable placeholders comes back as its own text.
Callers treat that as "never evaluated".
"""

import logging
import re
from typing import Any

from .base import EvaluationRequest, ScriptEngine, ScriptResult
from .registry import register_engine
from ..expressions import ExpressionError, ExpressionEvaluator

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")


def format_value(value: Any) -> str:
    """
    Format a value for template substitution.

    Args:
        value: The value to format

    Returns:
        String representation
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    if isinstance(value, dict):
        return ", ".join(f"{k}: {format_value(v)}" for k, v in value.items())
    return str(value)


def render_template(template: str, evaluator: ExpressionEvaluator) -> Any:
    """
    Evaluate the placeholders of a template.

    Args:
        template: Text with ${...} placeholders
        evaluator: Evaluator holding the visible variables

    Returns:
        The raw value for a lone placeholder, otherwise the rendered text
    """
    if not template:
        return template

    lone = PLACEHOLDER.fullmatch(template.strip())
    if lone:
        try:
            return evaluator.evaluate(lone.group(1))
        except ExpressionError as e:
            logger.debug(f"Unresolved placeholder {lone.group(0)}: {e}")
            return template

    def replacer(match: re.Match) -> str:
        try:
            return format_value(evaluator.evaluate(match.group(1)))
        except ExpressionError as e:
            logger.debug(f"Unresolved placeholder {match.group(0)}: {e}")
            return match.group(0)

    return PLACEHOLDER.sub(replacer, template)


@register_engine("template", "juel")
class TemplateEngine(ScriptEngine):
    """Engine for ${...} templates."""

    def evaluate(self, request: EvaluationRequest) -> ScriptResult:
        evaluator = ExpressionEvaluator(request.visible_variables())
        return ScriptResult(value=render_template(request.script, evaluator))
