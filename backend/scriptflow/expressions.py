"""
Expression Evaluator for Skip Conditions and Input Bindings.

Uses simpleeval for safe expression evaluation. Expressions are evaluated
against a snapshot of a variable scope:
  - Skip conditions: skipExpression: "amount < 100"
  - Input bindings: source: "order.total * 1.2"
  - Boolean logic: status in ['open', 'pending'] and retries < 3

Nested dicts are reachable with dot notation (order.total), which simpleeval
resolves through its attribute-to-index fallback.

Security: simpleeval prevents arbitrary code execution by limiting
available operations and blocking imports/function calls.
"""

from typing import Any, Mapping

from simpleeval import (
    EvalWithCompoundTypes,
    FeatureNotAvailable,
    InvalidExpression,
    NameNotDefined,
)

from .errors import EngineFault


class ExpressionError(EngineFault):
    """Error evaluating an expression."""
    pass


class ExpressionEvaluator:
    """
    Safe expression evaluator using simpleeval.

    Example:
        evaluator = ExpressionEvaluator({"order": {"total": 120}, "vip": True})
        evaluator.evaluate("order.total > 100 and vip")  # True
        evaluator.evaluate("order.total * 2")            # 240
    """

    SAFE_FUNCTIONS = {
        "len": len,
        "str": str,
        "int": int,
        "float": float,
        "bool": bool,
        "min": min,
        "max": max,
        "abs": abs,
        "round": round,
        "sum": sum,
        "any": any,
        "all": all,
        "sorted": sorted,
        "lower": lambda s: s.lower() if isinstance(s, str) else s,
        "upper": lambda s: s.upper() if isinstance(s, str) else s,
        "strip": lambda s: s.strip() if isinstance(s, str) else s,
    }

    def __init__(self, variables: Mapping[str, Any] | None = None):
        self._names: dict[str, Any] = dict(variables or {})
        self._evaluator = EvalWithCompoundTypes(
            names=self._names,
            functions=self.SAFE_FUNCTIONS,
        )

    def set_context(self, variables: Mapping[str, Any]) -> None:
        """
        Replace the variables visible to expressions.

        Args:
            variables: Variables to make available
        """
        self._names.clear()
        self._names.update(variables)

    def update_context(self, updates: Mapping[str, Any]) -> None:
        """Add or update visible variables."""
        self._names.update(updates)

    def evaluate(self, expression: str) -> Any:
        """
        Evaluate an expression against the current variables.

        Args:
            expression: The expression to evaluate

        Returns:
            The result of the expression, None for a blank expression

        Raises:
            ExpressionError: If the expression is invalid or unsafe
        """
        if not expression or not expression.strip():
            return None

        try:
            return self._evaluator.eval(expression.strip())
        except FeatureNotAvailable as e:
            raise ExpressionError(f"Unsafe operation in expression '{expression}': {e}") from e
        except NameNotDefined as e:
            raise ExpressionError(f"Unknown variable in expression '{expression}': {e}") from e
        except SyntaxError as e:
            raise ExpressionError(f"Invalid syntax in expression '{expression}': {e}") from e
        except InvalidExpression as e:
            raise ExpressionError(f"Invalid expression '{expression}': {e}") from e
        except Exception as e:
            raise ExpressionError(f"Error evaluating '{expression}': {e}") from e

    def evaluate_bool(self, expression: str, default: bool = False) -> bool:
        """
        Evaluate an expression that must produce a boolean.

        Args:
            expression: The expression to evaluate
            default: Value to return if expression is empty/None

        Raises:
            ExpressionError: If the result is not a bool
        """
        if not expression or not expression.strip():
            return default

        result = self.evaluate(expression)
        if not isinstance(result, bool):
            raise ExpressionError(
                f"Expression '{expression}' did not evaluate to a boolean: {result!r}"
            )
        return result


def evaluate_condition(expression: str, variables: Mapping[str, Any]) -> bool:
    """Convenience function to evaluate a boolean condition."""
    return ExpressionEvaluator(variables).evaluate_bool(expression)


def evaluate_expression(expression: str, variables: Mapping[str, Any]) -> Any:
    """Convenience function to evaluate an expression."""
    return ExpressionEvaluator(variables).evaluate(expression)
