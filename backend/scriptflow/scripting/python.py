"""
Python Script Engine.

Runs a Python body in-process with exec/eval over the visible variables:

    total = sum(item["price"] for item in items)
    if total > limit:
        raise DomainError("E_LIMIT", f"total {total} over {limit}")
    total * 1.2

The value of a trailing expression statement is the script result; a body
that ends with any other statement produces None. Top-level names the
script creates or rebinds are reported back as script variables.

Only run trusted scripts with this engine. The builtins handed to a script
are a short list of conveniences, not a sandbox: object introspection still
reaches everything loaded in the interpreter. Use the "expression" language
for untrusted input.
"""

import ast
import builtins
import types
from typing import Any

from .base import EvaluationRequest, ScriptEngine, ScriptResult
from .registry import register_engine
from ..errors import DomainError

SCRIPT_BUILTIN_NAMES = (
    "abs", "all", "any", "bool", "dict", "divmod", "enumerate", "filter",
    "float", "format", "int", "isinstance", "len", "list", "map", "max",
    "min", "print", "range", "repr", "reversed", "round", "set", "sorted",
    "str", "sum", "tuple", "zip",
    "Exception", "ArithmeticError", "KeyError", "TypeError", "ValueError",
    "ZeroDivisionError",
)

SCRIPT_BUILTINS = {name: getattr(builtins, name) for name in SCRIPT_BUILTIN_NAMES}

# Names injected into every script namespace
SCRIPT_GLOBALS = {"DomainError": DomainError}


def _is_script_variable(name: str, value: Any) -> bool:
    if name.startswith("_") or name in SCRIPT_GLOBALS:
        return False
    return not isinstance(value, (types.ModuleType, types.FunctionType, type))


@register_engine("python", "py")
class PythonEngine(ScriptEngine):
    """Engine for Python script bodies."""

    def evaluate(self, request: EvaluationRequest) -> ScriptResult:
        filename = f"<script {request.execution_id or 'anonymous'}>"
        tree = ast.parse(request.script, filename=filename, mode="exec")

        trailing = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            trailing = ast.Expression(body=tree.body.pop().value)

        provided = request.visible_variables()
        namespace: dict[str, Any] = {"__builtins__": SCRIPT_BUILTINS, **SCRIPT_GLOBALS}
        namespace.update(provided)

        exec(compile(tree, filename, "exec"), namespace)
        value = eval(compile(trailing, filename, "eval"), namespace) if trailing else None

        script_variables = {
            name: val
            for name, val in namespace.items()
            if _is_script_variable(name, val)
            and (name not in provided or provided[name] is not val)
        }
        return ScriptResult(value=value, script_variables=script_variables)
