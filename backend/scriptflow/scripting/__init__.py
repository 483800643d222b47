"""
Script Engines for Step Execution.

Each language has a corresponding engine that knows how to:
  - Evaluate a script body over the variables it is allowed to see
  - Report the variables the script created, when the language allows it
"""

from .base import EvaluationRequest, ScriptEngine, ScriptResult
from .registry import (
    ScriptingEngines,
    get_engine,
    is_registered,
    list_languages,
    register_engine,
)

# Import all engines to register them
from . import expression, python, template

__all__ = [
    "EvaluationRequest",
    "ScriptEngine",
    "ScriptResult",
    "ScriptingEngines",
    "get_engine",
    "is_registered",
    "list_languages",
    "register_engine",
]
