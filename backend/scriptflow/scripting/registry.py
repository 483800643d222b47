"""
Script Engine Registry.

Provides a registry for script engines, allowing dynamic dispatch
based on the language tag of a step, and the ScriptingEngines facade the
step executor talks to.
"""

import logging
from typing import Type

from ..errors import EngineFault, ScriptEvaluationError, UnknownLanguageError
from .base import EvaluationRequest, ScriptEngine, ScriptResult

logger = logging.getLogger(__name__)


# Global registry of script engines, keyed by lower-cased language tag
_ENGINES: dict[str, Type[ScriptEngine]] = {}


def register_engine(*languages: str):
    """
    Decorator to register a script engine for one or more languages.

    Usage:
        @register_engine("python")
        class PythonEngine(ScriptEngine):
            ...
    """
    def decorator(cls: Type[ScriptEngine]):
        for language in languages:
            _ENGINES[language.lower()] = cls
        cls.language = languages[0]
        return cls
    return decorator


def get_engine(language: str) -> ScriptEngine:
    """
    Get an engine instance for a language.

    Raises:
        UnknownLanguageError: If no engine is registered for the language
    """
    key = (language or "").lower()
    if key not in _ENGINES:
        raise UnknownLanguageError(f"No script engine registered for language: {language}")

    return _ENGINES[key]()


def list_languages() -> list[str]:
    """List all registered language tags."""
    return list(_ENGINES.keys())


def is_registered(language: str) -> bool:
    return (language or "").lower() in _ENGINES


class ScriptingEngines:
    """
    Evaluates requests with the engine registered for their language.

    Engine failures that are not already engine faults are wrapped in a
    ScriptEvaluationError with the original exception as its cause.
    """

    def __init__(self, engines: dict[str, ScriptEngine] | None = None):
        # Explicit engines take precedence over the global registry
        self._engines = {k.lower(): v for k, v in (engines or {}).items()}

    def engine_for(self, language: str) -> ScriptEngine:
        key = (language or "").lower()
        if key in self._engines:
            return self._engines[key]
        return get_engine(language)

    def evaluate(self, request: EvaluationRequest) -> ScriptResult:
        engine = self.engine_for(request.language)

        try:
            result = engine.evaluate(request)
        except EngineFault:
            raise
        except Exception as e:
            raise ScriptEvaluationError(
                f"Error evaluating {request.language} script for {request.execution_id}: {e}"
            ) from e

        if request.store_script_variables and result.script_variables:
            logger.debug(f"Storing script variables {sorted(result.script_variables)}")
            request.scope.set_all(result.script_variables)

        return result
