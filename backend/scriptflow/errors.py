"""
Fault Taxonomy for Script Step Execution.

Every fault the engine raises derives from EngineFault. A DomainError is
the recoverable kind: it carries an error code and is routed to an error
boundary instead of aborting the step attempt.

classify_fault() turns an arbitrary exception into a tagged Fault so the
executor can decide between propagating, unwrapping and rethrowing.
"""

from dataclasses import dataclass
from enum import Enum


class EngineFault(Exception):
    """Base class for faults raised by the scriptflow engine."""
    pass


class DomainError(EngineFault):
    """
    A named, recoverable business error.

    Scripts raise it to hand control to a matching error boundary.
    """

    def __init__(self, error_code: str, message: str | None = None):
        self.error_code = error_code
        self.message = message or f"Domain error {error_code}"
        super().__init__(self.message)


class ScriptEvaluationError(EngineFault):
    """A script engine failed while evaluating a script."""
    pass


class MalformedResultError(EngineFault):
    """The script engine returned a result that was never really evaluated."""

    def __init__(self, script: str, execution: str, language: str = "template"):
        self.script = script
        self.execution = execution
        super().__init__(f'Error evaluating {language} script: "{script}" for {execution}')


class UnknownLanguageError(EngineFault):
    """No script engine is registered for the requested language."""
    pass


class SkipExpressionError(EngineFault):
    """A skip expression could not be turned into a skip decision."""
    pass


class UnhandledDomainError(EngineFault):
    """No error boundary caught a domain error."""

    def __init__(self, error: DomainError, step_id: str | None = None):
        self.error = error
        self.error_code = error.error_code
        where = f" thrown by step '{step_id}'" if step_id else ""
        super().__init__(
            f"No catching boundary found for error with code '{error.error_code}'{where}"
        )


class FaultKind(str, Enum):
    """How the executor treats a fault."""
    DOMAIN = "domain"
    ENGINE = "engine"
    OTHER = "other"


@dataclass(frozen=True)
class Fault:
    """
    A classified fault.

    `error` is the exception the executor acts upon: the unwrapped root for
    DOMAIN and ENGINE, the original exception for OTHER.
    """
    kind: FaultKind
    error: BaseException


def root_cause(exc: BaseException) -> BaseException:
    """Follow the explicit cause chain down to its root."""
    seen = {id(exc)}
    current = exc
    while current.__cause__ is not None and id(current.__cause__) not in seen:
        current = current.__cause__
        seen.add(id(current))
    return current


def classify_fault(exc: BaseException) -> Fault:
    """
    Classify a fault by its root cause.

    Args:
        exc: The exception raised while evaluating a script

    Returns:
        Fault tagged DOMAIN, ENGINE or OTHER
    """
    root = root_cause(exc)
    if isinstance(root, DomainError):
        return Fault(FaultKind.DOMAIN, root)
    if isinstance(root, EngineFault):
        return Fault(FaultKind.ENGINE, root)
    return Fault(FaultKind.OTHER, exc)
