"""
Domain Error Propagation.

Routes a domain error to the error boundary attached to the step that threw
it. When no boundary catches the error it travels further up as an
UnhandledDomainError.
"""

import logging
from typing import Protocol

from .context import ExecutionContext
from .definition import ErrorBoundary, ProcessDefinition
from .errors import DomainError, UnhandledDomainError

logger = logging.getLogger(__name__)

ERROR_CODE_VARIABLE = "_error_code"
ERROR_MESSAGE_VARIABLE = "_error_message"


class ErrorPropagator(Protocol):
    def propagate(self, error: DomainError, ctx: ExecutionContext) -> None:
        ...


class BoundaryErrorPropagator:
    """Dispatches domain errors to the boundaries of a process definition."""

    def __init__(self, definition: ProcessDefinition):
        self.definition = definition

    def find_boundary(self, step_id: str, error_code: str) -> ErrorBoundary | None:
        """
        Find the boundary catching an error code on a step.

        An exact code match wins over a catch-all boundary.
        """
        boundaries = self.definition.boundaries_for(step_id)
        for boundary in boundaries:
            if boundary.error_code == error_code:
                return boundary
        for boundary in boundaries:
            if boundary.matches(error_code):
                return boundary
        return None

    def propagate(self, error: DomainError, ctx: ExecutionContext) -> None:
        boundary = self.find_boundary(ctx.step_id, error.error_code)
        if boundary is None:
            raise UnhandledDomainError(error, ctx.step_id) from error

        logger.info(
            f"Error '{error.error_code}' from step '{ctx.step_id}' caught by boundary -> '{boundary.target}'"
        )
        ctx.scope.set(ERROR_CODE_VARIABLE, error.error_code)
        ctx.scope.set(ERROR_MESSAGE_VARIABLE, error.message)

        if ctx.boundary_handler is not None:
            ctx.boundary_handler(boundary, ctx)
