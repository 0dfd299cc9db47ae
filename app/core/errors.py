"""
Typed failures raised by the lifecycle core.

Every business-rule violation is raised synchronously at command time.
The HTTP layer maps each class onto a status code so operator UIs can
tell a hidden control (forbidden) from a rejected transition (conflict).
"""


class LifecycleError(Exception):
    """Base class for all command failures."""

    status_code = 400
    error_code = "lifecycle_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LifecycleError):
    """Malformed or missing required input."""

    status_code = 422
    error_code = "validation_error"


class NotFoundError(LifecycleError):
    """Unknown account or report id."""

    status_code = 404
    error_code = "not_found"


class ForbiddenError(LifecycleError):
    """Actor lacks the role, ownership or agency match for the command."""

    status_code = 403
    error_code = "forbidden"


class ConflictError(LifecycleError):
    """Requested transition violates the lifecycle state machine."""

    status_code = 409
    error_code = "conflict"
