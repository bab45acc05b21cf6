"""
Workflow error taxonomy

Every error raised by the services carries the HTTP status it maps to. The
exception handlers registered in main.py render them as
{"success": false, "error": message}.
"""


class WorkflowError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WorkflowError):
    """Case, sub-record or token does not resolve."""

    status_code = 404


class ConflictError(WorkflowError):
    """Write rejected because of existing state (decided quote, duplicate email)."""

    status_code = 409


class ValidationFailedError(WorkflowError):
    """Payload is missing required fields or is malformed."""

    status_code = 400


class AuthenticationError(WorkflowError):
    """No session, or the session token is unknown."""

    status_code = 401


class UnauthorizedError(WorkflowError):
    """Session role is not allowed on this route."""

    status_code = 403


class ExternalFailureError(WorkflowError):
    """Notification, document or third-party call failed."""

    status_code = 502
