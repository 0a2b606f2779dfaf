# cloka_events/core/exceptions.py
"""
Domain errors for the registration / approval / check-in workflow.

Every workflow operation either returns its payload or raises exactly one
of these. The HTTP layer renders them through a single exception handler
(see ``cloka_events.main``), so routes never build error responses by hand.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for expected workflow failures."""

    code = "workflow_error"
    status_code = 400
    retryable = False
    default_message = "The request could not be completed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Lookups ---


class NotFoundError(WorkflowError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class EventNotFoundError(NotFoundError):
    code = "event_not_found"
    default_message = "Event not found"


class RegistrationNotFoundError(NotFoundError):
    code = "registration_not_found"
    default_message = "Registration not found"


# --- Registration ---


class ConflictError(WorkflowError):
    code = "conflict"
    status_code = 409
    default_message = "The request conflicts with the current state"


class AlreadyRegisteredError(ConflictError):
    code = "already_registered"
    default_message = "You are already registered for this event"


class EventInPastError(WorkflowError):
    code = "event_in_past"
    default_message = (
        "This event has already taken place and is no longer open for registration"
    )


# --- Check-in tokens ---


class CheckInTokenError(WorkflowError):
    code = "invalid_token"


class MalformedTokenError(CheckInTokenError):
    code = "malformed_token"
    default_message = "Invalid token format"


class EventMismatchError(CheckInTokenError):
    code = "event_mismatch"
    default_message = "Token does not match event"


class TokenExpiredError(CheckInTokenError):
    code = "token_expired"
    default_message = "Token has expired, please scan the QR code again"


# --- Check-in preconditions ---


class NotApprovedError(WorkflowError):
    code = "not_approved"
    status_code = 403
    default_message = "Your registration for this event has not been approved"


class AlreadyCheckedInError(ConflictError):
    code = "already_checked_in"
    default_message = "You have already checked in for this event"


class InvalidSecretError(WorkflowError):
    code = "invalid_secret"
    status_code = 403
    default_message = "Invalid secret. Please check and try again."


# --- Infrastructure ---


class StorageError(WorkflowError):
    """The persistence gateway failed; the caller may retry."""

    code = "storage_error"
    status_code = 503
    retryable = True
    default_message = "The registration store is temporarily unavailable"
