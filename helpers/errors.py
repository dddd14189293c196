"""
Error taxonomy for the booking API.

Domain helpers raise these; the handlers registered in ``main.py`` turn
them into the ``{success, message, errors}`` envelope. ``errors`` is always
a list of ``{"field": ..., "message": ...}`` dicts.
"""

from typing import Dict, List, Optional

FieldError = Dict[str, str]


def field_error(field: str, message: str) -> FieldError:
    return {"field": field, "message": message}


class AppError(Exception):
    """Base class for expected, caller-recoverable failures."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[FieldError]] = None) -> None:
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400

    def __init__(self, errors: List[FieldError], message: str = "Validation failed") -> None:
        super().__init__(message, errors)


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    """The acting user may not perform this mutation."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """The requested slot is already held by an active appointment."""

    status_code = 409


class InvalidTransitionError(AppError):
    """The status change is not allowed from the current status."""

    status_code = 400

    def __init__(self, current: str, requested: str, message: Optional[str] = None) -> None:
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot change appointment status from '{current}' to '{requested}'.")
