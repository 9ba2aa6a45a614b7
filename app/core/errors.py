# app/core/errors.py
"""
Domain errors raised by the crud layer and the auth dependencies.

Every error carries the HTTP status it maps to; the handlers in app.main turn
them into the standard ``{"success": false, "error": ...}`` envelope.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class OutOfRange(ValidationError):
    default_message = "Value out of range"


class InvalidOwner(AppError):
    status_code = 400
    default_message = "Owner must be an active teacher"


class InvalidState(AppError):
    status_code = 400
    default_message = "Operation not allowed in the current state"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AppError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Resource already exists"


class CapacityExceeded(Conflict):
    default_message = "Capacity exceeded"


class RateLimited(AppError):
    status_code = 429
    default_message = "Too many requests, please try again later"
