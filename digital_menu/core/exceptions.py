"""
Domain Exceptions

Every failure a service can report to a caller is one of these classes.
The HTTP layer maps them onto status codes in one place (see
``digital_menu.main``), so services never raise ``HTTPException`` themselves.

Hierarchy:
    DigitalMenuError
    ├── NotFoundError
    │   └── UserNotFoundError
    ├── ValidationError
    ├── InvalidStateError
    │   ├── InvalidCodeError
    │   ├── ExpiredCodeError
    │   ├── RateLimitedError
    │   └── InvalidTransitionError
    ├── UpstreamError
    └── InternalError
"""

from typing import Optional


class DigitalMenuError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    error: str = "internal_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DigitalMenuError):
    status_code = 404
    error = "not_found"
    default_message = "Resource not found"


class UserNotFoundError(NotFoundError):
    error = "user_not_found"
    default_message = "User not found"


class ValidationError(DigitalMenuError):
    status_code = 400
    error = "validation_error"
    default_message = "Invalid request"


class InvalidStateError(DigitalMenuError):
    status_code = 409
    error = "invalid_state"
    default_message = "Operation not allowed in the current state"


class InvalidCodeError(InvalidStateError):
    status_code = 400
    error = "invalid_code"
    default_message = "Invalid OTP"


class ExpiredCodeError(InvalidStateError):
    status_code = 400
    error = "expired_code"
    default_message = "OTP expired"


class RateLimitedError(InvalidStateError):
    status_code = 429
    error = "rate_limited"
    default_message = "Too many requests, try again later"


class InvalidTransitionError(InvalidStateError):
    error = "invalid_transition"
    default_message = "Status transition not allowed"


class UpstreamError(DigitalMenuError):
    """An external provider (image host, e-mail) failed."""

    status_code = 502
    error = "upstream_error"
    default_message = "An external service is unavailable"


class InternalError(DigitalMenuError):
    error = "internal_error"
