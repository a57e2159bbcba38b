"""
Error taxonomy shared by the API, the orchestrator and the client.

Every error carries the HTTP status code it is rendered with, so the server
can serialize it and the client can map a response back onto the same class.
"""

from typing import Optional


class AppError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Bad email, password, name, prompt or upload."""

    status_code = 400
    default_message = "Invalid input"


class AuthorizationError(AppError):
    """Caller does not own the target row, or is not signed in."""

    status_code = 403
    default_message = "You do not have access to this generation"


class GenerationNotFoundError(AppError):
    status_code = 404
    default_message = "Generation not found"


class QuotaExhaustedError(AppError):
    """Image gateway answered 402."""

    status_code = 402
    default_message = "AI credits depleted. Please add more credits."


class RateLimitError(AppError):
    """Image gateway answered 429."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class UpstreamError(AppError):
    """Any other gateway failure, including a response without an image."""

    status_code = 500
    default_message = "Image generation failed"


class UnknownError(AppError):
    status_code = 500


_BY_STATUS = {
    400: ValidationError,
    401: AuthorizationError,
    402: QuotaExhaustedError,
    403: AuthorizationError,
    404: GenerationNotFoundError,
    422: ValidationError,
    429: RateLimitError,
}


def error_for_status(status_code: int, message: Optional[str] = None) -> AppError:
    """Build the error matching an HTTP status code returned by the API."""
    cls = _BY_STATUS.get(status_code, UpstreamError)
    return cls(message)
