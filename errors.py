"""
errors.py — Typed failures raised by services and rendered as JSON error bodies.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong!"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class ValidationFailure(AppError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, details=None):
        super().__init__(message, details=details)


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = 403
    default_message = "Invalid or expired token"


class UploadRejected(AppError):
    status_code = 400
    default_message = "Invalid file type"


class StorageFailure(AppError):
    status_code = 500
    default_message = "Failed to save data"


class UpstreamFailure(AppError):
    status_code = 500
    default_message = "Failed to send email"


class RateLimited(AppError):
    status_code = 429
    default_message = "Too many requests, please try again later."


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid credentials"

    USERNAME_NOT_FOUND = "username_not_found"
    INCORRECT_PASSWORD = "incorrect_password"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(errorType=reason)


class TokenExpired(AppError):
    status_code = 400
    default_message = "Password reset token has expired."


class InvalidOrExpiredToken(AppError):
    status_code = 400
    default_message = "Invalid or expired password reset token."
