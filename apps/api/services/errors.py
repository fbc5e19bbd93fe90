"""Typed API errors rendered into the uniform error envelope."""

from typing import Any, List, Optional


class ApiError(Exception):
    """Base class for errors that surface to API callers."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def to_envelope(self) -> dict:
        return {
            "statusCode": self.status_code,
            "data": None,
            "message": self.message,
            "success": False,
            "errors": self.errors,
        }


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Invalid access token"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "User does not exist"


class InvalidCredentials(ApiError):
    status_code = 401
    default_message = "Invalid user credentials"


class InvalidToken(ApiError):
    status_code = 401
    default_message = "Invalid refresh token"


class Forbidden(ApiError):
    status_code = 403
    default_message = "You are not allowed to modify this resource"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too many requests, try again later"


class InternalError(ApiError):
    status_code = 500
    default_message = "Something went wrong, please try again"


def require_fields(**fields: Any) -> None:
    """Raise BadRequest naming every missing or blank field."""
    missing = [name for name, value in fields.items() if value is None or not str(value).strip()]
    if missing:
        raise BadRequest("All fields are required", errors=[{"field": name} for name in missing])
