"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to API clients.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors rendered as ``{success: false, error}``."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Invalid request"


class Unauthorized(AppError):
    """Missing or invalid credentials."""

    status_code = 401
    default_message = "Unauthorized"


class Forbidden(Unauthorized):
    """Valid credentials, but the resource belongs to someone else."""

    status_code = 403
    default_message = "Unauthorized"


class NotFound(AppError):
    """No record matches the request."""

    status_code = 404
    default_message = "Not found"


class UpstreamFailure(AppError):
    """An external collaborator (OpenAI, Google) failed or timed out."""

    status_code = 502
    default_message = "Upstream service unavailable"


class InternalError(AppError):
    """Unexpected failure, e.g. store connection loss."""

    status_code = 500
    default_message = "Something went wrong"


__all__ = [
    "AppError",
    "ValidationError",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "UpstreamFailure",
    "InternalError",
]
