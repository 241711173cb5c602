"""
Expected, user-facing failures of the blog core.

Services raise these; the HTTP layer maps them to status codes. Anything that
is not a BlogError is an unexpected failure.
"""

from __future__ import annotations


class BlogError(Exception):
    """Base class for expected failures."""

    code = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(BlogError):
    """Referenced post, request, tag or comment does not exist."""

    code = "not_found"


class ForbiddenError(BlogError):
    """The actor is not allowed to perform the operation."""

    code = "forbidden"


class InvalidStateError(BlogError):
    """A status precondition does not hold."""

    code = "invalid_state"


class ConflictError(BlogError):
    """Duplicate pending request, duplicate name, or an exhausted retry budget."""

    code = "conflict"


class ValidationFailure(BlogError):
    """Malformed input."""

    code = "validation_failed"

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)
