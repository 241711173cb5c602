"""Maps expected service failures to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.domain.errors import (
    BlogError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[BlogError], int] = {
    NotFoundError: 404,
    ForbiddenError: 403,
    InvalidStateError: 400,
    ConflictError: 409,
    ValidationFailure: 422,
}


def status_for(exc: BlogError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]  # type: ignore[index]
    return 400


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.code)

    content: dict[str, str] = {"error": exc.code, "message": exc.message}
    if isinstance(exc, ValidationFailure) and exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogError, blog_error_handler)  # type: ignore[arg-type]
