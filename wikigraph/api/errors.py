"""Mapping of engine error kinds onto HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from wikigraph.core.errors import (
    ConflictError,
    ContentGraphError,
    NotFoundError,
    StoreFailure,
    ValidationError,
)
from wikigraph.core.logging import get_logger
from wikigraph.schemas import ErrorResponse

logger = get_logger(__name__)

# Checked in order: a version/article mismatch is both NotFound and
# Validation and must surface as 404
ERROR_STATUS: list[tuple[type[ContentGraphError], int, str]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (ValidationError, status.HTTP_400_BAD_REQUEST, "validation_error"),
    (ConflictError, status.HTTP_409_CONFLICT, "conflict"),
    (StoreFailure, status.HTTP_503_SERVICE_UNAVAILABLE, "store_failure"),
]


def classify(exc: ContentGraphError) -> tuple[int, str]:
    """HTTP status code and error kind for an engine error."""
    for error_type, status_code, kind in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, kind
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"


async def content_graph_error_handler(request: Request, exc: ContentGraphError) -> JSONResponse:
    status_code, kind = classify(exc)

    if status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            error=str(exc),
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
    else:
        logger.info("Request rejected", path=request.url.path, kind=kind, error=str(exc))

    body = ErrorResponse(error=kind, message=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the engine error handlers on an application."""
    app.add_exception_handler(ContentGraphError, content_graph_error_handler)
