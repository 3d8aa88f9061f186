"""Exception handlers mapping the ranker's boundary errors to HTTP responses.

Every error body uses the same envelope: ``{"status": "error", "message": "..."}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from contribution_ranker.domain.exceptions import (
    ContributionRankerError,
    InvalidSkillProfileError,
    InvalidSnapshotIdError,
    SnapshotNotFoundError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[ContributionRankerError], int] = {
    InvalidSkillProfileError: 422,
    InvalidSnapshotIdError: 422,
    SnapshotNotFoundError: 404,
}


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


def status_for(exc: ContributionRankerError) -> int:
    """Most specific mapped status along the exception's MRO; 400 otherwise."""
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


async def _ranker_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ContributionRankerError)
    status_code = status_for(exc)
    logger.warning(
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        status_code,
        type(exc).__name__,
        exc,
    )
    return _error_json(status_code, str(exc))


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    parts = []
    for err in exc.errors():
        # drop the leading "body" / "path" segment
        loc = [str(p) for p in err.get("loc", ())][1:]
        field_name = ".".join(loc) or "request"
        parts.append(f"{field_name}: {err.get('msg', 'invalid value')}")
    return _error_json(422, "; ".join(parts))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_json(500, "An unexpected error occurred. Please try again later.")


def register_error_handlers(app: FastAPI) -> None:
    """Attach the ranker's exception handlers to *app*."""
    app.add_exception_handler(ContributionRankerError, _ranker_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unexpected_error)
