"""Mapping from domain errors to HTTP status codes."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from studio_quotes.core.exceptions import (
    ConflictError,
    NotFoundError,
    StudioQuotesException,
    TransactionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[StudioQuotesException], int], ...] = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def map_domain_error(exc: Exception) -> tuple[int, str]:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code, str(exc)
    if isinstance(exc, TransactionError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "The operation failed and was rolled back"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"


def to_http_exception(exc: Exception) -> HTTPException:
    code, detail = map_domain_error(exc)
    if code >= 500:
        logger.error("api.request_failed", extra={"event": "api.request_failed", "error": str(exc)})
    return HTTPException(status_code=code, detail=detail)
