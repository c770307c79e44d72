from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_206_PARTIAL_CONTENT,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

ERROR_CODE_BY_STATUS: dict[int, str] = {
    206: "partial_content",
    400: "bad_request",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    500: "internal_error",
    503: "service_unavailable",
}


class MissingRequiredSettingsError(Exception):
    """Raised when required settings are missing."""

    def __init__(self, missing_fields: list[str]) -> None:
        """Initialize with list of missing field names."""
        self.missing_fields = missing_fields
        super().__init__(f"Missing required environment variables: {', '.join(missing_fields)}")


class InvalidSettingsError(Exception):
    """Raised when settings are invalid."""

    def __init__(self, invalid_fields: list[tuple[str, str]]) -> None:
        """Initialize with list of invalid field names and messages."""
        self.invalid_fields = invalid_fields
        summary = ", ".join(f"{field}: {message}" for field, message in invalid_fields)
        super().__init__(f"Invalid environment variables: {summary}")


class ErrorResponse(BaseModel):
    """Standardized error response payload."""

    error: str
    message: str
    details: Any | None = None


class DomainError(Exception):
    """Base error for service-layer failures that callers can act on."""

    status_code: int = HTTP_400_BAD_REQUEST

    def __init__(self, message: str, error_code: str | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or _map_status_to_error(self.status_code)
        self.details = details


class InvalidInputError(DomainError):
    """Raised when input has the wrong shape or value."""

    status_code = HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    status_code = HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = HTTP_409_CONFLICT


class StorageError(DomainError):
    """Raised when the filesystem rejects a read or write."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR


class PartialContentError(DomainError):
    """Raised when a batch committed some items and failed others."""

    status_code = HTTP_206_PARTIAL_CONTENT


def _map_status_to_error(status_code: int) -> str:
    return ERROR_CODE_BY_STATUS.get(status_code, "error")


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _internal_error_response() -> JSONResponse:
    payload = ErrorResponse(
        error=_map_status_to_error(HTTP_500_INTERNAL_SERVER_ERROR),
        message=_status_phrase(HTTP_500_INTERNAL_SERVER_ERROR),
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, StarletteHTTPException):
        return _internal_error_response()
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail and "message" in detail:
        payload = ErrorResponse.model_validate(detail).model_dump(exclude_none=True)
    else:
        payload = ErrorResponse(
            error=_map_status_to_error(exc.status_code),
            message=str(detail) if detail else _status_phrase(exc.status_code),
        ).model_dump(exclude_none=True)
    return JSONResponse(
        status_code=exc.status_code,
        content=payload,
        headers=getattr(exc, "headers", None),
    )


def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, DomainError):
        return _internal_error_response()
    payload = ErrorResponse(error=exc.error_code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump(exclude_none=True))


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.exception("Unhandled exception", exc_info=exc)
    return _internal_error_response()


def request_validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, RequestValidationError):
        return _internal_error_response()

    payload = ErrorResponse(
        error=_map_status_to_error(422),
        message="Request validation failed",
        details=exc.errors(),
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=422, content=payload)
