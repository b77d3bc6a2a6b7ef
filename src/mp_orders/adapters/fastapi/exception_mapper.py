"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mp_orders.adapters.fastapi.schemas import error_response
from mp_orders.kernel.errors import (
    BaseError,
    DomainError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_MESSAGE = "Internal server error"


class FastAPIExceptionMapper:
    """Register error → HTTP status mappings on a FastAPI app.

    Error body schema::

        {"success": false, "error": {"code": "NOT_FOUND", "message": "..."}}

    Mappings
    --------
    ``ValidationError``       → 400 ``VALIDATION_ERROR``
    ``UnauthorizedError``     → 401 ``UNAUTHORIZED``
    ``ForbiddenError``        → 403 ``FORBIDDEN``
    ``NotFoundError``         → 404 ``NOT_FOUND``
    ``DomainError``           → 400 ``VALIDATION_ERROR``
    ``InfrastructureError``   → 500 ``INTERNAL_SERVER_ERROR``
    ``BaseError``             → 500 ``INTERNAL_SERVER_ERROR``

    Request bodies rejected by FastAPI itself are reported as 400
    ``VALIDATION_ERROR`` as well.  Messages of 500 responses are replaced by
    a generic text; the original error is logged.
    """

    def __init__(self) -> None:
        # ORDER MATTERS: more-specific subtypes first
        self._map: list[tuple[type[BaseError], int, str]] = [
            (ValidationError, 400, "VALIDATION_ERROR"),
            (UnauthorizedError, 401, "UNAUTHORIZED"),
            (ForbiddenError, 403, "FORBIDDEN"),
            (NotFoundError, 404, "NOT_FOUND"),
            (DomainError, 400, "VALIDATION_ERROR"),
            (InfrastructureError, 500, "INTERNAL_SERVER_ERROR"),
            (BaseError, 500, "INTERNAL_SERVER_ERROR"),
        ]

    def resolve(self, exc: BaseException) -> tuple[int, str]:
        for exc_type, status, code in self._map:
            if isinstance(exc, exc_type):
                return status, code
        return 500, "INTERNAL_SERVER_ERROR"

    def register(self, app: FastAPI) -> None:
        """Register all error handlers on a ``FastAPI`` app."""
        for exc_type, status, code in self._map:
            app.add_exception_handler(exc_type, self._make_handler(status, code))
        app.add_exception_handler(RequestValidationError, self._request_validation_handler)

    @staticmethod
    def _make_handler(status: int, code: str) -> Callable[[Request, Exception], JSONResponse]:
        def handler(request: Request, exc: Exception) -> JSONResponse:
            message = exc.message if isinstance(exc, BaseError) else str(exc)
            if status >= 500:
                logger.error(
                    "http.error method=%s path=%s error=%s",
                    request.method, request.url.path, exc,
                )
                message = INTERNAL_MESSAGE
            else:
                logger.info(
                    "http.rejected method=%s path=%s status=%d code=%s message=%s",
                    request.method, request.url.path, status, code, message,
                )
            return JSONResponse(status_code=status, content=error_response(code, message))

        return handler

    @staticmethod
    def _request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
        errors = exc.errors() if isinstance(exc, RequestValidationError) else []
        parts = []
        for err in errors:
            field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            parts.append(f"{field}: {err.get('msg', 'invalid value')}" if field else err.get("msg", ""))
        message = "; ".join(parts) or "Invalid request"
        logger.info(
            "http.rejected method=%s path=%s status=400 code=VALIDATION_ERROR message=%s",
            request.method, request.url.path, message,
        )
        return JSONResponse(status_code=400, content=error_response("VALIDATION_ERROR", message))


__all__ = ["FastAPIExceptionMapper"]
