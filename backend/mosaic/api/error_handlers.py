"""Error Handlers — global exception handlers for the Mosaic API.

Invariants:
    - LedgerError → the rejection envelope {error, reason, component} (403/409)
    - MosaicError → structured JSON with error code, message, severity
    - RequestValidationError → field-level error details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - LedgerError registered before MosaicError: Starlette picks the handler
      for the most specific class in the MRO
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mosaic.core.errors import ErrorSeverity, LedgerError, MosaicError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_ledger_error_handler(app)
    _register_mosaic_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_ledger_error_handler(app: FastAPI) -> None:
    """Register ledger rejection handler."""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        logger.warning(
            f"LedgerError: {exc.message}",
            extra={
                "error_code": exc.numeric_code,
                "ledger": exc.kind.value,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_envelope(),
        )


def _register_mosaic_error_handler(app: FastAPI) -> None:
    """Register Mosaic domain/infrastructure error handler."""

    @app.exception_handler(MosaicError)
    async def mosaic_error_handler(request: Request, exc: MosaicError):
        """Handle all Mosaic domain/infrastructure errors."""
        logger.error(
            f"MosaicError: {exc.message}",
            extra={
                "error_code": exc.code,
                "ledger": exc.context.ledger,
                "caller": exc.context.caller,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
