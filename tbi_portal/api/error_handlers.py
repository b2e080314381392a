"""Error Handlers — global exception rendering for the portal API.

Invariants:
    - PortalError -> its own http_status and to_response() envelope
    - RequestValidationError -> 400 with one entry per offending field
    - Any other exception -> 500 with a fixed message; details stay in the log

Design Decisions:
    - All three share the {"error": {code, message, kind, severity}} envelope so
      clients branch on error.kind alone
    - Action routes never reach these handlers: their failures travel inside the
      result envelope (api/responses.py)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tbi_portal.core.errors import ErrorKind, ErrorSeverity, PortalError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, handle_portal_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


def error_envelope(
    code: str, message: str, kind: ErrorKind, severity: ErrorSeverity, **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "kind": kind.value,
            "severity": severity.value,
            **extra,
        },
    }


async def handle_portal_error(request: Request, exc: PortalError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        extra={"error_code": exc.code, "error_kind": exc.kind.value, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Rejected request body: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorKind.VALIDATION, ErrorSeverity.WARNING, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        exc_info=exc, extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorKind.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )
