"""Error Handlers: global exception handlers for errors raised outside resolvers.

Invariants:
    - GuildhallError → structured JSON with error code, message, severity
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Two layers: domain (GuildhallError) and catch-all (Exception)
    - Reached by FastAPI dependencies (multipart limits in api/graphql/uploads.py
      reject a request before GraphQL executes) and by the REST health routes
    - Errors inside resolvers are handled by the schema (api/graphql/schema.py):
      GraphQL answers 200 with an `errors` list
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from guildhall.core.errors import GuildhallError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_guildhall_error_handler(app)
    _register_generic_error_handler(app)


def _register_guildhall_error_handler(app: FastAPI) -> None:

    @app.exception_handler(GuildhallError)
    async def guildhall_error_handler(request: Request, exc: GuildhallError):
        """Handle domain errors raised before or outside GraphQL execution."""
        logger.warning(
            f"{type(exc).__name__}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
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
                    "category": ErrorCategory.INTERNAL.value,
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )
