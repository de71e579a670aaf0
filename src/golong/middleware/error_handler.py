"""Global error handlers: every failure leaves as ``{"error": ...}`` JSON."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from golong.errors import GoLongError

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(GoLongError)
    async def domain_exception_handler(request: Request, exc: GoLongError) -> JSONResponse:
        """Map the domain taxonomy onto status codes."""
        if exc.status_code >= 500:
            logger.error(
                "operation_failed",
                path=request.url.path,
                method=request.method,
                error=exc.message,
                cause=str(exc.__cause__) if exc.__cause__ else None,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed input is a 400, caught before any database call."""
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid input", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: log the cause and return a generic 500."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )
