"""Global exception handlers: domain errors become structured JSON, nothing else leaks."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..errors import ShortLinkError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShortLinkError)
    async def short_link_error_handler(request: Request, exc: ShortLinkError):
        extra = {"error_code": exc.code, "path": request.url.path}
        if exc.http_status >= 500:
            logger.error(f"{exc.code}: {exc.message}", extra=extra)
        else:
            logger.warning(f"{exc.code}: {exc.message}", extra=extra)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}},
        )
