"""
Error handling for the debug routes

Converts ProfilerError (and unexpected exceptions) raised by a route into a
JSON ErrorResponse with the error's status code.
"""

import uuid

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sigprof.api.schemas.error import ErrorResponse, ErrorDetail
from sigprof.models.errors import ProfilerError
from sigprof.utils.logger import get_logger
from sigprof.models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    @app.exception_handler(ProfilerError)
    async def profiler_exception_handler(request: Request, exc: ProfilerError):
        """Handle errors raised deliberately by debug routes"""
        request_id = str(uuid.uuid4())

        log.warn(
            f"Route error ({request_id}): {exc.code} - {exc.message}",
            path=request.url.path
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(mode="json")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        request_id = str(uuid.uuid4())

        log.error(
            f"Unexpected error ({request_id}): {type(exc).__name__}: {exc}",
            path=request.url.path
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred",
                details={"exception_type": type(exc).__name__},
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode="json")
        )
