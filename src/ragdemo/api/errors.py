"""Error responses for the API.

Every non-streamed failure is returned as ``{"error": "<message>"}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ragdemo.models.schemas import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Request failure rendered as an error body with a status code."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def _handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    logger.warning(f"Rejected request to {request.url.path}: {problems}")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        f"Invalid request body: {problems}",
    )


def register_error_handlers(application: FastAPI) -> None:
    """Install the error body handlers on an application."""
    application.add_exception_handler(APIError, _handle_api_error)
    application.add_exception_handler(RequestValidationError, _handle_validation_error)
