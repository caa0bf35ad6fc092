"""
Global exception handler for the Paper Upload API.
Every error leaves the API as {"error": kind, "message": text}.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from .exceptions import (
    ConflictException,
    DatabaseException,
    ForbiddenException,
    InvalidTransitionException,
    StorageException,
    UnauthorizedException,
    UploadNotFoundException,
    UploadPipelineException,
    ValidationException
)

logger = logging.getLogger(__name__)

# (status code, error kind) per exception type, most specific first
ERROR_RESPONSES = [
    (ValidationException, 400, "Validation Error"),
    (UnauthorizedException, 401, "Unauthorized"),
    (ForbiddenException, 403, "Forbidden"),
    (UploadNotFoundException, 404, "Not Found"),
    (InvalidTransitionException, 409, "Invalid Transition"),
    (ConflictException, 409, "Conflict"),
    (StorageException, 500, "Storage Error"),
    (DatabaseException, 500, "Database Error"),
]


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""

    @app.exception_handler(UploadPipelineException)
    async def handle_pipeline_error(request: Request, exc: UploadPipelineException):
        for exc_type, status_code, error in ERROR_RESPONSES:
            if isinstance(exc, exc_type):
                if status_code >= 500:
                    logger.error("%s on %s: %s", error, request.url.path, exc.message)
                return error_response(status_code, error, exc.message)
        logger.error("Unhandled application error on %s: %s", request.url.path, exc.message)
        return error_response(500, "Internal Server Error", "An unexpected error occurred")

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', []))}: {error.get('msg')}"
            for error in exc.errors()
        )
        return error_response(400, "Validation Error", details or "Invalid request")

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s", request.url.path)
        return error_response(500, "Internal Server Error", "An unexpected error occurred")
