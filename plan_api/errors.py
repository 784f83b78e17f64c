"""Application errors and the handlers that turn them into JSON responses.

Every error body has the shape ``{"message": str}``.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import Request


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code


class ValidationError(AppError, ValueError):
    status_code = 400


class ConflictError(AppError):
    # Duplicate plan codes are reported as bad requests, not 409.
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError, LookupError):
    status_code = 404


def _describe_error(error: dict) -> str:
    loc = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
    field = loc[-1] if loc else "value"
    return f'"{field}" {error.get("msg", "is invalid")}'


def format_validation_error(exc) -> str:
    """Render the first error of a pydantic/FastAPI validation error."""
    errors = exc.errors()
    if not errors:
        return "The request is invalid."
    return _describe_error(errors[0])


def validation_error_from(exc: PydanticValidationError) -> ValidationError:
    return ValidationError(format_validation_error(exc))


async def app_error_handler(request: Request, exc: AppError):
    logger = logging.getLogger("plan_api")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(log_level, "%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return await app_error_handler(request, ValidationError(format_validation_error(exc)))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger = logging.getLogger("plan_api")
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "An unexpected error occurred."})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
