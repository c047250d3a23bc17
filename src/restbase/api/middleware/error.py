"""
Error handling for restbase APIs.

Every failure leaves the API as an error envelope whose ``code`` is one of
``WRONG-ARGS``, ``UNAUTHORIZED``, ``FORBIDDEN``, ``NOT-FOUND`` or
``INTERNAL-ERROR``.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from restbase.api.responses import ResponseBuilder
from restbase.constants import ERROR_STATUS, MESSAGE_INTERNAL_ERROR, ErrorCode
from restbase.utils.errors import RestBaseError, UnauthorizedError
from restbase.utils.logging import logger

# Status codes that have an envelope code of their own
STATUS_CODES = {http_code: code for code, http_code in ERROR_STATUS.items()}


def error_code_for_status(status_code: int) -> ErrorCode:
    """Map an HTTP status onto the closed set of envelope codes."""
    if status_code in STATUS_CODES:
        return STATUS_CODES[status_code]
    if 400 <= status_code < 500:
        return ErrorCode.WRONG_ARGS
    return ErrorCode.INTERNAL_ERROR


async def restbase_exception_handler(request: Request, exc: RestBaseError):
    """
    Handle restbase errors raised while serving a request.

    Args:
        request: FastAPI request object
        exc: restbase exception

    Returns:
        Error envelope with the status that belongs to the error code
    """
    try:
        code = ErrorCode(exc.code)
    except ValueError:
        return await general_exception_handler(request, exc)

    status_code = ERROR_STATUS[code]
    logger.warning(
        f"{code.value}: {exc.message}",
        component="api",
        operation="exception",
        context={"path": request.url.path, **exc.details},
    )

    headers = {"WWW-Authenticate": "ApiKey"} if isinstance(exc, UnauthorizedError) else None
    return ResponseBuilder(status_code=status_code).error(exc.message, code, headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle FastAPI request validation errors as wrong arguments.

    Args:
        request: FastAPI request object
        exc: Validation exception

    Returns:
        400 error envelope
    """
    errors = []
    for error in exc.errors():
        loc = " > ".join([str(part) for part in error.get("loc", [])])
        errors.append(f"{loc}: {error.get('msg', '')}")

    error_message = "Wrong Arguments"
    if errors:
        error_message += ": " + "; ".join(errors)

    logger.warning(
        f"Request validation error: {error_message}",
        component="api",
        operation="validation",
        context={"path": request.url.path},
    )

    return ResponseBuilder(status_code=status.HTTP_400_BAD_REQUEST).error(
        error_message, ErrorCode.WRONG_ARGS
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Wrap Starlette HTTP errors (unknown routes, wrong methods, ...) in the envelope."""
    code = error_code_for_status(exc.status_code)
    logger.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        component="api",
        context={"path": request.url.path},
    )
    return ResponseBuilder(status_code=exc.status_code).error(str(exc.detail), code, exc.headers)


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle any other exception as an internal error.

    The exception message is logged but not sent to the client.

    Args:
        request: FastAPI request object
        exc: Exception

    Returns:
        500 error envelope
    """
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    logger.error(
        f"Unhandled exception: {str(exc)}",
        component="api",
        operation="exception",
        context={
            "exception_type": type(exc).__name__,
            "traceback": tb_str,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return ResponseBuilder(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR).error(
        MESSAGE_INTERNAL_ERROR, ErrorCode.INTERNAL_ERROR
    )


def add_error_handlers(app: FastAPI):
    """
    Add exception handlers to the FastAPI app.

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(RestBaseError, restbase_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.debug("API error handlers configured", component="api")
