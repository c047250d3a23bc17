"""
Request/response logging middleware for restbase.
"""

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from restbase.constants import PROCESS_TIME_HEADER, REQUEST_ID_HEADER
from restbase.utils.logging import bind_request_id, logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging requests and responses.

    Each request gets an id (taken from ``X-Request-ID`` when the client sends
    one), stored on ``request.state.request_id``, attached to every record
    logged while the request is served, and echoed in the response headers
    together with the processing time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        with bind_request_id(request_id):
            logger.info(
                f"{request.method} {request.url.path}",
                component="api",
                operation="request",
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "query": str(request.query_params),
                    "host": request.headers.get("host", "unknown"),
                    "client_host": request.client.host if request.client else "unknown",
                },
            )

            start_time = time.time()
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"Error processing {request.method} {request.url.path}: {e}",
                    component="api",
                    operation="request_error",
                    context={"process_time": time.time() - start_time},
                )
                raise

            process_time = time.time() - start_time
            logger.info(
                f"{response.status_code} in {process_time:.3f}s",
                component="api",
                operation="response",
                context={"status_code": response.status_code, "process_time": process_time},
            )

        response.headers[PROCESS_TIME_HEADER] = f"{process_time:.6f}"
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def add_logging_middleware(app: FastAPI) -> None:
    """
    Add request logging middleware to the FastAPI app.

    Args:
        app: FastAPI application
    """
    app.add_middleware(RequestLoggingMiddleware)
