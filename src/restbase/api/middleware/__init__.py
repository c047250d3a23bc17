"""
Middleware package for restbase APIs.

Error handlers that render every failure as an error envelope, and request
logging.
"""

from restbase.api.middleware.error import add_error_handlers
from restbase.api.middleware.logging import RequestLoggingMiddleware, add_logging_middleware

__all__ = [
    "add_error_handlers",
    "add_logging_middleware",
    "RequestLoggingMiddleware",
]
