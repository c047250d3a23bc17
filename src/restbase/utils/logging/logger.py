"""
Main Logger class for restbase.

The Logger wraps a standard ``logging.Logger`` and attaches ``component``,
``operation``, ``context`` and the current request id to every record as
``extra`` fields, which the Rich handler renders. Handlers themselves are
installed through ``dictConfig`` (see ``restbase.server``).
"""
import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

from .emojis import get_emoji

LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# Id of the request being served; set by RequestLoggingMiddleware
current_request_id: ContextVar[Optional[str]] = ContextVar("restbase_request_id", default=None)


@contextmanager
def bind_request_id(request_id: str) -> Iterator[str]:
    """Tag every record logged inside the block with ``request_id``."""
    token = current_request_id.set(request_id)
    try:
        yield request_id
    finally:
        current_request_id.reset(token)


class Logger:
    """Component-aware logger for restbase."""

    def __init__(self, name: str = "restbase", level: str = "info", component: Optional[str] = None):
        """Initialize the logger.

        Args:
            name: Name of the underlying ``logging`` logger
            level: Initial log level
            component: Component used when a call does not name one
        """
        self.name = name
        self.component = component
        self.python_logger = logging.getLogger(name)
        self.set_level(level)

    def set_level(self, level: str) -> None:
        self.level = level.lower()
        self.python_logger.setLevel(LEVEL_MAP.get(self.level, logging.INFO))

    def should_log(self, level: str) -> bool:
        return LEVEL_MAP.get(level, logging.INFO) >= LEVEL_MAP.get(self.level, logging.INFO)

    def _log(
        self,
        level: str,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        emoji: Optional[str] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        if not self.should_log(level):
            return

        extra = {
            "component": component or self.component,
            "operation": operation,
            "context": context,
            "emoji": emoji,
            "request_id": current_request_id.get(),
        }
        exc_info = None
        if exception is not None:
            exc_info = (type(exception), exception, exception.__traceback__)

        self.python_logger.log(LEVEL_MAP[level], message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, component: Optional[str] = None, operation: Optional[str] = None,
              context: Optional[Dict[str, Any]] = None) -> None:
        self._log("debug", message, component, operation, context)

    def info(self, message: str, component: Optional[str] = None, operation: Optional[str] = None,
             context: Optional[Dict[str, Any]] = None) -> None:
        self._log("info", message, component, operation, context)

    def warning(self, message: str, component: Optional[str] = None, operation: Optional[str] = None,
                context: Optional[Dict[str, Any]] = None) -> None:
        self._log("warning", message, component, operation, context)

    def error(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Log an error message.

        Args:
            message: Log message
            component: restbase component
            operation: Operation being performed
            context: Additional contextual data
            exception: Exception whose traceback should be rendered
        """
        self._log("error", message, component, operation, context, exception=exception)

    @contextmanager
    def time_operation(self, operation: str, component: Optional[str] = None, level: str = "debug"):
        """Log how long the block took, or that it failed.

        Args:
            operation: Operation name
            component: restbase component
            level: Log level for the completion message
        """
        started = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.error(
                f"{operation} failed after {time.perf_counter() - started:.3f}s",
                component=component,
                operation=operation,
                context={"error": str(e)},
            )
            raise
        duration = time.perf_counter() - started
        self._log(
            level,
            f"Completed {operation} in {duration:.3f}s",
            component,
            operation,
            {"duration": duration},
            emoji=get_emoji("operation", operation),
        )


# Module-level logger used throughout the package
logger = Logger()
