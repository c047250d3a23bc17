"""
restbase Logging Package.

This package provides rich-formatted logging with component, operation and
request-id context for the restbase request pipeline.
"""

import logging
from typing import Any, Dict, List, Optional

from restbase.utils.logging.console import console, print_table
from restbase.utils.logging.emojis import get_emoji
from restbase.utils.logging.formatter import (
    DetailedLogFormatter,
    RestLogRecord,
    RichLoggingHandler,
    SimpleLogFormatter,
    create_rich_console_handler,
)
from restbase.utils.logging.logger import Logger, bind_request_id, current_request_id, logger

# Logging is configured via dictConfig in server.py


def capture_logs(level: Optional[str] = None, name: str = "restbase") -> "LogCapture":
    """Create a context manager to capture logs.

    Args:
        level: Minimum log level to capture
        name: Logger to attach to

    Returns:
        Log capture context manager
    """
    return LogCapture(level, name)


class LogCapture:
    """Context manager for capturing logs."""

    def __init__(self, level: Optional[str] = None, name: str = "restbase"):
        self.level = level
        self.level_num = getattr(logging, self.level.upper(), 0) if self.level else 0
        self.name = name
        self.logs: List[Dict[str, Any]] = []
        self.handler = self._create_handler()

    def _create_handler(self) -> logging.Handler:
        class CaptureHandler(logging.Handler):
            def __init__(self, capture):
                super().__init__()
                self.capture = capture

            def emit(self, record):
                if record.levelno < self.capture.level_num:
                    return

                self.capture.logs.append({
                    "level": record.levelname,
                    "message": record.getMessage(),
                    "name": record.name,
                    "component": getattr(record, "component", None),
                    "operation": getattr(record, "operation", None),
                    "context": getattr(record, "context", None),
                    "request_id": getattr(record, "request_id", None),
                    "time": record.created,
                })

        return CaptureHandler(self)

    def __enter__(self) -> "LogCapture":
        logging.getLogger(self.name).addHandler(self.handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        logging.getLogger(self.name).removeHandler(self.handler)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get captured logs, optionally filtered by level.

        Args:
            level: Filter logs by level

        Returns:
            List of log records
        """
        if not level:
            return self.logs

        level_num = getattr(logging, level.upper(), 0)
        return [log for log in self.logs if getattr(logging, log["level"], 0) >= level_num]

    def get_messages(self, level: Optional[str] = None) -> List[str]:
        return [log["message"] for log in self.get_logs(level)]

    def contains(self, text: str, level: Optional[str] = None) -> bool:
        """Check if captured logs contain a specific text."""
        return any(text in message for message in self.get_messages(level))


__all__ = [
    # Console
    "console",
    "print_table",

    # Logger and utilities
    "logger",
    "Logger",
    "bind_request_id",
    "current_request_id",
    "capture_logs",
    "LogCapture",
    "get_emoji",

    # Formatters and handlers
    "RestLogRecord",
    "SimpleLogFormatter",
    "DetailedLogFormatter",
    "RichLoggingHandler",
    "create_rich_console_handler",
]
