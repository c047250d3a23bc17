"""
restbase Error Definitions.

This module defines the exceptions raised by the request pipeline. Each
request-time error carries one of the envelope codes from
:class:`restbase.constants.ErrorCode` so the API error handlers can map it to
a status code without inspecting the message.
"""

from typing import Any, Dict, Optional

from restbase.constants import ErrorCode


class RestBaseError(Exception):
    """Base exception class for all restbase errors."""

    def __init__(
        self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None
    ):
        """Initialize a RestBaseError with optional error code and details.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error context and details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class InvalidArgumentError(RestBaseError):
    """Raised when a query parameter cannot be honoured."""

    def __init__(
        self, message: str, argument: Optional[str] = None, details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if argument:
            error_details["argument"] = argument
        super().__init__(message, ErrorCode.WRONG_ARGS.value, error_details)


class UnauthorizedError(RestBaseError):
    """Raised when a request carries no valid credentials."""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.UNAUTHORIZED.value, details)


class HostNotAllowedError(RestBaseError):
    """Raised when the request host or path is outside the allowlist."""

    def __init__(self, host: str, path: str, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details.update({"host": host, "path": path})
        self.host = host
        self.path = path
        super().__init__(f"host: {host}; path: {path}", ErrorCode.FORBIDDEN.value, error_details)


class ResourceNotFoundError(RestBaseError):
    """Raised when a lookup matches no records."""

    def __init__(
        self,
        message: str = "Resource Not Found",
        resource: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if resource:
            error_details["resource"] = resource
        super().__init__(message, ErrorCode.NOT_FOUND.value, error_details)


class ConfigurationError(RestBaseError):
    """Error raised when there's an issue with restbase configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class RegistrationError(RestBaseError):
    """Error raised when a resource cannot be registered."""

    def __init__(
        self, message: str, resource: Optional[str] = None, details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if resource:
            error_details["resource"] = resource
        super().__init__(message, "REGISTRATION_ERROR", error_details)
