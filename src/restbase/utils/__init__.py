"""
restbase Utilities Package.

Error definitions and the logging system shared by the rest of the package.
"""

from restbase.utils.errors import (
    ConfigurationError,
    HostNotAllowedError,
    InvalidArgumentError,
    RegistrationError,
    ResourceNotFoundError,
    RestBaseError,
    UnauthorizedError,
)
from restbase.utils.logging import logger

__all__ = [
    # Errors
    "RestBaseError",
    "InvalidArgumentError",
    "UnauthorizedError",
    "HostNotAllowedError",
    "ResourceNotFoundError",
    "ConfigurationError",
    "RegistrationError",
    # Logging
    "logger",
]
