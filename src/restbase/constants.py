"""
Global constants for restbase.
"""
from enum import Enum

# Pagination defaults
DEFAULT_PER_PAGE = 10
PER_PAGE_LIMIT = 100

# Allowlist defaults
DEFAULT_ALLOW_HOSTS = ["localhost", "localhost:8000"]
DEFAULT_ALLOW_PATHS = ["api/*"]

# Query string keys consumed by the controller; every other key is a filter
PARAM_SEARCH = "q"
PARAM_SORT = "sort"
PARAM_PAGE = "page"
PARAM_PER_PAGE = "per_page"
PARAM_FIELDS = "fields"
PARAM_INCLUDE = "include"

RESERVED_PARAMS = frozenset({
    PARAM_SEARCH,
    PARAM_SORT,
    PARAM_PAGE,
    PARAM_PER_PAGE,
    PARAM_FIELDS,
    PARAM_INCLUDE,
})

DEFAULT_SORT_COLUMN = "id"
DEFAULT_SEARCH_COLUMNS = ("code",)

# HTTP status codes (commonly used ones)
HTTP_OK = 200
HTTP_CREATED = 201
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_INTERNAL_SERVER_ERROR = 500

# Response messages
MESSAGE_OK = "Done"
MESSAGE_CREATED = "Resource successfully created."
MESSAGE_WRONG_ARGS = "Wrong Arguments"
MESSAGE_UNAUTHORIZED = "Unauthorized"
MESSAGE_FORBIDDEN = "Forbidden"
MESSAGE_NOT_FOUND = "Resource Not Found"
MESSAGE_INTERNAL_ERROR = "Internal Error"

API_KEY_HEADER = "X-API-Key"
REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


class ErrorCode(str, Enum):
    """Error codes carried in the ``error.code`` field of an error envelope."""

    WRONG_ARGS = "WRONG-ARGS"
    NOT_FOUND = "NOT-FOUND"
    INTERNAL_ERROR = "INTERNAL-ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


# Status code used for each error code
ERROR_STATUS = {
    ErrorCode.WRONG_ARGS: HTTP_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: HTTP_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: HTTP_FORBIDDEN,
    ErrorCode.NOT_FOUND: HTTP_NOT_FOUND,
    ErrorCode.INTERNAL_ERROR: HTTP_INTERNAL_SERVER_ERROR,
}
