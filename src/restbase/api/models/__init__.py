"""
API models package for restbase.

Pydantic models describing the JSON envelopes returned by resource
endpoints. They are used for validation of outgoing envelopes and for the
OpenAPI schema of registered routes.
"""

from restbase.api.models.envelope import (
    CollectionEnvelope,
    CollectionMeta,
    ErrorBody,
    ErrorEnvelope,
    MessageEnvelope,
    Pagination,
    PaginationLinks,
)

__all__ = [
    "CollectionEnvelope",
    "CollectionMeta",
    "ErrorBody",
    "ErrorEnvelope",
    "MessageEnvelope",
    "Pagination",
    "PaginationLinks",
]
