"""
Response envelope models.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from restbase.constants import ErrorCode


class ErrorBody(BaseModel):
    """Body of an error envelope."""
    code: ErrorCode = Field(..., description="Error code")
    http_code: int = Field(..., description="HTTP status code of the response")
    message: str = Field(..., description="Error message")


class ErrorEnvelope(BaseModel):
    """Error response: ``{"error": {...}}``."""
    error: ErrorBody


class MessageEnvelope(BaseModel):
    """Plain acknowledgement: ``{"message": ...}``."""
    message: str = Field(..., description="Human-readable message")


class PaginationLinks(BaseModel):
    """Links to the neighbouring pages, present only where such a page exists."""
    previous: Optional[str] = Field(None, description="URL of the previous page")
    next: Optional[str] = Field(None, description="URL of the next page")


class Pagination(BaseModel):
    """The ``meta.pagination`` block."""
    total: int = Field(..., description="Number of records across all pages")
    count: int = Field(..., description="Number of records on this page")
    per_page: int = Field(..., description="Page size")
    current_page: int = Field(..., description="1-based page number")
    total_pages: int = Field(..., description="Number of pages")
    links: PaginationLinks = Field(default_factory=PaginationLinks)


class CollectionMeta(BaseModel):
    """The ``meta`` block; resources may add keys of their own."""
    model_config = ConfigDict(extra="allow")

    pagination: Optional[Pagination] = Field(None, description="Present on paginated lists")


class CollectionEnvelope(BaseModel):
    """Record list: ``{"data": [...], "meta": {...}}``."""
    model_config = ConfigDict(extra="allow")

    data: List[Dict[str, Any]] = Field(default_factory=list, description="Transformed records")
    meta: Optional[CollectionMeta] = Field(None, description="Pagination and extra metadata")
