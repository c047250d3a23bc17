"""
API package for restbase.

Resources, transformers, the request pipeline that serves them, and the
response envelopes it produces.
"""

from restbase.api.guard import AllowlistGuard
from restbase.api.pagination import Paginator, paginate
from restbase.api.query import RequestParameters
from restbase.api.registry import Resource, ResourceRegistry, load_registry
from restbase.api.resources import Collection, Item, Manager
from restbase.api.responses import ResponseBuilder
from restbase.api.transformer import Transformer

__all__ = [
    "AllowlistGuard",
    "Collection",
    "Item",
    "Manager",
    "Paginator",
    "RequestParameters",
    "Resource",
    "ResourceRegistry",
    "ResponseBuilder",
    "Transformer",
    "load_registry",
    "paginate",
]
