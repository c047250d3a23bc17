"""
Item and collection resources for restbase responses.

A resource pairs data with the transformer that renders it. The
:class:`Manager` holds the includes requested by the client and turns a
resource into a :class:`Scope`, which serializes it to the ``{"data": ...}``
shape, embedding includes and metadata along the way.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

# Deepest include path honoured, counted in dotted segments
DEFAULT_RECURSION_LIMIT = 10


class ResourceBase:
    """Data plus the transformer that renders it."""

    def __init__(self, data: Any, transformer: Any, meta: Optional[Dict[str, Any]] = None):
        # Transformer classes are accepted for convenience
        if isinstance(transformer, type):
            transformer = transformer()
        self.data = data
        self.transformer = transformer
        self.meta: Dict[str, Any] = dict(meta or {})

    def set_meta_value(self, key: str, value: Any) -> "ResourceBase":
        self.meta[key] = value
        return self

    def set_meta(self, meta: Dict[str, Any]) -> "ResourceBase":
        for key, value in meta.items():
            self.set_meta_value(key, value)
        return self


class Item(ResourceBase):
    """A single record."""


class Collection(ResourceBase):
    """A sequence of records, optionally backed by a paginator."""

    def __init__(
        self,
        data: Iterable[Any],
        transformer: Any,
        meta: Optional[Dict[str, Any]] = None,
        paginator: Any = None,
    ):
        super().__init__(list(data), transformer, meta)
        self.paginator = paginator

    def set_paginator(self, paginator: Any) -> "Collection":
        self.paginator = paginator
        return self


class Manager:
    """Tracks requested includes and creates root scopes."""

    def __init__(self, recursion_limit: int = DEFAULT_RECURSION_LIMIT):
        self.recursion_limit = recursion_limit
        self.requested_includes: List[str] = []

    def parse_includes(self, includes: Union[str, Sequence[str], None]) -> "Manager":
        """Parse an include string such as ``"author.company,tags"``.

        Every parent of a dotted include is requested too, so
        ``author.company`` also requests ``author``.

        Args:
            includes: Comma-separated string or list of include names

        Returns:
            Self, for chaining
        """
        if not includes:
            return self

        if isinstance(includes, str):
            includes = includes.split(",")

        for include in includes:
            segments = [segment.strip() for segment in include.strip().split(".") if segment.strip()]
            segments = segments[: self.recursion_limit]
            for depth in range(1, len(segments) + 1):
                path = ".".join(segments[:depth])
                if path not in self.requested_includes:
                    self.requested_includes.append(path)

        return self

    def get_requested_includes(self) -> List[str]:
        return list(self.requested_includes)

    def create_data(
        self,
        resource: ResourceBase,
        scope_identifier: Optional[str] = None,
        parent_scopes: Optional[List[str]] = None,
    ) -> "Scope":
        return Scope(self, resource, scope_identifier, parent_scopes)


class Scope:
    """Serialization context for one resource at one include depth."""

    def __init__(
        self,
        manager: Manager,
        resource: ResourceBase,
        scope_identifier: Optional[str] = None,
        parent_scopes: Optional[List[str]] = None,
    ):
        self.manager = manager
        self.resource = resource
        self.scope_identifier = scope_identifier
        self.parent_scopes = list(parent_scopes or [])

    def get_identifier(self, append: Optional[str] = None) -> str:
        """Dotted path of this scope, optionally extended by one segment."""
        segments = self.parent_scopes + ([self.scope_identifier] if self.scope_identifier else [])
        if append:
            segments.append(append)
        return ".".join(segments)

    def is_requested(self, name: str) -> bool:
        return self.get_identifier(name) in self.manager.requested_includes

    def includes_for(self, transformer: Any) -> List[str]:
        """Includes to embed for records rendered by ``transformer``."""
        names = list(getattr(transformer, "default_includes", []))
        for name in getattr(transformer, "available_includes", []):
            if name not in names and self.is_requested(name):
                names.append(name)
        return names

    def transform_record(self, record: Any) -> Dict[str, Any]:
        transformer = self.resource.transformer
        if callable(getattr(transformer, "transform", None)):
            data = transformer.transform(record)
        else:
            data = transformer(record)

        if not hasattr(transformer, "get_include_method"):
            return data

        child_parents = self.parent_scopes + ([self.scope_identifier] if self.scope_identifier else [])
        for name in self.includes_for(transformer):
            child = transformer.get_include_method(name)(record)
            if child is None:
                continue
            child_scope = self.manager.create_data(child, name, child_parents)
            data[name] = child_scope.to_dict()

        return data

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the resource.

        Returns:
            ``{"data": ...}`` plus ``"meta"`` when the resource carries
            metadata or a paginator
        """
        if isinstance(self.resource, Collection):
            data: Any = [self.transform_record(record) for record in self.resource.data]
        elif self.resource.data is None:
            data = None
        else:
            data = self.transform_record(self.resource.data)

        result: Dict[str, Any] = {"data": data}

        meta = dict(self.resource.meta)
        paginator = getattr(self.resource, "paginator", None)
        if paginator is not None:
            meta["pagination"] = paginator.get_pagination()
        if meta:
            result["meta"] = meta

        return result
