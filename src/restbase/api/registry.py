"""
Resource registration for restbase.

Resources are declared explicitly, once, at startup::

    registry = ResourceRegistry(transformer_path="myapp.transformers")
    registry.register("widgets", Widget, search_columns=("code", "name"))

The registry resolves each resource's transformer at registration time and
builds one FastAPI router per resource with ``index`` and ``show`` routes.
"""
import importlib
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Type

from fastapi import APIRouter
from sqlalchemy import Select, inspect as sa_inspect, select
from sqlalchemy.orm import RelationshipProperty, selectinload
from sqlalchemy.orm.attributes import InstrumentedAttribute

from restbase.api.controller import ResourceController
from restbase.api.dependencies import allowlist_dependency, principal_dependency
from restbase.api.models import CollectionEnvelope, ErrorEnvelope
from restbase.api.query import prefix_search
from restbase.api.transformer import Transformer
from restbase.config import get_config
from restbase.constants import DEFAULT_SEARCH_COLUMNS
from restbase.utils.errors import RegistrationError
from restbase.utils.logging import logger

# Error envelopes documented on every resource route
ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorEnvelope, "description": "Wrong arguments"},
    401: {"model": ErrorEnvelope, "description": "Unauthorized"},
    403: {"model": ErrorEnvelope, "description": "Host or path not allowed"},
    404: {"model": ErrorEnvelope, "description": "Resource not found"},
    500: {"model": ErrorEnvelope, "description": "Internal error"},
}


class Resource:
    """A model exposed through the API, with its query capabilities.

    Args:
        name: URL segment and router tag
        model: SQLAlchemy mapped class
        transformer: Transformer class; resolved by the registry when omitted
        eager_loads: Relationship paths loaded with every query
            (``"maker"``, ``"maker.company"``)
        search_columns: Columns matched by the default prefix search
        default_filters: Filters applied to every index request, keyed by
            storage column; request filters with the same key win
        default_sort: Sort spec used when the request has none; defaults to
            the primary key
        search: Callable ``(q) -> clause`` replacing the default search
        query: Callable ``() -> Select`` replacing the default base query
    """

    def __init__(
        self,
        name: str,
        model: Any,
        transformer: Optional[Type[Transformer]] = None,
        eager_loads: Sequence[str] = (),
        search_columns: Sequence[str] = DEFAULT_SEARCH_COLUMNS,
        default_filters: Optional[Dict[str, Any]] = None,
        default_sort: Optional[str] = None,
        search: Optional[Callable[[str], Any]] = None,
        query: Optional[Callable[[], Select]] = None,
    ):
        self.name = name.strip("/")
        self.model = model
        self.transformer = transformer
        self.eager_loads = list(eager_loads)
        self.search_columns = list(search_columns)
        self._default_filters = dict(default_filters or {})
        self._search = search
        self._query = query

        mapper = sa_inspect(model, raiseerr=False)
        if mapper is None or not hasattr(mapper, "primary_key"):
            raise RegistrationError(f"{model!r} is not a mapped class", resource=self.name)

        self.primary_key = mapper.get_property_by_column(mapper.primary_key[0]).key
        self.default_sort = default_sort or self.primary_key

        for path in self.eager_loads:
            self._loader(path)

    def __repr__(self) -> str:
        return f"Resource(name={self.name!r}, model={self.model.__name__})"

    def primary_key_column(self) -> InstrumentedAttribute:
        return getattr(self.model, self.primary_key)

    def query(self) -> Select:
        """Base select with eager loads applied."""
        if self._query is not None:
            return self._query()

        statement = select(self.model)
        for path in self.eager_loads:
            statement = statement.options(self._loader(path))
        return statement

    def _loader(self, path: str):
        entity = self.model
        loader = None
        for name in path.split("."):
            attribute = getattr(entity, name, None)
            if not isinstance(getattr(attribute, "property", None), RelationshipProperty):
                raise RegistrationError(
                    f"'{path}' is not a relationship path of {self.model.__name__}",
                    resource=self.name,
                )
            loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
            entity = attribute.property.mapper.class_
        return loader

    def search(self, q: str):
        """Clause matching the search term ``q``."""
        if self._search is not None:
            return self._search(q)
        return prefix_search(self.model, q, self.search_columns)

    def default_filters(self) -> Dict[str, Any]:
        return dict(self._default_filters)

    def make_transformer(self) -> Transformer:
        return (self.transformer or Transformer)()


def load_registry(target: str) -> "ResourceRegistry":
    """Import a registry from a ``module:attribute`` target.

    The attribute may be a :class:`ResourceRegistry` or a callable that
    returns one.

    Raises:
        RegistrationError: If the target cannot be imported or is not a registry
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise RegistrationError(f"Registry target must look like 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RegistrationError(f"Cannot import registry module '{module_name}': {e}")

    registry = getattr(module, attribute, None)
    if callable(registry) and not isinstance(registry, ResourceRegistry):
        registry = registry()
    if not isinstance(registry, ResourceRegistry):
        raise RegistrationError(f"'{target}' is not a ResourceRegistry")
    return registry


class ResourceRegistry:
    """Holds the resources exposed by an application."""

    def __init__(self, transformer_path: Optional[str] = None):
        """Initialize the registry.

        Args:
            transformer_path: Module searched for ``<Model>Transformer``
                classes; falls back to ``api.transformer_path`` from the
                configuration
        """
        self.transformer_path = transformer_path
        self._resources: Dict[str, Resource] = {}

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: str) -> bool:
        return name in self._resources

    def names(self) -> List[str]:
        return list(self._resources.keys())

    def get(self, name: str) -> Resource:
        try:
            return self._resources[name]
        except KeyError:
            raise RegistrationError(f"No resource named '{name}'", resource=name)

    def register(
        self,
        name: str,
        model: Any,
        transformer: Optional[Type[Transformer]] = None,
        **options,
    ) -> Resource:
        """Register a model under a name.

        Args:
            name: URL segment for the resource
            model: SQLAlchemy mapped class
            transformer: Transformer class; resolved when omitted
            **options: Remaining :class:`Resource` arguments

        Returns:
            The registered resource

        Raises:
            RegistrationError: If the name is taken or the model is not mapped
        """
        resource = Resource(name, model, transformer, **options)
        return self.add(resource)

    def add(self, resource: Resource) -> Resource:
        """Register an already-built :class:`Resource`."""
        if resource.name in self._resources:
            raise RegistrationError(
                f"Resource '{resource.name}' is already registered", resource=resource.name
            )

        if resource.transformer is None:
            resource.transformer = self.resolve_transformer(resource.model)

        self._resources[resource.name] = resource
        logger.debug(
            f"Registered resource {resource.name}",
            component="registry",
            operation="register",
            context={"model": resource.model.__name__, "transformer": resource.transformer.__name__},
        )
        return resource

    def resolve_transformer(self, model: Any) -> Type[Transformer]:
        """Find ``<Model>Transformer`` in the transformer module.

        Args:
            model: Mapped class whose transformer is wanted

        Returns:
            The transformer class, or :class:`Transformer` when the module
            has none or no module is configured

        Raises:
            RegistrationError: If the configured module cannot be imported
        """
        path = self.transformer_path
        if path is None:
            path = get_config().api.transformer_path
        if not path:
            return Transformer

        try:
            module = importlib.import_module(path)
        except ImportError as e:
            raise RegistrationError(f"Cannot import transformer module '{path}': {e}")

        candidate = getattr(module, f"{model.__name__}Transformer", None)
        if isinstance(candidate, type) and issubclass(candidate, Transformer):
            return candidate
        return Transformer

    def build_router(self, resource: Resource) -> APIRouter:
        """Build the router serving one resource.

        Routes:
            GET /<name>        index
            GET /<name>/{ids}  show
        """
        controller = ResourceController(resource)
        router = APIRouter(
            prefix=f"/{resource.name}",
            tags=[resource.name],
            dependencies=[allowlist_dependency, principal_dependency],
            responses=ERROR_RESPONSES,
        )
        router.add_api_route(
            "",
            controller.index,
            methods=["GET"],
            name=f"{resource.name}.index",
            response_model=CollectionEnvelope,
        )
        router.add_api_route(
            "/{ids}",
            controller.show,
            methods=["GET"],
            name=f"{resource.name}.show",
            response_model=CollectionEnvelope,
        )
        return router

    def routers(self) -> List[APIRouter]:
        return [self.build_router(resource) for resource in self]

    def describe(self) -> List[Dict[str, Any]]:
        """Summaries of the registered resources, for listings."""
        return [
            {
                "name": resource.name,
                "model": resource.model.__name__,
                "transformer": resource.transformer.__name__,
                "search_columns": ", ".join(resource.search_columns),
                "eager_loads": ", ".join(resource.eager_loads),
            }
            for resource in self
        ]
