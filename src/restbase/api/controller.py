"""
Generic index/show handlers for registered resources.

A :class:`ResourceController` is bound to one resource and serves its two
routes. Everything resource-specific (base query, search clause, default
filters, transformer) comes from the resource object; everything
request-specific comes from the :class:`RequestContext`.
"""

from typing import Any

from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from restbase.api.dependencies import RequestContext, get_request_context, get_session
from restbase.api.pagination import paginate, resolve_page
from restbase.api.query import (
    apply_filters,
    apply_sort,
    coerce_value,
    resolve_per_page,
)
from restbase.api.resources import Manager
from restbase.api.responses import ResponseBuilder
from restbase.utils.errors import InvalidArgumentError, ResourceNotFoundError
from restbase.utils.logging import logger


class ResourceController:
    """Serves ``index`` and ``show`` for one resource."""

    def __init__(self, resource: Any):
        """Initialize the controller.

        Args:
            resource: A :class:`~restbase.api.registry.Resource`
        """
        self.resource = resource

    def index(
        self,
        context: RequestContext = Depends(get_request_context),
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        """List records with search, filters, sorting and pagination.

        Args:
            context: Current request
            session: Database session

        Returns:
            Paginated collection envelope

        Raises:
            InvalidArgumentError: On a bad ``per_page``, ``sort`` or filter
        """
        resource = self.resource
        params = context.params
        api = context.config

        per_page = resolve_per_page(params.per_page, api.per_page, api.per_page_limit)

        transformer = resource.make_transformer()
        if params.fields:
            transformer.transform_only(params.fields)

        manager = Manager().parse_includes(params.include)

        logger.info(
            f"Listing {resource.name}",
            component="api",
            operation="search" if params.q else "request",
            context={
                "q": params.q,
                "sort": params.sort,
                "per_page": per_page,
                "filters": list(params.filters.keys()),
            },
        )

        statement = resource.query()
        if params.q:
            statement = statement.where(resource.search(params.q))
        statement = apply_filters(
            statement,
            resource.model,
            params.filters,
            transformer.untransform,
            resource.default_filters(),
        )
        statement = apply_sort(
            statement, resource.model, params.sort, transformer.untransform, resource.default_sort
        )

        paginator = paginate(
            session,
            statement,
            per_page,
            resolve_page(params.page),
            context.base_url,
            context.query_items,
        )

        return ResponseBuilder(manager).paginated(paginator, transformer)

    def show(
        self,
        ids: str,
        context: RequestContext = Depends(get_request_context),
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        """Fetch one or more records by comma-separated primary keys.

        Args:
            ids: Comma-separated identifiers
            context: Current request
            session: Database session

        Returns:
            Collection envelope

        Raises:
            InvalidArgumentError: If an identifier does not fit the key type
            ResourceNotFoundError: If no identifier matches a record
        """
        resource = self.resource
        params = context.params
        primary_key = resource.primary_key_column()

        values = [coerce_value(primary_key, part.strip()) for part in ids.split(",") if part.strip()]
        if not values:
            raise InvalidArgumentError("No identifiers given", argument="ids")

        transformer = resource.make_transformer()
        if params.fields:
            transformer.transform_only(params.fields)

        builder = ResponseBuilder(Manager().parse_includes(params.include))

        statement = resource.query().where(primary_key.in_(values)).order_by(primary_key)
        records = session.scalars(statement).unique().all()

        if len(records) == 0:
            raise ResourceNotFoundError(resource=resource.name)

        return builder.collection(records, transformer)
