"""
Pagination for restbase collections.

:func:`paginate` runs a count query and a page query for a SQLAlchemy
statement and returns a :class:`Paginator`, which renders the
``meta.pagination`` block including previous/next links that echo the
request's query parameters.
"""
import math
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import urlencode

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from restbase.constants import PARAM_PAGE
from restbase.utils.logging import logger


def resolve_page(value: Any) -> int:
    """Parse a ``page`` parameter; anything but an integer >= 1 means page 1."""
    try:
        page = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


class Paginator:
    """One page of results and the numbers needed to describe it."""

    def __init__(
        self,
        items: Sequence[Any],
        total: int,
        per_page: int,
        current_page: int = 1,
        base_url: str = "",
        query: Optional[Sequence[Tuple[str, str]]] = None,
        page_name: str = PARAM_PAGE,
    ):
        """Initialize the paginator.

        Args:
            items: Records on the current page
            total: Number of records across all pages
            per_page: Page size
            current_page: 1-based page number
            base_url: URL the page links point at, without query string
            query: Query parameters echoed in page links
            page_name: Name of the page query parameter
        """
        self.items = list(items)
        self.total = total
        self.per_page = per_page
        self.current_page = current_page
        self.base_url = base_url
        self.page_name = page_name
        self.query: List[Tuple[str, str]] = []
        for key, value in query or []:
            self.add_query(key, value)

    @property
    def last_page(self) -> int:
        return max(int(math.ceil(self.total / float(self.per_page))), 1)

    def count(self) -> int:
        return len(self.items)

    def add_query(self, key: str, value: str) -> "Paginator":
        """Add a query parameter to page links; the page parameter is ignored."""
        if key != self.page_name:
            self.query.append((key, value))
        return self

    def get_url(self, page: int) -> str:
        params = self.query + [(self.page_name, str(page))]
        return f"{self.base_url}?{urlencode(params)}"

    def get_pagination(self):
        """Build the ``meta.pagination`` block.

        Returns:
            Dict with total, count, per_page, current_page, total_pages and
            links (``previous`` / ``next`` only where such a page exists)
        """
        links = {}
        if self.current_page > 1:
            links["previous"] = self.get_url(self.current_page - 1)
        if self.current_page < self.last_page:
            links["next"] = self.get_url(self.current_page + 1)

        return {
            "total": self.total,
            "count": self.count(),
            "per_page": self.per_page,
            "current_page": self.current_page,
            "total_pages": self.last_page,
            "links": links,
        }


def paginate(
    session: Session,
    statement: Select,
    per_page: int,
    page: int = 1,
    base_url: str = "",
    query: Optional[Sequence[Tuple[str, str]]] = None,
) -> Paginator:
    """Execute a statement one page at a time.

    Args:
        session: Session to execute with
        statement: Select of a mapped entity, already filtered and ordered
        per_page: Page size
        page: 1-based page number
        base_url: URL the page links point at
        query: Query parameters echoed in page links

    Returns:
        Paginator for the requested page
    """
    count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
    total = session.execute(count_statement).scalar_one()

    offset = (page - 1) * per_page
    if offset >= total:
        # Past the last page; the offset may not even fit the database integer type
        items = []
    else:
        items = session.scalars(statement.limit(per_page).offset(offset)).unique().all()

    logger.debug(
        f"Fetched page {page} ({len(items)} of {total})",
        component="pagination",
        operation="paginate",
        context={"per_page": per_page, "offset": offset},
    )

    return Paginator(items, total, per_page, page, base_url, query)
