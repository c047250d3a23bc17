"""
Query parameter parsing and SQLAlchemy query building for restbase.

The parsed :class:`RequestParameters` hold the reserved keys (``q``, ``sort``,
``per_page``, ``page``, ``fields``, ``include``); every other key becomes a
filter. The helpers below turn search terms, filters and sort specs into
clauses on a ``select()`` of a mapped model.

Filters come in three shapes::

    ?status=active                       status = 'active'
    ?f=price&f=>=&f=100                  price >= 100
    ?f[]=deleted_at&f[]=null             deleted_at IS NULL
"""
import datetime
import decimal
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import Select, and_, inspect as sa_inspect, or_
from sqlalchemy.orm.attributes import InstrumentedAttribute

from restbase.constants import (
    DEFAULT_SORT_COLUMN,
    PARAM_FIELDS,
    PARAM_INCLUDE,
    PARAM_PAGE,
    PARAM_PER_PAGE,
    PARAM_SEARCH,
    PARAM_SORT,
    RESERVED_PARAMS,
)
from restbase.utils.errors import InvalidArgumentError
from restbase.utils.logging import logger

FilterValue = Union[str, List[str], Tuple[Any, ...]]

FIELDS_SEPARATOR = re.compile(r"\s*,\s*")

# Binary comparisons: operator -> clause factory
OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "=": lambda column, value: column == value,
    "==": lambda column, value: column == value,
    "!=": lambda column, value: column != value,
    "<>": lambda column, value: column != value,
    "<": lambda column, value: column < value,
    "<=": lambda column, value: column <= value,
    ">": lambda column, value: column > value,
    ">=": lambda column, value: column >= value,
    "like": lambda column, value: column.like(value),
    "not like": lambda column, value: column.not_like(value),
    "ilike": lambda column, value: column.ilike(value),
    "in": lambda column, value: column.in_(value),
    "not in": lambda column, value: column.not_in(value),
}

# Operators whose value is a list; a string value is split on commas
LIST_OPERATORS = frozenset({"in", "not in"})

# Operators whose value is a pattern and must stay a string
PATTERN_OPERATORS = frozenset({"like", "not like", "ilike"})

# Two-element null checks: operator -> clause factory
NULL_OPERATORS: Dict[str, Callable[[Any], Any]] = {
    "null": lambda column: column.is_(None),
    "is null": lambda column: column.is_(None),
    "not null": lambda column: column.is_not(None),
    "is not null": lambda column: column.is_not(None),
}

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})

# Signed 64-bit bounds of a database INTEGER/BIGINT column
MIN_INTEGER = -(2 ** 63)
MAX_INTEGER = 2 ** 63 - 1


@dataclass
class RequestParameters:
    """Query string of an index request, split into reserved keys and filters."""

    q: str = ""
    sort: str = ""
    per_page: str = ""
    page: str = ""
    fields: List[str] = field(default_factory=list)
    include: str = ""
    filters: Dict[str, FilterValue] = field(default_factory=dict)

    @classmethod
    def from_items(cls, items: Sequence[Tuple[str, str]]) -> "RequestParameters":
        """Build parameters from ``(key, value)`` pairs in query string order.

        A key given more than once, or in ``key[]`` form, yields a list.

        Args:
            items: Query string pairs, e.g. ``request.query_params.multi_items()``

        Returns:
            Parsed parameters
        """
        grouped: Dict[str, List[str]] = {}
        bracketed = set()
        for key, value in items:
            if key.endswith("[]"):
                key = key[:-2]
                bracketed.add(key)
            grouped.setdefault(key, []).append(value)

        def single(key: str) -> str:
            values = grouped.get(key)
            return values[-1].strip() if values else ""

        params = cls(
            q=single(PARAM_SEARCH),
            sort=single(PARAM_SORT),
            per_page=single(PARAM_PER_PAGE),
            page=single(PARAM_PAGE),
            fields=parse_fields(single(PARAM_FIELDS)),
            include=single(PARAM_INCLUDE),
        )

        for key, values in grouped.items():
            if key in RESERVED_PARAMS:
                continue
            if len(values) == 1 and key not in bracketed:
                params.filters[key] = values[0]
            else:
                params.filters[key] = list(values)

        return params


def parse_fields(value: str) -> List[str]:
    """Split a ``fields`` parameter on commas, ignoring surrounding whitespace."""
    value = value.strip()
    if not value:
        return []
    return [name for name in FIELDS_SEPARATOR.split(value) if name]


def resolve_per_page(value: str, default: int, limit: int) -> int:
    """Validate a ``per_page`` parameter.

    Args:
        value: Raw parameter value; empty keeps the default
        default: Default page size
        limit: Largest accepted page size

    Returns:
        The page size to use

    Raises:
        InvalidArgumentError: If the value is not a positive integer or
            exceeds the limit
    """
    value = str(value).strip()
    if not value:
        return default

    try:
        per_page = int(value)
    except ValueError:
        raise InvalidArgumentError(
            f"per_page must be a positive integer, got '{value}'", argument=PARAM_PER_PAGE
        )

    if per_page < 1:
        raise InvalidArgumentError("per_page must be a positive integer", argument=PARAM_PER_PAGE)
    if per_page > limit:
        raise InvalidArgumentError(f"per_page value cannot exceed {limit}", argument=PARAM_PER_PAGE)

    return per_page


def resolve_column(model: Any, name: str) -> InstrumentedAttribute:
    """Return the mapped column attribute ``name`` of ``model``.

    Raises:
        InvalidArgumentError: If the model has no such column
    """
    mapper = sa_inspect(model)
    if not isinstance(name, str) or name not in mapper.column_attrs:
        raise InvalidArgumentError(f"Unknown column '{name}'", argument=str(name))
    return getattr(model, name)


def coerce_value(column: InstrumentedAttribute, value: Any) -> Any:
    """Convert a query string value to the column's Python type.

    Values that are not strings, and columns whose type does not expose a
    Python type, are returned unchanged.

    Raises:
        InvalidArgumentError: If the string cannot be converted, or an
            integer does not fit a 64-bit column
    """
    if not isinstance(value, str):
        return value

    try:
        python_type = column.expression.type.python_type
    except NotImplementedError:
        return value

    if python_type is str:
        return value

    raw = value.strip()
    try:
        if python_type is bool:
            if raw.lower() in TRUE_VALUES:
                return True
            if raw.lower() in FALSE_VALUES:
                return False
            raise ValueError(raw)
        if python_type is datetime.datetime:
            return datetime.datetime.fromisoformat(raw)
        if python_type is datetime.date:
            return datetime.date.fromisoformat(raw)
        if python_type is int:
            number = int(raw)
            if not MIN_INTEGER <= number <= MAX_INTEGER:
                raise InvalidArgumentError(
                    f"Value for column '{column.key}' is out of range", argument=column.key
                )
            return number
        if python_type in (float, decimal.Decimal):
            return python_type(raw)
    except (ValueError, decimal.InvalidOperation):
        raise InvalidArgumentError(
            f"Invalid value '{value}' for column '{column.key}'", argument=column.key
        )

    return value


def build_condition(
    model: Any,
    column_name: str,
    operator: str,
    value: Any = None,
    has_value: bool = True,
):
    """Build one filter clause.

    Args:
        model: Mapped model class
        column_name: Storage column name
        operator: Comparison operator (case-insensitive)
        value: Right-hand value
        has_value: False for two-element filters, which are null checks

    Returns:
        A SQLAlchemy boolean clause

    Raises:
        InvalidArgumentError: On unknown columns or operators
    """
    column = resolve_column(model, column_name)
    op = " ".join(str(operator).lower().split())

    if not has_value:
        if op in NULL_OPERATORS:
            return NULL_OPERATORS[op](column)
        # Two elements without a null check compare for equality
        return column == coerce_value(column, operator)

    if op not in OPERATORS:
        raise InvalidArgumentError(f"Unsupported filter operator '{operator}'", argument=column_name)

    if op in LIST_OPERATORS:
        values = value.split(",") if isinstance(value, str) else list(value)
        value = [coerce_value(column, item.strip() if isinstance(item, str) else item) for item in values]
    elif op not in PATTERN_OPERATORS:
        value = coerce_value(column, value)

    return OPERATORS[op](column, value)


def filter_condition(model: Any, key: str, value: Any, untransform: Callable[[Any], Any]):
    """Turn one filter entry into a clause.

    Args:
        model: Mapped model class
        key: Filter key, already untransformed
        value: Scalar for equality, or a 1 to 3 element list/tuple
        untransform: Maps public column names to storage names

    Returns:
        A SQLAlchemy boolean clause
    """
    if isinstance(value, (list, tuple)):
        parts = list(value)
        if len(parts) == 1:
            return build_condition(model, key, "=", parts[0])
        if len(parts) == 2:
            return build_condition(model, untransform(parts[0]), parts[1], has_value=False)
        if len(parts) == 3:
            return build_condition(model, untransform(parts[0]), parts[1], parts[2])
        raise InvalidArgumentError(
            f"Filter '{key}' must have at most 3 elements, got {len(parts)}", argument=key
        )

    return build_condition(model, key, "=", value)


def apply_filters(
    statement: Select,
    model: Any,
    filters: Dict[str, Any],
    untransform: Callable[[Any], Any],
    defaults: Optional[Dict[str, Any]] = None,
) -> Select:
    """Apply request filters, merged over the resource defaults.

    All clauses are grouped into a single AND so they compose with the
    search clause.

    Args:
        statement: Select to extend
        model: Mapped model class
        filters: Request filters keyed by public name
        untransform: Transformer's ``untransform``
        defaults: Resource default filters keyed by storage name

    Returns:
        The extended select
    """
    merged = dict(defaults or {})
    merged.update(untransform(filters) if filters else {})

    conditions = [filter_condition(model, key, value, untransform) for key, value in merged.items()]
    if not conditions:
        return statement

    logger.debug(
        f"Applying {len(conditions)} filter(s)",
        component="query",
        operation="filter",
        context={"filters": list(merged.keys())},
    )
    return statement.where(and_(*conditions))


def prefix_search(model: Any, q: str, columns: Sequence[str]):
    """Default search: ``<column> LIKE '<q>%'`` OR-ed across ``columns``."""
    conditions = [resolve_column(model, name).startswith(q, autoescape=True) for name in columns]
    return or_(*conditions)


def apply_sort(
    statement: Select,
    model: Any,
    sort: str,
    untransform: Callable[[Any], Any],
    default: str = DEFAULT_SORT_COLUMN,
) -> Select:
    """Order by a sort spec such as ``price`` or ``-price``.

    Args:
        statement: Select to extend
        model: Mapped model class
        sort: Sort spec; empty uses ``default``
        untransform: Maps the public name to a storage column
        default: Sort spec used when ``sort`` is empty

    Returns:
        The ordered select

    Raises:
        InvalidArgumentError: If the column does not exist
    """
    sort = sort.strip() or default
    descending = sort.startswith("-")
    name = untransform(sort[1:] if descending else sort)

    column = resolve_column(model, name)
    logger.debug(
        f"Sorting by {name} {'desc' if descending else 'asc'}",
        component="query",
        operation="sort",
    )
    return statement.order_by(column.desc() if descending else column.asc())
