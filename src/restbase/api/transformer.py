"""
Record transformers for restbase.

A transformer turns one domain record into the mapping that is sent to the
client, and translates public field names used in ``sort`` and filter
parameters back to storage column names.

Subclasses usually only declare ``fields``, and optionally
``available_includes`` / ``default_includes`` with matching
``include_<name>`` methods::

    class WidgetTransformer(Transformer):
        fields = {"price": "price_cents"}
        available_includes = ["maker"]

        def include_maker(self, widget):
            return self.item(widget.maker, MakerTransformer())
"""
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect

from restbase.api.resources import Collection, Item


class Transformer:
    """Base transformer.

    Attributes:
        fields: Public name to storage name table used by :meth:`untransform`
        available_includes: Includes a client may request
        default_includes: Includes always embedded
    """

    fields: Dict[str, str] = {}
    available_includes: List[str] = []
    default_includes: List[str] = []

    def __init__(self):
        self._transform_only_fields: List[str] = []

    def transform_only(self, fields: Sequence[str]) -> "Transformer":
        """Restrict :meth:`transform` output to the given keys."""
        self._transform_only_fields = [field for field in fields if field]
        return self

    def get_transform_only_fields(self) -> List[str]:
        return list(self._transform_only_fields)

    def model_transform(self, record: Any) -> Dict[str, Any]:
        """Dump a record to a plain dict.

        Args:
            record: SQLAlchemy mapped instance, mapping, pydantic model or
                plain object

        Returns:
            A new dict with the record's attributes
        """
        if isinstance(record, Mapping):
            return dict(record)

        if isinstance(record, BaseModel):
            return record.model_dump()

        state = sa_inspect(record, raiseerr=False)
        mapper = getattr(state, "mapper", None)
        if mapper is not None:
            return {attr.key: getattr(record, attr.key) for attr in mapper.column_attrs}

        return {key: value for key, value in vars(record).items() if not key.startswith("_")}

    def transform(self, record: Any) -> Dict[str, Any]:
        data = self.model_transform(record)

        if self._transform_only_fields:
            only = set(self._transform_only_fields)
            data = {key: value for key, value in data.items() if key in only}

        return data

    def untransform(self, value: Any) -> Any:
        """Translate public names back to storage names.

        A single name resolves through :attr:`fields`; unknown names pass
        through. A mapping has its keys rewritten and its string values
        stripped of surrounding whitespace.

        Args:
            value: A field name or a mapping of field names to values

        Returns:
            The translated name or a new mapping
        """
        if not self.fields:
            return value

        if isinstance(value, Mapping):
            return {
                self.fields.get(key, key): self._strip(item)
                for key, item in value.items()
            }

        if isinstance(value, str):
            return self.fields.get(value, value)

        return value

    @staticmethod
    def _strip(value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, (list, tuple)):
            return [item.strip() if isinstance(item, str) else item for item in value]
        return value

    def get_include_method(self, name: str):
        """Look up the ``include_<name>`` method for an include.

        Raises:
            AttributeError: If the transformer declares the include but has
                no method for it
        """
        method_name = "include_" + name.replace("-", "_")
        method = getattr(self, method_name, None)
        if method is None:
            raise AttributeError(
                f"{type(self).__name__} declares include '{name}' but has no {method_name}() method"
            )
        return method

    def item(self, record: Any, transformer: Optional["Transformer"] = None) -> Item:
        """Wrap a related record for embedding from an include method."""
        return Item(record, transformer or Transformer())

    def collection(
        self, records: Sequence[Any], transformer: Optional["Transformer"] = None
    ) -> Collection:
        """Wrap related records for embedding from an include method."""
        return Collection(records, transformer or Transformer())
