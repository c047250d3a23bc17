"""
Tests for resource registration.
"""

import pytest
from sqlalchemy import select

from restbase.api import Resource, ResourceRegistry, Transformer, load_registry
from restbase.config import set_config
from restbase.storage import get_session_factory, session_scope
from restbase.utils.errors import RegistrationError

from conftest import make_config
from widget_app import Maker, Part, Widget, WidgetTransformer


def test_transformer_resolved_by_model_name():
    registry = ResourceRegistry(transformer_path="widget_app")

    widgets = registry.register("widgets", Widget)
    parts = registry.register("parts", Part)

    assert widgets.transformer is WidgetTransformer
    assert parts.transformer is Transformer


def test_transformer_path_from_configuration():
    set_config(make_config(transformer_path="widget_app"))
    registry = ResourceRegistry()

    assert registry.register("widgets", Widget).transformer is WidgetTransformer


def test_no_transformer_path_uses_base_transformer():
    set_config(make_config())
    registry = ResourceRegistry()

    assert registry.register("widgets", Widget).transformer is Transformer


def test_explicit_transformer_wins():
    registry = ResourceRegistry(transformer_path="widget_app")

    class PlainWidgetTransformer(Transformer):
        pass

    resource = registry.register("widgets", Widget, transformer=PlainWidgetTransformer)

    assert resource.transformer is PlainWidgetTransformer
    assert isinstance(resource.make_transformer(), PlainWidgetTransformer)


def test_missing_transformer_module():
    registry = ResourceRegistry(transformer_path="no_such_module.transformers")

    with pytest.raises(RegistrationError, match="Cannot import transformer module"):
        registry.register("widgets", Widget)


def test_duplicate_name():
    registry = ResourceRegistry(transformer_path="widget_app")
    registry.register("widgets", Widget)

    with pytest.raises(RegistrationError, match="already registered"):
        registry.register("widgets", Maker)


def test_unmapped_model():
    class NotAModel:
        pass

    with pytest.raises(RegistrationError, match="is not a mapped class"):
        Resource("things", NotAModel)


def test_invalid_eager_load():
    with pytest.raises(RegistrationError, match="not a relationship path"):
        Resource("widgets", Widget, eager_loads=["price"])


def test_resource_defaults():
    resource = Resource("/widgets/", Widget, default_filters={"status": "active"})

    assert resource.name == "widgets"
    assert resource.primary_key == "id"
    assert resource.default_sort == "id"
    assert resource.search_columns == ["code"]
    assert resource.primary_key_column() is Widget.id

    filters = resource.default_filters()
    filters["status"] = "retired"
    assert resource.default_filters() == {"status": "active"}


def test_resource_query_applies_eager_loads(engine, seeded):
    resource = Resource("widgets", Widget, eager_loads=["maker.widgets"])

    with session_scope(get_session_factory(engine)) as session:
        widget = session.scalars(resource.query().where(Widget.id == 1)).one()

    # Loaded before the session closed
    assert widget.maker.name == "Acme"
    assert len(widget.maker.widgets) == 10


def test_resource_custom_query():
    statement = select(Widget).where(Widget.price > 100)
    resource = Resource("pricey", Widget, query=lambda: statement)

    assert resource.query() is statement


def test_container_protocol():
    registry = load_registry("widget_app:registry")

    assert len(registry) == 3
    assert "widgets" in registry
    assert registry.names() == ["widgets", "makers", "parts"]
    assert registry.get("makers").model is Maker
    with pytest.raises(RegistrationError):
        registry.get("gadgets")


def test_load_registry_from_factory():
    registry = load_registry("widget_app:build_registry")

    assert registry.names() == ["widgets"]


@pytest.mark.parametrize(
    "target",
    ["widget_app", "widget_app:", "no_such_module:registry", "widget_app:Widget", "widget_app:missing"],
)
def test_load_registry_rejects(target):
    with pytest.raises(RegistrationError):
        load_registry(target)


def test_describe():
    summaries = load_registry("widget_app:registry").describe()

    assert summaries[0] == {
        "name": "widgets",
        "model": "Widget",
        "transformer": "WidgetTransformer",
        "search_columns": "code",
        "eager_loads": "maker",
    }


def test_routes_in_openapi_schema(client):
    paths = client.get("/openapi.json").json()["paths"]

    assert "/api/widgets" in paths
    assert "/api/widgets/{ids}" in paths
    assert "/api/makers" in paths
