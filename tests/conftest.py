"""Pytest configuration and fixtures."""

import datetime

import pytest
from fastapi.testclient import TestClient

from restbase.config import RestBaseConfig, reset_config
from restbase.server import create_server
from restbase.storage import create_all, get_engine, get_session_factory, session_scope

from widget_app import Maker, Widget, registry as widget_registry

WIDGET_COUNT = 25


def make_config(**api):
    """Build a configuration that lets the test client through the allowlist."""
    api.setdefault("allow_hosts", ["testserver", "localhost"])
    api.setdefault("allow_paths", ["api/*"])
    return RestBaseConfig(api=api, database={"url": "sqlite://"})


@pytest.fixture(autouse=True)
def fresh_config():
    """Keep the global configuration from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def engine():
    """In-memory database with the sample tables created."""
    engine = get_engine("sqlite://")
    create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    factory = get_session_factory(engine)
    with session_scope(factory) as session:
        yield session


@pytest.fixture
def seeded(session):
    """Two makers and 25 widgets.

    Widgets 1-10 belong to Acme, 11-20 to Globex and 21-25 have no maker
    and are discontinued. Odd ids are active, even ids retired. Widget ``n``
    has code ``W0nn``, name ``Widget n`` and price ``n * 10``.
    """
    acme = Maker(id=1, name="Acme", country="US")
    globex = Maker(id=2, name="Globex", country="DE")
    session.add_all([acme, globex])

    for n in range(1, WIDGET_COUNT + 1):
        if n <= 10:
            maker_id = acme.id
        elif n <= 20:
            maker_id = globex.id
        else:
            maker_id = None

        session.add(Widget(
            id=n,
            code=f"W{n:03d}",
            name=f"Widget {n}",
            price=n * 10,
            status="active" if n % 2 else "retired",
            maker_id=maker_id,
            discontinued_at=datetime.datetime(2024, 1, n - 20) if n > 20 else None,
        ))

    session.commit()
    return session


@pytest.fixture
def registry():
    return widget_registry


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def app(engine, seeded, registry, config):
    return create_server(registry=registry, config=config, engine=engine)


@pytest.fixture
def client(app):
    return TestClient(app)
