"""
SQLAlchemy helpers for restbase.

Resources are declared against :data:`Base`; the engine and session factory
are built once by the server and shared by every request.
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from restbase.utils.logging import logger

Base = declarative_base()


def get_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for a database URL.

    In-memory SQLite databases share a single connection across threads so
    that every request handler sees the same data.

    Args:
        url: SQLAlchemy database URL
        echo: Echo SQL statements

    Returns:
        Engine instance
    """
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, echo=echo, **kwargs)
    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}", component="storage")
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def create_all(engine: Engine) -> None:
    """Create tables for every model declared on :data:`Base`."""
    Base.metadata.create_all(engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes the session. Commits are left to
    the caller.

    Usage:
        with session_scope(factory) as session:
            session.execute(...)
    """
    session = factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
