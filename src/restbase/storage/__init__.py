"""
restbase Storage Package.

SQLAlchemy engine, session and declarative base helpers.
"""

from restbase.storage.database import (
    Base,
    create_all,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "create_all",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
