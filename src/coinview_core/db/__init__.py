"""Database layer — engine, session, ORM base."""

from coinview_core.db.base import Base
from coinview_core.db.engine import (
    create_store_engine,
    init_schema,
    make_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "create_store_engine",
    "init_schema",
    "make_session_factory",
    "session_scope",
]
