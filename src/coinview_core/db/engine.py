"""Database engine and session management.

No module-level engine: callers build one and hand the session factory to
the stores that need it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coinview_core.db.base import Base


def create_store_engine(url: str, **kwargs) -> Engine:
    """Create an engine; SQLite is opened so worker threads can share it."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {})["check_same_thread"] = False
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            # One shared connection, otherwise each thread sees an empty database.
            kwargs.setdefault("poolclass", StaticPool)
    return create_engine(url, **kwargs)


def init_schema(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    import coinview_core.db.tables  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(engine)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """One unit of work: commit on success, roll back on error, always close."""
    session = factory()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()
