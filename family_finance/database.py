"""
Database engine and session management.

There is no module-level engine. The application builds one
Database at startup, keeps it on app.state, and disposes it at
shutdown. Every request gets its own session from get_db().
"""

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


class Database:
    """Owns the connection pool and the session factory."""

    def __init__(self, url: str, pool_pre_ping: bool = True, **engine_kwargs):
        # pool_pre_ping tests connections before using them, which
        # handles a restarted database or a stale pooled connection.
        self.engine: Engine = create_engine(
            url,
            pool_pre_ping=pool_pre_ping,
            **engine_kwargs,
        )
        # autoflush=False: SQL is only sent on an explicit flush or
        # commit, so a unit of work controls exactly when rows land.
        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
        )

    def create_all(self) -> None:
        """Create every table known to Base.metadata (tests, local dev)."""
        from family_finance.models import Base

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """
    Provide a database session for a single request.

    The try/finally guarantees the session is closed even if
    the endpoint raises, so connections never leak from the pool.
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
