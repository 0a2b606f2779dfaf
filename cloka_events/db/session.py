# cloka_events/db/session.py
import logging
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cloka_events.db.base_class import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Process-wide handle on the relational store.

    Built once in the application lifespan and shared by reference; request
    handlers only ever borrow sessions from it through ``get_db``.
    """

    def __init__(self, url: str, **engine_kwargs):
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
            # An in-memory database only lives as long as its one connection
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs.setdefault("poolclass", StaticPool)
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)

        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            # SQLite leaves foreign keys (and ON DELETE CASCADE) off per connection
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def create_all(self) -> None:
        # Import the models so they are registered on the metadata
        from cloka_events import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables checked and created if necessary.")

    def ping(self) -> bool:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True

    def session(self) -> Generator[Session, None, None]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            # Closing also rolls back anything left uncommitted
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
