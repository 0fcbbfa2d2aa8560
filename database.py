"""Database handle, declarative base and session dependencies."""

import logging
from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from exceptions import DatabaseConnectionError

Base = declarative_base()
logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """Engine and session factory for one configured database.

    Built once per application and stored on ``app.state.database``;
    request handlers reach it through :func:`get_db`.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs = {"echo": echo}

        if url.startswith("sqlite"):
            # sessions are handed to FastAPI's threadpool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_sqlite(url):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def connect(self) -> None:
        """Check that the database answers; raise DatabaseConnectionError if not."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Failed to connect to database %s: %s", self.engine.url, exc)
            raise DatabaseConnectionError(f"cannot connect to {self.engine.url}") from exc
        logger.info("Connected to database %s", self.engine.url)

    def auto_migrate(self) -> None:
        # create_all only issues CREATE TABLE for tables that are missing
        import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
