"""
Taskboard Database Session Management.

``Database`` is an explicitly constructed persistence handle: build it with a
URL, ``open()`` it, pass it to the stores, ``close()`` it on shutdown. There
is no module-level connection state, so each test (or each application) owns
its own handle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.db.base import Base
from taskboard.engine.config import DatabaseConfig
from taskboard.engine.errors import InternalError

logger = logging.getLogger("taskboard.db")


class Database:
    """
    Owns one SQLAlchemy engine and its session factory.

    Usage:
        db = Database("sqlite:///taskboard.db")
        db.open(create_tables=True)
        with db.session_scope() as session:
            ...
        db.close()
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        pool_pre_ping: bool = True,
    ):
        self.url = url
        self._echo = echo
        self._pool_options = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
            "pool_pre_ping": pool_pre_ping,
        }
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "Database":
        return cls(
            config.url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=config.pool_pre_ping,
        )

    # -- lifecycle ----------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._engine

    def _engine_kwargs(self) -> Dict[str, Any]:
        if not self.url.startswith("sqlite"):
            return dict(self._pool_options)
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty DB
            kwargs["poolclass"] = StaticPool
        return kwargs

    def open(self, create_tables: bool = False) -> "Database":
        """Create the engine and session factory. Idempotent."""
        if self._engine is not None:
            return self

        engine = create_engine(self.url, echo=self._echo, **self._engine_kwargs())

        if self.url.startswith("sqlite"):
            @event.listens_for(engine, "connect")
            def _enable_sqlite_fks(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine)
        logger.info("Database connected: %s", engine.url.render_as_string(hide_password=True))

        if create_tables:
            self.create_all()
        return self

    def close(self) -> None:
        """Dispose the engine's connection pool. Idempotent."""
        if self._engine is None:
            return
        self._engine.dispose()
        logger.info("Database disconnected: %s", self._engine.url.render_as_string(hide_password=True))
        self._engine = None
        self._session_factory = None

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    def health_check(self) -> bool:
        """Check if the engine can connect."""
        if self._engine is None:
            return False
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("Database health check failed: %s", exc)
            return False

    # -- sessions -----------------------------------------------------------

    def get_session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Session with auto-commit/rollback.

        Persistence faults are rolled back and re-raised as InternalError;
        anything else propagates unchanged after the rollback.
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Database operation failed: %s", exc)
            raise InternalError("Database operation failed", cause=type(exc).__name__) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
