"""
Module: quotedesk_kernel.db.engine
Responsibility: SQLAlchemy engine and session-factory management plus the
    transactional scope used by the SQL stores.
Architecture position: Kernel > DB.  May import from db/base.py and models/
    (for table registration only).

Each ``Database`` owns its engine and session factory; there is no
module-level connection state, so tests and multiple desks can coexist.

Failure modes:
    - SQLAlchemyError subclasses propagate from ``session_scope`` after the
      session is rolled back.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from quotedesk_kernel.db.base import Base
from quotedesk_kernel.logging_config import get_logger

logger = get_logger("db.engine")


class Database:
    """
    Engine + session factory for one database URL.

    In-memory SQLite URLs share a single connection (StaticPool) so every
    session sees the same database.
    """

    def __init__(self, database_url: str, echo: bool = False):
        url = make_url(database_url)
        kwargs: dict = {"echo": echo}
        if url.get_backend_name() == "sqlite":
            kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        self.url = url
        self.engine: Engine = create_engine(url, **kwargs)
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False
        )
        logger.info(
            "engine_initialized",
            extra={"dialect": url.get_backend_name(), "echo": echo},
        )

    def session(self) -> Session:
        """Get a new session instance."""
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        On normal exit the session is committed and closed; on exception it
        is rolled back, closed, and the exception is re-raised.
        """
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            logger.warning("transaction_rolled_back", exc_info=True)
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create all tables registered on ``Base.metadata``."""
        import quotedesk_kernel.models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution - primarily for testing."""
        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
