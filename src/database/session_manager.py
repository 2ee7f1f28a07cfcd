"""
Session Manager - Database engine and session management
Handles SQLAlchemy sessions for the company / article / social content records
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.database.models.base import Base
from src.utils.logger.custom_logging import LoggerMixin


class SessionManager(LoggerMixin):
    """
    Owns one SQLAlchemy engine and its session factory.

    In-memory SQLite (``sqlite://``) gets a StaticPool so that every
    session shares the single underlying connection.
    """

    def __init__(self, database_url: str, echo: bool = False):
        super().__init__()
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._SessionLocal = None

    @property
    def is_memory_sqlite(self) -> bool:
        return self.database_url in ("sqlite://", "sqlite:///:memory:")

    @property
    def engine(self) -> Engine:
        """Lazy initialization of SQLAlchemy engine"""
        if self._engine is None:
            kwargs = {"echo": self.echo}
            if self.database_url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
                database = make_url(self.database_url).database
                if database and not self.is_memory_sqlite:
                    Path(database).parent.mkdir(parents=True, exist_ok=True)
                if self.is_memory_sqlite:
                    kwargs["poolclass"] = StaticPool
            else:
                kwargs["pool_pre_ping"] = True

            self._engine = create_engine(self.database_url, **kwargs)
            self.logger.info(f"[SESSION MANAGER] Engine created for {self._mask_db_url(self.database_url)}")
        return self._engine

    @property
    def SessionLocal(self):
        """Lazy initialization of session factory"""
        if self._SessionLocal is None:
            self._SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self.engine,
            )
        return self._SessionLocal

    def create_tables(self) -> None:
        """Create every mapped table that does not exist yet."""
        # Register the record models on Base.metadata
        from src.database.models import news_records  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        self.logger.info("[SESSION MANAGER] Tables ensured")

    def get_session(self) -> Session:
        """Caller is responsible for closing the session"""
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Session context manager. Commits on success, rolls back on failure.

        Example:
            with session_manager.session_scope() as session:
                session.add(record)
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            self.logger.error(f"[SESSION MANAGER] Database error: {e}")
            raise
        finally:
            session.close()

    def test_connection(self) -> bool:
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            self.logger.error(f"[SESSION MANAGER] Database connection test failed: {e}")
            return False

    def close(self) -> None:
        """Dispose the engine. Should be called on application shutdown."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._SessionLocal = None
            self.logger.info("[SESSION MANAGER] All connections closed")

    def _mask_db_url(self, url: str) -> str:
        """Hide credentials before logging"""
        if '@' in url:
            protocol = url.split('//')[0]
            host_db = url.split('@', 1)[1]
            return f"{protocol}//***:***@{host_db}"
        return url
