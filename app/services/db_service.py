from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import StorageError
from app.core.logger import logger
from app.models.db_models import Base


class Database:
    """
    Process-scoped handle around a SQLAlchemy engine and its connection pool.

    Built once by the application factory and passed to every service;
    nothing else in the app opens connections.
    """

    def __init__(self, url: str, pool_size: int = 10):
        self.url = url
        self.engine = create_engine(
            url,
            pool_size=pool_size,
            max_overflow=0,
            pool_pre_ping=True,
            future=True,
        )
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def create_tables(self):
        Base.metadata.create_all(self.engine)

    def check_connection(self):
        """Borrow a pooled connection once and hand it straight back."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            logger.info("✅ Successfully connected to the database")
        except SQLAlchemyError as e:
            logger.critical(f"❌ Error connecting to the database: {e}")
            raise StorageError("Database unavailable.") from e

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Scoped unit of work. The connection goes back to the pool on every
        exit path; driver errors surface as StorageError.
        """
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"❌ DB Error: {e}")
            raise StorageError() from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self):
        self.engine.dispose()
