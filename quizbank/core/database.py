"""
Process-wide store handle: one async engine and session factory, opened at
startup and disposed at shutdown.
"""
from typing import AsyncGenerator, Optional
import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from quizbank.core.config import settings
from quizbank.models.orm import Base

logger = logging.getLogger(__name__)

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

class Database:
    def __init__(self):
        self.engine: Optional[AsyncEngine] = None
        self.sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self, url: Optional[str] = None) -> None:
        """Create the engine and session factory."""
        url = url or settings.DATABASE_URL
        if url.startswith("sqlite"):
            self.engine = create_async_engine(url, echo=settings.DATABASE_ECHO)
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_async_engine(
                url,
                echo=settings.DATABASE_ECHO,
                pool_size=settings.DATABASE_POOL_SIZE,
                max_overflow=settings.DATABASE_MAX_OVERFLOW,
                pool_timeout=settings.DATABASE_POOL_TIMEOUT,
                pool_pre_ping=True,
            )
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database engine created for %s", self.engine.url.render_as_string(hide_password=True))

    async def create_all(self) -> None:
        """Create tables if they don't exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def disconnect(self) -> None:
        """Dispose of pooled connections."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.sessionmaker = None

    def session(self) -> AsyncSession:
        if self.sessionmaker is None:
            raise RuntimeError("Database is not connected")
        return self.sessionmaker()

# Global store handle
db = Database()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting an async database session."""
    async with db.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
