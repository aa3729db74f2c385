"""
Database connection management.
Provides the async SQLite engine and session factory with foreign keys enforced.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool, NullPool

from utils import db_logger, StorageError, ErrorCodes

MEMORY_DB = ":memory:"


def _enable_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set on every connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class DatabaseManager:
    """Async SQLite database manager"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        if db_path != MEMORY_DB:
            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        db_logger.info(f"[Database] Using database path: {db_path}")
        self.async_engine: AsyncEngine = None
        self.AsyncSessionLocal = None

    @property
    def is_initialized(self) -> bool:
        return self.AsyncSessionLocal is not None

    def initialize(self):
        """Open the engine and session factory"""
        try:
            if self.db_path == MEMORY_DB:
                # one shared connection, otherwise every session sees an empty database
                self.async_engine = create_async_engine(
                    "sqlite+aiosqlite://",
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False}
                )
            else:
                self.async_engine = create_async_engine(
                    f"sqlite+aiosqlite:///{self.db_path}",
                    poolclass=NullPool
                )

            event.listen(self.async_engine.sync_engine, "connect", _enable_foreign_keys)

            self.AsyncSessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self.async_engine,
                class_=AsyncSession
            )

            db_logger.info("[Database] Database connection initialized successfully")

        except Exception as e:
            db_logger.error(f"[Database] Failed to initialize database: {e}")
            raise StorageError(
                f"Failed to initialize database: {e}",
                ErrorCodes.STORAGE_CONNECTION_FAILED,
                {"db_path": self.db_path}
            ) from e

    async def create_tables(self):
        """Create tables"""
        from .models import Base

        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            db_logger.info("[Database] Database tables created successfully")
        except Exception as e:
            db_logger.error(f"[Database] Failed to create tables: {e}")
            raise

    def get_async_session(self) -> AsyncSession:
        """Yield a session that commits on success and rolls back on error"""
        if not self.AsyncSessionLocal:
            raise RuntimeError("Database not initialized")
        return self.AsyncSessionLocal()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Session committed on success and rolled back on any error"""
        async with self.get_async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self):
        """Dispose of the engine"""
        if self.async_engine:
            await self.async_engine.dispose()
            self.async_engine = None
            self.AsyncSessionLocal = None
            db_logger.info("[Database] Database connections closed")
