# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Async engine and sessions for the platform's Postgres.

The schema belongs to the hosting platform; this module only holds the
connection pool used by the service-role connection.

Example:
    await init_database(settings)

    async with get_session() as session:
        programs = (await session.execute(select(Program))).scalars().all()
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from academy.core.config.settings import Settings

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class DatabaseError(Exception):
    """The database is not initialized or a statement failed.

    Attributes:
        message: What was being attempted.
        original_error: Underlying SQLAlchemy exception, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error is None:
            return self.message
        return f"{self.message} ({self.original_error})"


async def init_database(settings: "Settings") -> None:
    """Create the engine and session factory.

    Raises:
        DatabaseError: If the engine cannot be created from the settings.
    """
    global _engine, _sessionmaker

    db = settings.database
    try:
        engine = create_async_engine(
            db.url,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
            # The platform fronts Postgres with a transaction pooler
            connect_args={"statement_cache_size": 0},
        )
    except SQLAlchemyError as e:
        raise DatabaseError("Could not create database engine", e) from e

    _engine = engine
    _sessionmaker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def close_database() -> None:
    global _engine, _sessionmaker

    engine, _engine, _sessionmaker = _engine, None, None
    if engine is not None:
        await engine.dispose()


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """The session factory.

    Raises:
        DatabaseError: If init_database() has not run.
    """
    if _sessionmaker is None:
        raise DatabaseError("Database not initialized")
    return _sessionmaker


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """A session that commits on normal exit and rolls back on error.

    SQLAlchemy errors escaping the block are re-raised as DatabaseError.
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatabaseError("Database operation failed", e) from e
        except BaseException:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """True when ``SELECT 1`` succeeds."""
    if _engine is None:
        return False
    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return False
    return True
