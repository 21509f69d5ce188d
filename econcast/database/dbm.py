"""Async access to the SQLite file holding questions, forecasts and users.

The snapshot source reads through ``DBM.read``/``DBM.session``; the submission
sink and auto-resolve write through ``DBM.session`` transactions. WAL lets the
leaderboard CLI read while a writer appends forecast history.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.sql.elements import ClauseElement, TextClause

from econcast.config import DatabaseSettings

from .schema import Base


def _enable_wal(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def build_sqlite_url(path: str) -> str:
    """aiosqlite URL for a forecast store file; relative paths resolve against cwd."""
    return f"sqlite+aiosqlite:///{os.path.abspath(path)}"


def _check_query(query: Any) -> None:
    if isinstance(query, str):
        raise TypeError("Raw SQL strings are disallowed. Use sqlalchemy.text().")
    if not isinstance(query, (TextClause, ClauseElement)):
        raise TypeError("Query must be a SQLAlchemy TextClause or ClauseElement.")


class DBM:
    """Owns the engine and session factory for one forecast store.

    ``path`` (e.g. from ``--db``) overrides ``settings.path``. The parent
    directory is created so a fresh install can start from an empty store.
    """

    def __init__(self, settings: DatabaseSettings | None = None, path: str | None = None):
        self.settings = settings or DatabaseSettings()
        self.db_path = path or self.settings.path
        directory = os.path.dirname(os.path.abspath(self.db_path))
        os.makedirs(directory, exist_ok=True)

        self.engine: AsyncEngine = create_async_engine(
            build_sqlite_url(self.db_path),
            echo=self.settings.echo,
            future=True,
        )
        # Per-connection pragma, so it is set on each connect.
        event.listen(self.engine.sync_engine, "connect", _enable_wal)

        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as session:
            yield session

    async def init_schema(self) -> None:
        """Create the question, forecast, forecast_history and app_user tables if missing."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def read(self, query: Any, params: dict | None = None) -> list[Any]:
        """Run a SELECT and return the rows as mappings keyed by column name."""
        _check_query(query)
        async with self.session() as session:
            result: Result = await session.execute(query, params or {})
            return result.mappings().all()

    async def write(self, query: Any, params: dict | None = None) -> int:
        """Run one parameterized statement in its own transaction; returns rows affected."""
        _check_query(query)
        if not params:
            raise ValueError("Parameterized writes are required. Provide a params mapping.")

        async with self.session() as session:
            async with session.begin():
                result: Result = await session.execute(query, params)
                return result.rowcount or 0

    async def dispose(self) -> None:
        """Close pooled connections; the CLI calls this before exiting."""
        await self.engine.dispose()
