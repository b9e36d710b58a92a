"""Database connectivity for the FastAPI backend.

Two access patterns share one engine:

* a single long-lived writer connection used for inserts and lookups.
  Statements on it are serialized by a lock and committed one at a time.
* the engine's connection pool, handed out as sessions, used for listing.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Sequence
from typing import Any

from sqlalchemy import URL, Executable, RowMapping
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import get_settings
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine, the writer connection and the session factory."""

    def __init__(self, url: str | URL, reconnect_delay: float = 5.0) -> None:
        connect_args: dict[str, Any] = {}
        if str(url).startswith("sqlite+"):
            connect_args = {"check_same_thread": False}
        self.engine = create_async_engine(url, future=True, echo=False, connect_args=connect_args)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self.reconnect_delay = reconnect_delay
        self._writer: AsyncConnection | None = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.closed

    async def connect(self) -> None:
        """Open the writer connection and create the table if it is missing."""

        async with self._lock:
            await self._open_writer()
            await self._writer.run_sync(Base.metadata.create_all)
            await self._writer.commit()
        logger.info("Verified table exists")

    async def connect_with_retry(self) -> None:
        """Keep calling connect() every `reconnect_delay` seconds until it succeeds."""

        while True:
            try:
                await self.connect()
                return
            except Exception:
                # Driver errors are not all wrapped by SQLAlchemy (e.g. connect timeouts).
                logger.exception("DB connection error, retrying in %ss", self.reconnect_delay)
                await self._discard_writer()
                await asyncio.sleep(self.reconnect_delay)

    async def execute(self, statement: Executable) -> Sequence[RowMapping]:
        """Run one statement on the writer connection and commit it.

        Rows are buffered before the commit. A writer invalidated by the
        driver is dropped so the next call opens a fresh one.
        """

        async with self._lock:
            await self._open_writer()
            try:
                result = await self._writer.execute(statement)
                rows = result.mappings().all() if result.returns_rows else []
                await self._writer.commit()
            except DBAPIError as exc:
                if exc.connection_invalidated:
                    logger.warning("Writer connection lost, reopening on next use")
                    await self._discard_writer()
                else:
                    await self._writer.rollback()
                raise
            except SQLAlchemyError:
                await self._writer.rollback()
                raise
        return rows

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a pooled session."""

        async with self.sessionmaker() as session:
            yield session

    async def close(self) -> None:
        async with self._lock:
            await self._discard_writer()
        await self.engine.dispose()

    async def _open_writer(self) -> None:
        if self.connected:
            return
        self._writer = await self.engine.connect()
        logger.info("Connected to database %s", self.engine.url.render_as_string(hide_password=True))

    async def _discard_writer(self) -> None:
        writer, self._writer = self._writer, None
        if writer is None or writer.closed:
            return
        try:
            await writer.close()
        except (OSError, SQLAlchemyError) as exc:
            logger.warning("Error closing writer connection: %s", exc)


settings = get_settings()
database = Database(settings.sqlalchemy_url(), reconnect_delay=settings.db_reconnect_delay)
