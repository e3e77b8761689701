"""
aiosqlite connection pool for the ledger database.

Connections run in autocommit mode and every unit of work opens its own
transaction:

- transaction(): BEGIN IMMEDIATE. Takes SQLite's write lock before the first
  read, so two consumptions can never both see the same remaining_qty.
  Other writers wait up to busy_timeout ms.
- snapshot(): deferred BEGIN, always rolled back. In WAL mode the first read
  pins a snapshot, so a balance report sees one consistent ledger state
  while writers continue.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from messledger.config import get_logger, get_settings

logger = get_logger(__name__)

# Log writers that queued this long on the write lock
SLOW_LOCK_MS = 500


class ConnectionPool:
    """Fixed set of aiosqlite connections handed out through a queue."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._connect()
                self._connections.append(conn)
                self._idle.put_nowait(conn)
            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        await conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection with no transaction open."""
        if not self._initialized:
            await self.initialize()
        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection holding the write lock; commit on success, else roll back."""
        async with self.acquire() as conn:
            started = time.perf_counter()
            await conn.execute("BEGIN IMMEDIATE")
            waited_ms = (time.perf_counter() - started) * 1000
            if waited_ms >= SLOW_LOCK_MS:
                logger.warning("write_lock_wait", waited_ms=round(waited_ms, 1))

            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection inside a read-only snapshot."""
        async with self.acquire() as conn:
            await conn.execute("BEGIN")
            try:
                yield conn
            finally:
                await conn.rollback()

    async def close(self) -> None:
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._idle = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Global pool over the configured database, created on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
