"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

# Keep the settings singleton away from the working directory's data/
os.environ.setdefault("STORAGE_DATA_DIR", tempfile.mkdtemp(prefix="messledger-test-"))

import pytest  # noqa: E402

from messledger.infrastructure.storage.sqlite import ConnectionPool, SQLiteLedgerStore  # noqa: E402
from messledger.infrastructure.storage.sqlite.migrations.migrator import (  # noqa: E402
    initialize_database,
)


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "ledger.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> AsyncGenerator[Path, None]:
    """Temporary database with the full schema applied by the migrator."""
    await initialize_database(temp_db_path, create_backup_before=False)
    yield temp_db_path


@pytest.fixture
async def pool(initialized_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over the temporary database, installed as the global pool."""
    import messledger.infrastructure.storage.sqlite as sqlite_module
    import messledger.infrastructure.storage.sqlite.connection as conn_module

    test_pool = ConnectionPool(initialized_db, pool_size=2, busy_timeout=5000)
    await test_pool.initialize()
    conn_module._pool = test_pool
    sqlite_module._ledger_store = None
    try:
        yield test_pool
    finally:
        await test_pool.close()
        conn_module._pool = None
        sqlite_module._ledger_store = None


@pytest.fixture
def ledger_store(pool: ConnectionPool) -> SQLiteLedgerStore:
    """Ledger store bound to the temporary database."""
    return SQLiteLedgerStore(pool)
