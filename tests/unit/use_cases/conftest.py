"""Fixtures for use case tests: a mock store whose sessions are mocks too."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from messledger.core.interfaces.ledger_store import ILedgerSession, ILedgerStore


@pytest.fixture
def mock_session():
    """Mock session shared by every transaction and snapshot of mock_store."""
    return AsyncMock(spec=ILedgerSession)


@pytest.fixture
def mock_store(mock_session):
    """Mock ledger store. transaction() and snapshot() yield mock_session."""

    @asynccontextmanager
    async def _session():
        yield mock_session

    store = MagicMock(spec=ILedgerStore)
    store.transaction.side_effect = _session
    store.snapshot.side_effect = _session
    return store
