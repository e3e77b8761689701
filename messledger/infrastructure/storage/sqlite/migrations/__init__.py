"""Versioned SQL migrations for the ledger database."""

from messledger.infrastructure.storage.sqlite.migrations.migrator import (
    LEDGER_CHECKS,
    REQUIRED_TABLES,
    MigrationResult,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)

__all__ = [
    "LEDGER_CHECKS",
    "REQUIRED_TABLES",
    "MigrationResult",
    "get_migration_status",
    "initialize_database",
    "verify_schema_integrity",
]
