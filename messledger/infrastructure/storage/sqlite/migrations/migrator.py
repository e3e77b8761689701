"""
Schema migrations and integrity checks for the ledger database.

Migrations are plain SQL files named vNNN_description.sql next to this
module. Applied versions are recorded in schema_migrations together with
a checksum of the file; an applied file must never change, new schema
work goes into a new version, and a changed file fails the run. An
existing database is copied aside before migrating and put back if
anything goes wrong.

verify_schema_integrity() re-checks the bookkeeping rules the services
maintain (lot ranges, allocation totals, a single open period) directly
in SQL, so a damaged database is noticed before a period is closed on it.
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from messledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
_MIGRATION_FILE = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = [
    "items",
    "periods",
    "receipts",
    "receipt_lines",
    "consumptions",
    "consumption_lines",
    "consumption_allocations",
    "period_item_balances",
    "schema_migrations",
]

# (check name, key the offending rows are reported under, query returning them)
LEDGER_CHECKS: list[tuple[str, str, str]] = [
    (
        "lot_remaining_qty",
        "receipt_line_ids",
        """
        SELECT id FROM receipt_lines
        WHERE remaining_qty < 0 OR remaining_qty > quantity
        ORDER BY id
        """,
    ),
    (
        "single_open_period",
        "open_periods",
        "SELECT code FROM periods WHERE status = 'OPEN' ORDER BY code",
    ),
    (
        "allocations_match_entered_qty",
        "consumption_line_ids",
        """
        SELECT cl.id
        FROM consumption_lines cl
        JOIN consumptions c ON c.id = cl.consumption_id
        LEFT JOIN consumption_allocations ca ON ca.consumption_line_id = cl.id
        WHERE c.is_void = 0
        GROUP BY cl.id, cl.entered_qty
        HAVING COALESCE(SUM(ca.qty), 0) != cl.entered_qty
        ORDER BY cl.id
        """,
    ),
]


@dataclass
class MigrationInfo:
    """One migration file."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _MIGRATION_FILE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest[:16])


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def discover_migrations() -> list[MigrationInfo]:
    """Migration files shipped with the package, oldest version first."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum; empty on a database never migrated."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it in schema_migrations."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, _elapsed_ms(started)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=_elapsed_ms(started),
            error=str(e),
        )

    result = MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=_elapsed_ms(started),
    )
    logger.info(
        "migration_applied",
        version=result.version,
        execution_time_ms=result.execution_time_ms,
    )
    return result


async def check_foreign_keys(conn: aiosqlite.Connection) -> int:
    """Number of rows violating a foreign key."""
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


def create_backup(db_path: Path) -> Path:
    """Copy the database file next to itself with a timestamp suffix."""
    backup_path = db_path.with_suffix(f".backup_{datetime.now():%Y%m%d_%H%M%S}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def _migrate(conn: aiosqlite.Connection) -> list[MigrationResult]:
    results: list[MigrationResult] = []
    applied = await get_applied_migrations(conn)

    for migration in discover_migrations():
        if migration.version in applied:
            if applied[migration.version] != migration.checksum:
                logger.error("migration_checksum_changed", version=migration.version)
                results.append(
                    MigrationResult(
                        version=migration.version,
                        name=migration.name,
                        success=False,
                        execution_time_ms=0,
                        error=(
                            f"checksum_mismatch: applied {applied[migration.version]}, "
                            f"file {migration.checksum}"
                        ),
                    )
                )
                break
            continue

        result = await apply_migration(conn, migration)
        results.append(result)
        if not result.success:
            break

        violations = await check_foreign_keys(conn)
        if violations:
            logger.error(
                "post_migration_validation_failed",
                version=migration.version,
                foreign_key_violations=violations,
            )
            result.success = False
            result.error = f"{violations} foreign key violation(s) after migration"
            break

    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool | None = None,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Args:
        db_path: Database file; defaults to the configured storage path.
        create_backup_before: Copy an existing database aside first;
            defaults to STORAGE_BACKUP_BEFORE_MIGRATE.

    Returns:
        Results of the migrations attempted; empty when already up to date.
    """
    storage = get_settings().storage
    db_path = db_path or storage.db_path
    if create_backup_before is None:
        create_backup_before = storage.backup_before_migrate
    db_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info("initializing_database", db_path=str(db_path))
    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None

    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            results = await _migrate(conn)
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()
    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied and pending migration versions of a database."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    applied: dict[str, str] = {}
    if db_path.exists():
        async with aiosqlite.connect(db_path) as conn:
            applied = await get_applied_migrations(conn)

    return {
        "exists": db_path.exists(),
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


def _check(name: str, passed: bool, **context) -> dict:
    return {"check": name, "status": "PASS" if passed else "FAIL", **context}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Run SQLite and ledger checks.

    Returns one dict per check with "check", "status" (PASS/FAIL) and the
    offending rows. Ledger checks are skipped when tables are missing.
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        fk_violations = await check_foreign_keys(conn)
        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]

        checks = [
            _check("foreign_keys", not fk_violations, violations=fk_violations),
            _check("integrity", integrity == "ok", result=integrity),
            _check("required_tables", not missing, missing=missing),
        ]
        if missing:
            return checks

        for name, key, query in LEDGER_CHECKS:
            cursor = await conn.execute(query)
            rows = [row[0] for row in await cursor.fetchall()]
            passed = len(rows) <= 1 if name == "single_open_period" else not rows
            checks.append(_check(name, passed, **{key: rows}))

    failed = [c["check"] for c in checks if c["status"] != "PASS"]
    if failed:
        logger.warning("integrity_checks_failed", checks=failed)
    return checks


def print_checks(checks: list[dict]) -> bool:
    """Print check results; True when all passed."""
    ok = True
    for check in checks:
        print(f"  [{check['status']}] {check['check']}")
        if check["status"] == "PASS":
            continue
        ok = False
        for key, value in check.items():
            if key not in ("check", "status"):
                print(f"         {key}: {value}")
    return ok


def print_results(results: list[MigrationResult]) -> bool:
    """Print migration results; True when none failed."""
    if not results:
        print("  Database is up to date.")
    for result in results:
        state = "OK" if result.success else f"FAILED ({result.error})"
        print(f"  v{result.version} {result.name}: {state} [{result.execution_time_ms}ms]")
    return all(r.success for r in results)


def main() -> None:
    """python -m messledger.infrastructure.storage.sqlite.migrations.migrator"""
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Mess ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status")
    mode.add_argument("--verify", action="store_true", help="Run integrity checks")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    args = parser.parse_args()

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        print(f"  Current: {status['current_version'] or '-'}")
        print(f"  Pending: {', '.join(status['pending_migrations']) or '-'}")
        return

    if args.verify:
        ok = print_checks(asyncio.run(verify_schema_integrity(args.db_path)))
    else:
        backup = False if args.no_backup else None
        ok = print_results(asyncio.run(initialize_database(args.db_path, backup)))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
