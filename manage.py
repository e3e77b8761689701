#!/usr/bin/env python3
"""
Mess ledger management CLI.

Usage:
    python manage.py migrate                  Apply pending migrations
    python manage.py status                   Show applied and pending migrations
    python manage.py verify                   Run ledger integrity checks
    python manage.py seed-items rice:kg oil:l Create items if missing
    python manage.py serve                    Start the API server
"""

import argparse
import asyncio
import sys

from messledger.config import configure_logging, get_settings


def _parse_item_spec(spec: str) -> tuple[str, str]:
    """Split "name:uom"; a missing uom falls back to LEDGER_DEFAULT_UOM."""
    name, _, uom = spec.partition(":")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Expected name:uom, got {spec!r}")
    return name, uom.strip() or get_settings().ledger.default_uom


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from messledger.infrastructure.storage.sqlite.migrations.migrator import (
        initialize_database,
        print_results,
    )

    backup = False if args.no_backup else None
    if not print_results(asyncio.run(initialize_database(create_backup_before=backup))):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Show migration status."""
    from messledger.infrastructure.storage.sqlite.migrations.migrator import (
        get_migration_status,
    )

    status = asyncio.run(get_migration_status())
    print(f"Database: {get_settings().storage.db_path}")
    print(f"Current:  {status['current_version'] or '-'}")
    print(f"Applied:  {', '.join(status['applied_migrations']) or '-'}")
    print(f"Pending:  {', '.join(status['pending_migrations']) or '-'}")


def cmd_verify(args: argparse.Namespace) -> None:
    """Run schema and ledger integrity checks."""
    from messledger.infrastructure.storage.sqlite.migrations.migrator import (
        print_checks,
        verify_schema_integrity,
    )

    if not print_checks(asyncio.run(verify_schema_integrity())):
        sys.exit(1)


async def _seed_items(specs: list[tuple[str, str]]) -> list[tuple[str, bool]]:
    from messledger.core.entities.item import Item
    from messledger.infrastructure.storage.sqlite import close_pool, get_ledger_store

    outcome: list[tuple[str, bool]] = []
    store = await get_ledger_store()
    try:
        async with store.transaction() as session:
            for name, uom in specs:
                if await session.get_item_by_name(name) is not None:
                    outcome.append((name, False))
                    continue
                await session.create_item(Item(name=name, uom=uom))
                outcome.append((name, True))
    finally:
        await close_pool()
    return outcome


def cmd_seed_items(args: argparse.Namespace) -> None:
    """Create items that do not exist yet."""
    for name, created in asyncio.run(_seed_items(args.items)):
        print(f"  {name}: {'created' if created else 'exists'}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "messledger.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def main() -> None:
    settings = get_settings()
    configure_logging()

    parser = argparse.ArgumentParser(
        description="Mess ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.set_defaults(func=cmd_migrate)

    sub.add_parser("status", help="Show migration status").set_defaults(func=cmd_status)
    sub.add_parser("verify", help="Run ledger integrity checks").set_defaults(func=cmd_verify)

    p_seed = sub.add_parser("seed-items", help="Create items (name:uom)")
    p_seed.add_argument("items", nargs="+", type=_parse_item_spec, help="Items as name:uom")
    p_seed.set_defaults(func=cmd_seed_items)

    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=settings.api.host, help="Bind host")
    p_serve.add_argument("--port", type=int, default=settings.api.port, help="Bind port")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
