from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path
import sys
import traceback

from fieldops.core.config import get_settings
from fieldops.core.telemetry import configure_logging, setup_telemetry, shutdown_telemetry
from fieldops.migrations.catalog import build_registry
from fieldops.migrations.registry import Migration, MigrationRegistry
from fieldops.migrations.runner import MigrationReport, MigrationRunner
from fieldops.migrations.steps import ExecuteSql
from fieldops.migrations.verify import verify_schema
from fieldops.services.database import Database

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fieldops-migrate", description="Apply or revert fieldops schema migrations.")
    parser.add_argument(
        "--database-url",
        help="Postgres DSN; defaults to FIELDOPS_DATABASE_URL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    up = subparsers.add_parser("up", help="apply migrations in id order")
    up.add_argument("--only", metavar="ID", help="apply a single migration")
    up.add_argument(
        "--allow-destructive",
        action="store_true",
        help="allow back-fills to delete rows that have no derivable value",
    )

    down = subparsers.add_parser("down", help="revert one migration")
    down.add_argument("migration_id", metavar="ID")

    subparsers.add_parser("verify", help="check that the expected tables and enums exist")
    subparsers.add_parser("list", help="list known migrations")

    apply_sql = subparsers.add_parser("apply-sql", help="run a SQL script inside one transaction")
    apply_sql.add_argument("path", type=Path)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    registry = build_registry()

    if args.command == "list":
        _print_migrations(registry)
        return EXIT_OK

    settings = get_settings()
    database_url = args.database_url or settings.database_url
    if not database_url:
        print("fieldops-migrate: a database URL is required (--database-url or FIELDOPS_DATABASE_URL)", file=sys.stderr)
        return EXIT_USAGE

    target = getattr(args, "only", None) or getattr(args, "migration_id", None)
    if target is not None and target not in registry:
        print(f"fieldops-migrate: unknown migration id {target!r}", file=sys.stderr)
        return EXIT_USAGE

    if args.command == "apply-sql" and not args.path.is_file():
        print(f"fieldops-migrate: no such file {str(args.path)!r}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging()
    runtime = setup_telemetry(settings.model_copy(update={"otel_service_name": f"{settings.otel_service_name}-migrate"}))
    database = Database(
        database_url,
        min_pool_size=1,
        max_pool_size=2,
        command_timeout=settings.database_command_timeout_seconds,
    )
    try:
        return asyncio.run(_dispatch(args, database, registry))
    except Exception as exc:
        print(f"fieldops-migrate: {args.command} failed: {exc}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return EXIT_FAILURE
    finally:
        shutdown_telemetry(runtime)


async def _dispatch(args: argparse.Namespace, database: Database, registry: MigrationRegistry) -> int:
    try:
        if args.command == "up":
            runner = MigrationRunner(database, allow_destructive=args.allow_destructive)
            if args.only:
                _print_report(await runner.run(registry.get(args.only)))
            else:
                for migration in registry:
                    _print_report(await runner.run(migration))
            return EXIT_OK

        if args.command == "down":
            runner = MigrationRunner(database)
            _print_report(await runner.rollback(registry.get(args.migration_id)))
            return EXIT_OK

        if args.command == "verify":
            async with database.connection() as conn:
                report = await verify_schema(conn)
            for name, present in {**report.tables, **report.enums}.items():
                print(f"{'ok' if present else 'MISSING':<8} {name}")
            return EXIT_OK if report.ok else EXIT_FAILURE

        if args.command == "apply-sql":
            path: Path = args.path
            migration = Migration(
                id=f"sql:{path.name}",
                name=path.stem,
                steps=[ExecuteSql(path.stem, path.read_text(encoding="utf-8"))],
            )
            _print_report(await MigrationRunner(database).run(migration))
            return EXIT_OK

        raise ValueError(f"unsupported command: {args.command}")
    finally:
        await database.close()


def _print_migrations(registry: MigrationRegistry) -> None:
    for migration in registry:
        print(f"{migration.id}  {migration.name}  ({len(migration.steps)} steps)")


def _print_report(report: MigrationReport) -> None:
    print(
        f"{report.migration_id} {report.direction} {report.state.value} "
        f"applied={len(report.applied)} skipped={len(report.skipped)} duration_ms={report.duration_ms:.2f}"
    )
    for result in report.applied:
        detail = f" {result.detail}" if result.detail else ""
        print(f"  + {result.name}{detail}")


if __name__ == "__main__":
    raise SystemExit(main())
