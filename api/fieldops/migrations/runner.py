from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
import logging
import time
from typing import Any

from opentelemetry import trace

from fieldops.migrations.registry import Migration, MigrationRegistry
from fieldops.migrations.steps import StepContext, StepResult
from fieldops.services.database import Database

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class MigrationState(str, Enum):
    NOT_STARTED = "not_started"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(slots=True)
class MigrationReport:
    migration_id: str
    direction: str
    state: MigrationState = MigrationState.NOT_STARTED
    results: list[StepResult] = field(default_factory=list)
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def applied(self) -> list[StepResult]:
        return [result for result in self.results if result.applied]

    @property
    def skipped(self) -> list[StepResult]:
        return [result for result in self.results if not result.applied]


class MigrationRunner:
    def __init__(self, database: Database, *, allow_destructive: bool = False) -> None:
        self.database = database
        self.allow_destructive = allow_destructive
        self.reports: list[MigrationReport] = []

    async def run(self, migration: Migration) -> MigrationReport:
        report = MigrationReport(migration_id=migration.id, direction="up")
        self.reports.append(report)
        context = StepContext(allow_destructive=self.allow_destructive)

        with tracer.start_as_current_span("migration.run") as span:
            span.set_attribute("migration.id", migration.id)
            span.set_attribute("migration.steps", len(migration.steps))

            async def body(conn: Any) -> None:
                for step in migration.steps:
                    result = await step.execute(conn, context)
                    report.results.append(result)
                    logger.info(
                        "migration step %s migration=%s step=%s detail=%s",
                        "applied" if result.applied else "skipped",
                        migration.id,
                        result.name,
                        result.detail or "-",
                    )

            await self._in_transaction(report, body)
            span.set_attribute("migration.applied_steps", len(report.applied))

        logger.info(
            "migration committed migration=%s applied=%s skipped=%s duration_ms=%.2f",
            migration.id,
            len(report.applied),
            len(report.skipped),
            report.duration_ms,
        )
        return report

    async def rollback(self, migration: Migration) -> MigrationReport:
        report = MigrationReport(migration_id=migration.id, direction="down")
        self.reports.append(report)

        with tracer.start_as_current_span("migration.rollback") as span:
            span.set_attribute("migration.id", migration.id)

            async def body(conn: Any) -> None:
                for step in migration.reverse_steps():
                    reverted = await step.revert(conn)
                    report.results.append(
                        StepResult(name=step.name, applied=reverted, detail="reverted" if reverted else "kept")
                    )
                    logger.info(
                        "migration revert %s migration=%s step=%s",
                        "applied" if reverted else "skipped",
                        migration.id,
                        step.name,
                    )

            await self._in_transaction(report, body)

        logger.info("migration reverted migration=%s duration_ms=%.2f", migration.id, report.duration_ms)
        return report

    async def run_all(self, registry: MigrationRegistry) -> list[MigrationReport]:
        reports: list[MigrationReport] = []
        for migration in registry:
            reports.append(await self.run(migration))
        return reports

    async def _in_transaction(self, report: MigrationReport, body: Callable[[Any], Awaitable[None]]) -> None:
        started_at = time.perf_counter()
        async with self.database.connection() as conn:
            transaction = conn.transaction()
            await transaction.start()
            report.state = MigrationState.IN_TRANSACTION
            try:
                await body(conn)
            except BaseException as exc:
                await transaction.rollback()
                report.state = MigrationState.ROLLED_BACK
                report.error = f"{type(exc).__name__}: {exc}"
                report.duration_ms = (time.perf_counter() - started_at) * 1000.0
                logger.error(
                    "migration rolled back migration=%s direction=%s error=%s",
                    report.migration_id,
                    report.direction,
                    report.error,
                )
                raise
            await transaction.commit()
            report.state = MigrationState.COMMITTED
            report.duration_ms = (time.perf_counter() - started_at) * 1000.0
