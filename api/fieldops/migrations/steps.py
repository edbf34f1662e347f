from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import re
from typing import Any

from asyncpg import exceptions as pg_exc

from fieldops.migrations import schema

_REFERENCES_RE = re.compile(r"\breferences\s+([a-z_][a-z0-9_]*)", re.IGNORECASE)


class DestructiveChangeRefused(RuntimeError):
    """Raised when a back-fill would delete rows and destructive changes were not allowed."""

    def __init__(self, *, table: str, column: str, rows: int, backfilled: int) -> None:
        self.table = table
        self.column = column
        self.rows = rows
        self.backfilled = backfilled
        super().__init__(
            f"{rows} row(s) in {table} have no derivable {column} and would be deleted; "
            "rerun with --allow-destructive to accept the deletion"
        )


@dataclass(slots=True)
class StepResult:
    name: str
    applied: bool
    detail: str | None = None
    counts: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class StepContext:
    allow_destructive: bool = False


class MigrationStep:
    name: str
    keep_on_revert: bool

    async def probe(self, conn: Any) -> bool:
        raise NotImplementedError

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        raise NotImplementedError

    def revert_sql(self) -> list[str]:
        return []

    def created_table(self) -> str | None:
        return None

    def referenced_tables(self) -> set[str]:
        return set()

    async def execute(self, conn: Any, context: StepContext | None = None) -> StepResult:
        if await self.probe(conn):
            return StepResult(name=self.name, applied=False, detail="already present")
        return await self.apply(conn, context or StepContext())

    async def revert(self, conn: Any) -> bool:
        if self.keep_on_revert:
            return False
        statements = self.revert_sql()
        for statement in statements:
            await conn.execute(statement)
        return bool(statements)


def _references_in(*fragments: str) -> set[str]:
    found: set[str] = set()
    for fragment in fragments:
        found.update(match.lower() for match in _REFERENCES_RE.findall(fragment))
    return found


def _quote_literal(value: str) -> str:
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def _status_count(status: str | None) -> int:
    if not status:
        return 0
    tail = status.rsplit(" ", maxsplit=1)[-1]
    return int(tail) if tail.isdigit() else 0


@dataclass(slots=True)
class CreateEnum(MigrationStep):
    type_name: str
    values: Sequence[str]
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"enum:{self.type_name}"

    async def probe(self, conn: Any) -> bool:
        return await schema.enum_exists(conn, self.type_name)

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        values_sql = ", ".join(_quote_literal(value) for value in self.values)
        try:
            # Savepoint so a lost race on the type name leaves the outer transaction usable.
            async with conn.transaction():
                await conn.execute(f"create type {self.type_name} as enum ({values_sql})")
        except pg_exc.DuplicateObjectError:
            return StepResult(name=self.name, applied=False, detail="type already exists")
        return StepResult(name=self.name, applied=True)

    def revert_sql(self) -> list[str]:
        return [f"drop type if exists {self.type_name}"]


@dataclass(slots=True)
class CreateTable(MigrationStep):
    table: str
    columns: Sequence[str]
    indexes: Sequence[tuple[str, str]] = ()
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"table:{self.table}"

    async def probe(self, conn: Any) -> bool:
        return await schema.table_exists(conn, self.table)

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        body = ",\n  ".join(self.columns)
        await conn.execute(f"create table {self.table} (\n  {body}\n)")
        for index_name, index_columns in self.indexes:
            await conn.execute(f"create index if not exists {index_name} on {self.table} ({index_columns})")
        return StepResult(name=self.name, applied=True, counts={"indexes": len(self.indexes)})

    def revert_sql(self) -> list[str]:
        return [f"drop table if exists {self.table}"]

    def created_table(self) -> str | None:
        return self.table

    def referenced_tables(self) -> set[str]:
        return _references_in(*self.columns) - {self.table}


@dataclass(slots=True)
class AddColumn(MigrationStep):
    table: str
    column: str
    definition: str
    backfill_sql: str | None = None
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"column:{self.table}.{self.column}"

    async def probe(self, conn: Any) -> bool:
        return await schema.column_exists(conn, self.table, self.column)

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        await conn.execute(f"alter table {self.table} add column {self.column} {self.definition}")
        counts: dict[str, int] = {}
        if self.backfill_sql:
            counts["backfilled"] = _status_count(await conn.execute(self.backfill_sql))
        return StepResult(name=self.name, applied=True, counts=counts)

    def revert_sql(self) -> list[str]:
        return [f"alter table {self.table} drop column if exists {self.column}"]

    def referenced_tables(self) -> set[str]:
        return {self.table} | _references_in(self.definition)


@dataclass(slots=True)
class CreateIndex(MigrationStep):
    index_name: str
    table: str
    columns: str
    unique: bool = False
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"index:{self.index_name}"

    async def probe(self, conn: Any) -> bool:
        return await schema.index_exists(conn, self.index_name)

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        unique_sql = "unique " if self.unique else ""
        await conn.execute(f"create {unique_sql}index {self.index_name} on {self.table} ({self.columns})")
        return StepResult(name=self.name, applied=True)

    def revert_sql(self) -> list[str]:
        return [f"drop index if exists {self.index_name}"]

    def referenced_tables(self) -> set[str]:
        return {self.table}


@dataclass(slots=True)
class AddConstraint(MigrationStep):
    table: str
    constraint_name: str
    definition: str
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"constraint:{self.table}.{self.constraint_name}"

    async def probe(self, conn: Any) -> bool:
        return await schema.constraint_exists(conn, self.table, self.constraint_name)

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        await conn.execute(f"alter table {self.table} add constraint {self.constraint_name} {self.definition}")
        return StepResult(name=self.name, applied=True)

    def revert_sql(self) -> list[str]:
        return [f"alter table {self.table} drop constraint if exists {self.constraint_name}"]

    def referenced_tables(self) -> set[str]:
        return {self.table} | _references_in(self.definition)


@dataclass(slots=True)
class AddRequiredColumn(MigrationStep):
    """Introduce a NOT NULL column onto a populated table.

    Runs in four phases: add the column as nullable, back-fill it from
    ``default_sql`` (a scalar expression evaluated per row, usually a
    correlated subquery), delete rows that still have no value, then set
    NOT NULL. Deleting rows requires ``StepContext.allow_destructive``.
    """

    table: str
    column: str
    column_type: str
    default_sql: str
    references: str | None = None
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"required-column:{self.table}.{self.column}"

    async def probe(self, conn: Any) -> bool:
        nullable = await schema.column_is_nullable(conn, self.table, self.column)
        return nullable is False

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        if not await schema.column_exists(conn, self.table, self.column):
            references_sql = f" references {self.references}" if self.references else ""
            await conn.execute(f"alter table {self.table} add column {self.column} {self.column_type}{references_sql}")

        backfilled = _status_count(
            await conn.execute(
                f"update {self.table} set {self.column} = ({self.default_sql}) where {self.column} is null"
            )
        )

        orphans = int(await conn.fetchval(f"select count(*) from {self.table} where {self.column} is null") or 0)
        deleted = 0
        if orphans:
            if not context.allow_destructive:
                raise DestructiveChangeRefused(
                    table=self.table,
                    column=self.column,
                    rows=orphans,
                    backfilled=backfilled,
                )
            deleted = _status_count(await conn.execute(f"delete from {self.table} where {self.column} is null"))

        await conn.execute(f"alter table {self.table} alter column {self.column} set not null")
        return StepResult(
            name=self.name,
            applied=True,
            detail=f"backfilled={backfilled} deleted={deleted}",
            counts={"backfilled": backfilled, "deleted": deleted},
        )

    def revert_sql(self) -> list[str]:
        return [f"alter table {self.table} drop column if exists {self.column}"]

    def referenced_tables(self) -> set[str]:
        tables = {self.table}
        if self.references:
            tables |= _references_in(f"references {self.references}")
        return tables


@dataclass(slots=True)
class ExecuteSql(MigrationStep):
    step_name: str
    sql: str
    probe_sql: str | None = None
    revert_statements: Sequence[str] = ()
    keep_on_revert: bool = False

    @property
    def name(self) -> str:
        return f"sql:{self.step_name}"

    async def probe(self, conn: Any) -> bool:
        if self.probe_sql is None:
            return False
        return bool(await conn.fetchval(self.probe_sql))

    async def apply(self, conn: Any, context: StepContext) -> StepResult:
        status = await conn.execute(self.sql)
        return StepResult(name=self.name, applied=True, detail=status or None)

    def revert_sql(self) -> list[str]:
        return list(self.revert_statements)
