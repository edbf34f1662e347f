from __future__ import annotations

import asyncio
import re

import pytest

from fieldops.migrations.catalog import MIGRATIONS, build_registry
from fieldops.migrations.registry import Migration, MigrationRegistry
from fieldops.migrations.runner import MigrationRunner
from fieldops.migrations.steps import AddColumn, AddRequiredColumn, CreateEnum, CreateIndex, CreateTable

from conftest import FakeConnection, FakeDatabase


def test_catalog_lists_every_migration_in_id_order() -> None:
    registry = build_registry()

    assert len(registry) == 11
    assert registry.ids() == [migration.id for migration in MIGRATIONS]
    assert [migration_id[:3] for migration_id in registry.ids()] == [f"{n:03d}" for n in range(11)]
    assert "009_create_job_variations" in registry


def test_registry_rejects_duplicate_ids() -> None:
    migration = Migration(id="001_x", name="x", steps=[])
    registry = MigrationRegistry([migration])

    with pytest.raises(ValueError, match="duplicate migration id"):
        registry.register(Migration(id="001_x", name="again", steps=[]))


def test_registry_iterates_in_id_order_regardless_of_registration_order() -> None:
    registry = MigrationRegistry(
        [
            Migration(id="010_c", name="c", steps=[]),
            Migration(id="002_b", name="b", steps=[]),
            Migration(id="001_a", name="a", steps=[]),
        ]
    )
    assert [migration.id for migration in registry] == ["001_a", "002_b", "010_c"]


def test_unknown_id_raises_key_error() -> None:
    with pytest.raises(KeyError, match="unknown migration id"):
        build_registry().get("999_missing")


def test_step_referencing_table_before_creation_is_rejected() -> None:
    with pytest.raises(ValueError, match="references teams before it is created"):
        Migration(
            id="050_bad_order",
            name="bad order",
            steps=[
                CreateTable("team_members", ["team_id uuid references teams(id)"]),
                CreateTable("teams", ["id uuid primary key"]),
            ],
        )


def test_table_created_twice_is_rejected() -> None:
    with pytest.raises(ValueError, match="creates table teams twice"):
        Migration(
            id="051_twice",
            name="twice",
            steps=[CreateTable("teams", ["id uuid"]), CreateTable("teams", ["id uuid"])],
        )


def test_parent_before_child_order_is_accepted() -> None:
    migration = Migration(
        id="052_ok",
        name="ok",
        steps=[
            CreateEnum("team_member_role", ("lead", "member")),
            CreateTable("teams", ["id uuid primary key"]),
            CreateTable("team_members", ["team_id uuid references teams(id)", "role team_member_role"]),
            CreateIndex("idx_team_members_team_id", "team_members", "team_id"),
        ],
    )

    assert migration.created_tables == ("teams", "team_members")
    assert [step.name for step in migration.reverse_steps()] == [
        "index:idx_team_members_team_id",
        "table:team_members",
        "table:teams",
        "enum:team_member_role",
    ]


def test_column_steps_expose_their_tables() -> None:
    assert AddColumn("sites", "radius", "decimal(10, 2)").referenced_tables() == {"sites"}
    step = AddRequiredColumn("jobs", "created_by", "uuid", "select 1", references="users(id)")
    assert step.referenced_tables() == {"jobs", "users"}


def test_required_column_migration_runs_before_its_index() -> None:
    migration = build_registry().get("001_add_created_by_to_jobs")
    assert [step.name for step in migration.steps] == [
        "required-column:jobs.created_by",
        "index:idx_jobs_created_by",
    ]


_TABLE_CONSTRAINT_WORDS = {"unique", "primary", "foreign", "constraint", "check"}
_DROP_COLUMN_RE = re.compile(r"alter table (\w+) drop column if exists (\w+)")
_DROP_TABLE_RE = re.compile(r"drop table if exists (\w+)")
_DROP_CONSTRAINT_RE = re.compile(r"alter table (\w+) drop constraint if exists (\w+)")


def _declared_by(migrations: tuple[Migration, ...]) -> tuple[set[str], set[tuple[str, str]]]:
    tables: set[str] = set()
    columns: set[tuple[str, str]] = set()
    for migration in migrations:
        for step in migration.steps:
            if isinstance(step, CreateTable):
                tables.add(step.table)
                for definition in step.columns:
                    first_word = definition.split()[0].lower()
                    if first_word not in _TABLE_CONSTRAINT_WORDS:
                        columns.add((step.table, first_word))
            elif isinstance(step, (AddColumn, AddRequiredColumn)):
                columns.add((step.table, step.column))
    return tables, columns


@pytest.mark.parametrize("position", range(1, len(MIGRATIONS)), ids=lambda position: MIGRATIONS[position].id)
def test_rollback_never_drops_objects_declared_by_earlier_migrations(position: int) -> None:
    tables, columns = _declared_by(MIGRATIONS[:position])
    conn = FakeConnection()

    asyncio.run(MigrationRunner(FakeDatabase(conn)).rollback(MIGRATIONS[position]))  # type: ignore[arg-type]

    for statement in conn.executed:
        dropped_column = _DROP_COLUMN_RE.fullmatch(statement)
        if dropped_column:
            assert dropped_column.groups() not in columns, statement
        dropped_table = _DROP_TABLE_RE.fullmatch(statement)
        if dropped_table:
            assert dropped_table.group(1) not in tables, statement


def test_reverting_tenant_backfills_keeps_inline_declarations() -> None:
    registry = build_registry()
    for migration_id in ("003_ensure_jobs_columns", "008_add_company_id_to_subcontractor_contracts"):
        conn = FakeConnection()
        asyncio.run(MigrationRunner(FakeDatabase(conn)).rollback(registry.get(migration_id)))  # type: ignore[arg-type]

        assert not any("deleted_at" in statement for statement in conn.executed), migration_id
        assert not any("company_id" in statement for statement in conn.executed), migration_id
        assert not any(_DROP_CONSTRAINT_RE.fullmatch(statement) for statement in conn.executed), migration_id
