from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from fieldops.migrations.steps import MigrationStep


@dataclass(slots=True)
class Migration:
    id: str
    name: str
    steps: Sequence[MigrationStep]
    description: str = ""
    created_tables: tuple[str, ...] = field(init=False, default=())

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("migration id is required")
        self.steps = tuple(self.steps)

        created_at: dict[str, int] = {}
        for position, step in enumerate(self.steps):
            table = step.created_table()
            if table is None:
                continue
            if table in created_at:
                raise ValueError(f"migration {self.id} creates table {table} twice")
            created_at[table] = position

        for position, step in enumerate(self.steps):
            for table in step.referenced_tables():
                creator = created_at.get(table)
                if creator is not None and creator > position:
                    raise ValueError(
                        f"migration {self.id}: step {step.name} references {table} "
                        f"before it is created by step {self.steps[creator].name}"
                    )
        self.created_tables = tuple(created_at)

    def reverse_steps(self) -> tuple[MigrationStep, ...]:
        return tuple(reversed(self.steps))


class MigrationRegistry:
    def __init__(self, migrations: Sequence[Migration] = ()) -> None:
        self._migrations: dict[str, Migration] = {}
        for migration in migrations:
            self.register(migration)

    def register(self, migration: Migration) -> Migration:
        if migration.id in self._migrations:
            raise ValueError(f"duplicate migration id: {migration.id}")
        self._migrations[migration.id] = migration
        return migration

    def get(self, migration_id: str) -> Migration:
        try:
            return self._migrations[migration_id]
        except KeyError as exc:
            raise KeyError(f"unknown migration id: {migration_id}") from exc

    def ids(self) -> list[str]:
        return sorted(self._migrations)

    def __contains__(self, migration_id: object) -> bool:
        return migration_id in self._migrations

    def __iter__(self) -> Iterator[Migration]:
        for migration_id in self.ids():
            yield self._migrations[migration_id]

    def __len__(self) -> int:
        return len(self._migrations)
