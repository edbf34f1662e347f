from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fieldops.migrations import schema

EXPECTED_TABLES = (
    "companies",
    "users",
    "jobs",
    "job_workers",
    "job_managers",
    "teams",
    "team_members",
    "sites",
)
EXPECTED_ENUMS = (
    "user_role",
    "job_status",
    "priority_level",
    "site_status",
    "team_member_role",
    "task_status",
)


@dataclass(slots=True)
class SchemaReport:
    tables: dict[str, bool] = field(default_factory=dict)
    enums: dict[str, bool] = field(default_factory=dict)

    @property
    def missing(self) -> list[str]:
        missing = [f"table:{name}" for name, present in self.tables.items() if not present]
        missing.extend(f"enum:{name}" for name, present in self.enums.items() if not present)
        return missing

    @property
    def ok(self) -> bool:
        return not self.missing


async def verify_schema(
    conn: Any,
    tables: tuple[str, ...] = EXPECTED_TABLES,
    enums: tuple[str, ...] = EXPECTED_ENUMS,
) -> SchemaReport:
    report = SchemaReport()
    for table in tables:
        report.tables[table] = await schema.table_exists(conn, table)
    for enum_name in enums:
        report.enums[enum_name] = await schema.enum_exists(conn, enum_name)
    return report
