from __future__ import annotations

from typing import Any


async def table_exists(conn: Any, table: str) -> bool:
    return bool(
        await conn.fetchval(
            """
            select exists (
              select 1
              from information_schema.tables
              where table_schema = current_schema()
                and table_name = $1
            )
            """,
            table,
        )
    )


async def column_exists(conn: Any, table: str, column: str) -> bool:
    return bool(
        await conn.fetchval(
            """
            select exists (
              select 1
              from information_schema.columns
              where table_schema = current_schema()
                and table_name = $1
                and column_name = $2
            )
            """,
            table,
            column,
        )
    )


async def column_is_nullable(conn: Any, table: str, column: str) -> bool | None:
    value = await conn.fetchval(
        """
        select is_nullable
        from information_schema.columns
        where table_schema = current_schema()
          and table_name = $1
          and column_name = $2
        """,
        table,
        column,
    )
    if value is None:
        return None
    return value == "YES"


async def enum_exists(conn: Any, name: str) -> bool:
    return bool(
        await conn.fetchval(
            """
            select exists (
              select 1
              from pg_type t
              join pg_namespace n on n.oid = t.typnamespace
              where n.nspname = current_schema()
                and t.typname = $1
                and t.typtype = 'e'
            )
            """,
            name,
        )
    )


async def index_exists(conn: Any, name: str) -> bool:
    return bool(
        await conn.fetchval(
            """
            select exists (
              select 1
              from pg_indexes
              where schemaname = current_schema()
                and indexname = $1
            )
            """,
            name,
        )
    )


async def constraint_exists(conn: Any, table: str, name: str) -> bool:
    return bool(
        await conn.fetchval(
            """
            select exists (
              select 1
              from information_schema.table_constraints
              where constraint_schema = current_schema()
                and table_name = $1
                and constraint_name = $2
            )
            """,
            table,
            name,
        )
    )
