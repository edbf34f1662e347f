from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from fieldops.services.query import PageRequest, ScopedQuery, page_payload, update_assignments
from fieldops.services.repository import (
    PostgresRepository,
    RepositoryNotFoundError,
    RepositoryValidationError,
    translate_database_errors,
)

logger = logging.getLogger(__name__)

JOB_STATUSES = ("draft", "planned", "in_progress", "on_hold", "completed", "cancelled", "archived")

JOB_SELECT_SQL = """
select
  j.id::text as id,
  j.name,
  j.description,
  j.job_number,
  j.job_type,
  j.status::text as status,
  j.priority::text as priority,
  j.start_date,
  j.end_date,
  j.completed_date,
  j.assigned_to::text as assigned_to,
  j.site_id::text as site_id,
  j.created_by::text as created_by,
  j.created_at,
  j.updated_at,
  s.name as site_name,
  s.address as site_address,
  au.first_name as assigned_first_name,
  au.last_name as assigned_last_name,
  cu.first_name as creator_first_name,
  cu.last_name as creator_last_name
from jobs j
left join sites s on s.id = j.site_id
left join users au on au.id = j.assigned_to
left join users cu on cu.id = j.created_by
"""

JOB_UPDATE_COLUMNS = {
    "name": "name",
    "description": "description",
    "job_number": "job_number",
    "job_type": "job_type",
    "status": "status::job_status",
    "priority": "priority::priority_level",
    "site_id": "site_id::uuid",
    "assigned_to": "assigned_to::uuid",
    "start_date": "start_date",
    "end_date": "end_date",
    "completed_date": "completed_date",
}


@dataclass(slots=True)
class JobFilters:
    status: str | None = None
    priority: str | None = None
    site_id: str | None = None
    assigned_to: str | None = None
    job_type: str | None = None
    search: str | None = None


class JobsRepository(PostgresRepository):
    async def list_jobs(self, company_id: str, filters: JobFilters, page: PageRequest) -> dict[str, Any]:
        query = ScopedQuery("j", company_id)
        query.equals("j.status", filters.status, "job_status")
        query.equals("j.priority", filters.priority, "priority_level")
        query.equals("j.site_id", filters.site_id, "uuid")
        query.equals("j.assigned_to", filters.assigned_to, "uuid")
        query.search(["j.job_type"], filters.job_type)
        query.search(["j.name", "j.description", "j.job_number"], filters.search)

        with translate_database_errors("job"):
            async with self.database.connection() as conn:
                where_sql = query.where_sql
                total = await conn.fetchval(f"select count(*) from jobs j where {where_sql}", *query.params)
                page_sql = query.page_sql(page)
                rows = await conn.fetch(
                    f"{JOB_SELECT_SQL} where {where_sql} order by j.created_at desc, j.id {page_sql}",
                    *query.params,
                )
        return page_payload([self._job_row_to_dict(row) for row in rows], page, self._coerce_int(total))

    async def get_job(self, company_id: str, job_id: str) -> dict[str, Any]:
        with translate_database_errors("job"):
            async with self.database.connection() as conn:
                row = await self._fetch_job(conn, company_id, job_id)
        if not row:
            raise RepositoryNotFoundError("job not found")
        return self._job_row_to_dict(row)

    async def create_job(self, company_id: str, created_by: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        with translate_database_errors("job"):
            async with self.database.transaction() as conn:
                await self._validate_references(conn, company_id, payload)
                job_id = await conn.fetchval(
                    """
                    insert into jobs (
                      company_id, site_id, created_by, name, description, job_number, job_type,
                      status, priority, assigned_to, start_date, end_date
                    )
                    values (
                      $1::uuid, $2::uuid, $3::uuid, $4, $5, $6, $7,
                      $8::job_status, $9::priority_level, $10::uuid, $11, $12
                    )
                    returning id::text
                    """,
                    company_id,
                    payload.get("site_id"),
                    created_by,
                    payload["name"],
                    payload.get("description"),
                    payload.get("job_number"),
                    payload.get("job_type"),
                    payload.get("status") or "draft",
                    payload.get("priority") or "medium",
                    payload.get("assigned_to"),
                    payload.get("start_date"),
                    payload.get("end_date"),
                )
                row = await self._fetch_job(conn, company_id, job_id)
        logger.info("job created job_id=%s company_id=%s", job_id, company_id)
        return self._job_row_to_dict(row)

    async def update_job(self, company_id: str, job_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        query = ScopedQuery("j", company_id)
        query.equals("j.id", job_id, "uuid")
        set_sql = update_assignments(self._db_values(changes), JOB_UPDATE_COLUMNS, query.bind)

        with translate_database_errors("job"):
            async with self.database.transaction() as conn:
                await self._validate_references(conn, company_id, changes)
                updated_id = await conn.fetchval(
                    f"update jobs j set {set_sql} where {query.where_sql} returning j.id::text",
                    *query.params,
                )
                if not updated_id:
                    raise RepositoryNotFoundError("job not found")
                row = await self._fetch_job(conn, company_id, updated_id)
        logger.info("job updated job_id=%s fields=%s", job_id, ",".join(sorted(changes)))
        return self._job_row_to_dict(row)

    async def delete_job(self, company_id: str, job_id: str) -> None:
        query = ScopedQuery("j", company_id)
        query.equals("j.id", job_id, "uuid")
        with translate_database_errors("job"):
            async with self.database.connection() as conn:
                deleted_id = await conn.fetchval(
                    f"update jobs j set deleted_at = now(), updated_at = now() where {query.where_sql} returning j.id::text",
                    *query.params,
                )
        if not deleted_id:
            raise RepositoryNotFoundError("job not found")
        logger.info("job deleted job_id=%s company_id=%s", job_id, company_id)

    async def list_job_tasks(self, company_id: str, job_id: str) -> list[dict[str, Any]]:
        with translate_database_errors("task"):
            async with self.database.connection() as conn:
                await self._require_job(conn, company_id, job_id)
                rows = await conn.fetch(
                    """
                    select
                      t.id::text as id,
                      t.job_id::text as job_id,
                      t.title,
                      t.description,
                      t.status::text as status,
                      t.priority::text as priority,
                      t.due_date,
                      t.assigned_to::text as assigned_to,
                      u.first_name as assigned_first_name,
                      u.last_name as assigned_last_name,
                      t.created_at,
                      t.updated_at
                    from job_tasks t
                    left join users u on u.id = t.assigned_to
                    where t.job_id = $1::uuid
                      and t.deleted_at is null
                    order by t.created_at desc, t.id
                    """,
                    job_id,
                )
        return [self._task_row_to_dict(row) for row in rows]

    async def create_job_task(self, company_id: str, job_id: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        with translate_database_errors("task"):
            async with self.database.transaction() as conn:
                await self._require_job(conn, company_id, job_id)
                assigned_to = payload.get("assigned_to")
                if assigned_to is not None and not await self._user_in_company(conn, company_id, assigned_to):
                    raise RepositoryValidationError("assigned user not found for this company")
                row = await conn.fetchrow(
                    """
                    with inserted as (
                      insert into job_tasks (job_id, title, description, status, priority, due_date, assigned_to)
                      values ($1::uuid, $2, $3, $4::task_status, $5::priority_level, $6, $7::uuid)
                      returning *
                    )
                    select
                      t.id::text as id,
                      t.job_id::text as job_id,
                      t.title,
                      t.description,
                      t.status::text as status,
                      t.priority::text as priority,
                      t.due_date,
                      t.assigned_to::text as assigned_to,
                      u.first_name as assigned_first_name,
                      u.last_name as assigned_last_name,
                      t.created_at,
                      t.updated_at
                    from inserted t
                    left join users u on u.id = t.assigned_to
                    """,
                    job_id,
                    payload["title"],
                    payload.get("description"),
                    payload.get("status") or "pending",
                    payload.get("priority") or "medium",
                    payload.get("due_date"),
                    assigned_to,
                )
        logger.info("task created task_id=%s job_id=%s", row["id"], job_id)
        return self._task_row_to_dict(row)

    async def list_job_workers(self, company_id: str, job_id: str) -> list[dict[str, Any]]:
        with translate_database_errors("job"):
            async with self.database.connection() as conn:
                await self._require_job(conn, company_id, job_id)
                rows = await conn.fetch(
                    """
                    select
                      u.id::text as id,
                      u.first_name,
                      u.last_name,
                      u.email,
                      u.role::text as role,
                      u.phone,
                      jw.created_at as assigned_at
                    from job_workers jw
                    join users u on u.id = jw.user_id
                    where jw.job_id = $1::uuid
                      and u.deleted_at is null
                    order by u.first_name, u.last_name, u.id
                    """,
                    job_id,
                )
        return [
            {
                "id": row["id"],
                "name": self._display_name(row["first_name"], row["last_name"]),
                "email": row["email"],
                "role": row["role"],
                "phone": row["phone"],
                "assigned_at": row["assigned_at"],
            }
            for row in rows
        ]

    async def count_jobs_by_status(self, company_id: str) -> dict[str, int]:
        query = ScopedQuery("j", company_id)
        with translate_database_errors("job"):
            async with self.database.connection() as conn:
                rows = await conn.fetch(
                    f"""
                    select coalesce(j.status::text, 'unknown') as status, count(*) as count
                    from jobs j
                    where {query.where_sql}
                    group by 1
                    """,
                    *query.params,
                )
        counts = {status: 0 for status in JOB_STATUSES}
        for row in rows:
            counts[row["status"]] = self._coerce_int(row["count"])
        return counts

    async def _fetch_job(self, conn: asyncpg.Connection, company_id: str, job_id: str) -> asyncpg.Record | None:
        query = ScopedQuery("j", company_id)
        query.equals("j.id", job_id, "uuid")
        return await conn.fetchrow(f"{JOB_SELECT_SQL} where {query.where_sql}", *query.params)

    async def _require_job(self, conn: asyncpg.Connection, company_id: str, job_id: str) -> None:
        if not await self._job_in_company(conn, company_id, job_id):
            raise RepositoryNotFoundError("job not found")

    async def _validate_references(self, conn: asyncpg.Connection, company_id: str, values: Mapping[str, Any]) -> None:
        site_id = values.get("site_id")
        if site_id is not None and not await self._site_in_company(conn, company_id, site_id):
            raise RepositoryValidationError("site not found for this company")
        assigned_to = values.get("assigned_to")
        if assigned_to is not None and not await self._user_in_company(conn, company_id, assigned_to):
            raise RepositoryValidationError("assigned user not found for this company")

    @classmethod
    def _job_row_to_dict(cls, row: asyncpg.Record) -> dict[str, Any]:
        return {
            "id": row["id"],
            "name": row["name"],
            "description": row["description"],
            "job_number": row["job_number"],
            "job_type": row["job_type"],
            "status": row["status"],
            "priority": row["priority"],
            "start_date": row["start_date"],
            "end_date": row["end_date"],
            "completed_date": row["completed_date"],
            "assigned_to": row["assigned_to"],
            "assigned_to_name": cls._display_name(row["assigned_first_name"], row["assigned_last_name"]),
            "site_id": row["site_id"],
            "site_name": row["site_name"],
            "site_address": row["site_address"],
            "created_by": row["created_by"],
            "created_by_name": cls._display_name(row["creator_first_name"], row["creator_last_name"]),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    @classmethod
    def _task_row_to_dict(cls, row: asyncpg.Record) -> dict[str, Any]:
        return {
            "id": row["id"],
            "job_id": row["job_id"],
            "title": row["title"],
            "description": row["description"],
            "status": row["status"],
            "priority": row["priority"],
            "due_date": row["due_date"],
            "assigned_to": row["assigned_to"],
            "assigned_to_name": cls._display_name(row["assigned_first_name"], row["assigned_last_name"]),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
