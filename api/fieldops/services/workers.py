from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from fieldops.services.query import ScopedQuery, update_assignments
from fieldops.services.repository import PostgresRepository, RepositoryNotFoundError, translate_database_errors

logger = logging.getLogger(__name__)

PROFILE_UPDATE_COLUMNS = {
    "first_name": "first_name",
    "last_name": "last_name",
    "phone": "phone",
}


class WorkersRepository(PostgresRepository):
    async def get_profile(self, company_id: str, worker_id: str) -> dict[str, Any]:
        with translate_database_errors("worker"):
            async with self.database.connection() as conn:
                row = await self._fetch_profile(conn, company_id, worker_id)
        if not row:
            raise RepositoryNotFoundError("worker not found")
        return self._profile_row_to_dict(row)

    async def update_profile(self, company_id: str, worker_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        query = ScopedQuery("u", company_id)
        query.equals("u.id", worker_id, "uuid")
        set_sql = update_assignments(changes, PROFILE_UPDATE_COLUMNS, query.bind)

        with translate_database_errors("worker"):
            async with self.database.transaction() as conn:
                updated_id = await conn.fetchval(
                    f"update users u set {set_sql} where {query.where_sql} returning u.id::text",
                    *query.params,
                )
                if not updated_id:
                    raise RepositoryNotFoundError("worker not found")
                row = await self._fetch_profile(conn, company_id, updated_id)
        logger.info("worker profile updated user_id=%s fields=%s", worker_id, ",".join(sorted(changes)))
        return self._profile_row_to_dict(row)

    async def get_statistics(self, company_id: str, worker_id: str) -> dict[str, int]:
        with translate_database_errors("worker"):
            async with self.database.connection() as conn:
                row = await conn.fetchrow(
                    """
                    select
                      (
                        select count(distinct jw.job_id)
                        from job_workers jw
                        join jobs j on j.id = jw.job_id
                        where jw.user_id = $1::uuid and j.company_id = $2::uuid and j.deleted_at is null
                      ) as total_jobs_assigned,
                      (
                        select count(distinct jw.job_id)
                        from job_workers jw
                        join jobs j on j.id = jw.job_id
                        where jw.user_id = $1::uuid and j.company_id = $2::uuid and j.deleted_at is null
                          and j.status = 'completed'
                      ) as completed_jobs,
                      (
                        select count(distinct jw.job_id)
                        from job_workers jw
                        join jobs j on j.id = jw.job_id
                        where jw.user_id = $1::uuid and j.company_id = $2::uuid and j.deleted_at is null
                          and j.status = 'in_progress'
                      ) as active_jobs,
                      (
                        select count(*)
                        from safety_incidents si
                        where si.reported_by = $1::uuid and si.deleted_at is null
                      ) as safety_incidents_reported,
                      (
                        select count(*)
                        from job_tasks t
                        join jobs j on j.id = t.job_id
                        where t.assigned_to = $1::uuid and j.company_id = $2::uuid
                          and t.deleted_at is null and t.status = 'completed'
                      ) as tasks_completed
                    """,
                    worker_id,
                    company_id,
                )
        return {key: self._coerce_int(row[key]) for key in row.keys()}

    async def _fetch_profile(self, conn: asyncpg.Connection, company_id: str, worker_id: str) -> asyncpg.Record | None:
        query = ScopedQuery("u", company_id)
        query.equals("u.id", worker_id, "uuid")
        return await conn.fetchrow(
            f"""
            select
              u.id::text as id,
              u.email,
              u.first_name,
              u.last_name,
              u.role::text as role,
              u.phone,
              u.hourly_rate,
              u.company_id::text as company_id,
              c.name as company_name,
              u.is_active,
              u.created_at
            from users u
            left join companies c on c.id = u.company_id
            where {query.where_sql}
            """,
            *query.params,
        )

    @classmethod
    def _profile_row_to_dict(cls, row: asyncpg.Record) -> dict[str, Any]:
        return {
            "id": row["id"],
            "email": row["email"],
            "first_name": row["first_name"],
            "last_name": row["last_name"],
            "role": row["role"],
            "phone": row["phone"],
            "hourly_rate": cls._coerce_float(row["hourly_rate"]),
            "company_id": row["company_id"],
            "company_name": row["company_name"],
            "is_active": True if row["is_active"] is None else row["is_active"],
            "created_at": row["created_at"],
        }
