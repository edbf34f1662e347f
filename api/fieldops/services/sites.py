from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from fieldops.services.query import PageRequest, ScopedQuery, page_payload
from fieldops.services.repository import PostgresRepository, RepositoryNotFoundError, translate_database_errors

DEFAULT_SITE_LOCATION = "No address provided"
DEFAULT_SITE_STATUS = "active"


@dataclass(slots=True)
class SiteFilters:
    status: str | None = None
    search: str | None = None


class SitesRepository(PostgresRepository):
    async def list_sites(self, company_id: str, filters: SiteFilters, page: PageRequest) -> dict[str, Any]:
        query = ScopedQuery("s", company_id)
        query.equals("s.status", filters.status, "site_status")
        query.search(["s.name", "s.address"], filters.search)

        with translate_database_errors("site"):
            async with self.database.connection() as conn:
                where_sql = query.where_sql
                total = await conn.fetchval(f"select count(*) from sites s where {where_sql}", *query.params)
                page_sql = query.page_sql(page)
                rows = await conn.fetch(
                    f"""
                    select
                      s.id::text as id,
                      s.name,
                      s.address,
                      s.latitude,
                      s.longitude,
                      s.status::text as status,
                      count(distinct j.id) as jobs,
                      count(distinct jw.user_id) as workers
                    from sites s
                    left join jobs j on j.site_id = s.id and j.deleted_at is null
                    left join job_workers jw on jw.job_id = j.id
                    where {where_sql}
                    group by s.id
                    order by s.created_at desc, s.id
                    {page_sql}
                    """,
                    *query.params,
                )

        items = [
            {
                "id": row["id"],
                "site_name": row["name"],
                "location": row["address"] or DEFAULT_SITE_LOCATION,
                "latitude": self._coerce_float(row["latitude"]),
                "longitude": self._coerce_float(row["longitude"]),
                "status": row["status"] or DEFAULT_SITE_STATUS,
                "jobs": self._coerce_int(row["jobs"]),
                "workers": self._coerce_int(row["workers"]),
            }
            for row in rows
        ]
        return page_payload(items, page, self._coerce_int(total))

    async def get_site(self, company_id: str, site_id: str) -> dict[str, Any]:
        query = ScopedQuery("s", company_id)
        query.equals("s.id", site_id, "uuid")
        with translate_database_errors("site"):
            async with self.database.connection() as conn:
                row = await conn.fetchrow(
                    f"""
                    select
                      s.id::text as id,
                      s.name,
                      s.address,
                      s.latitude,
                      s.longitude,
                      s.radius,
                      s.status::text as status,
                      s.created_at,
                      s.updated_at
                    from sites s
                    where {query.where_sql}
                    """,
                    *query.params,
                )
        if not row:
            raise RepositoryNotFoundError("site not found")
        return {
            "id": row["id"],
            "site_name": row["name"],
            "address": row["address"],
            "latitude": self._coerce_float(row["latitude"]),
            "longitude": self._coerce_float(row["longitude"]),
            "radius": self._coerce_float(row["radius"]),
            "status": row["status"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    async def list_site_jobs(self, company_id: str, site_id: str) -> list[dict[str, Any]]:
        with translate_database_errors("site"):
            async with self.database.connection() as conn:
                await self._require_site(conn, company_id, site_id)
                rows = await conn.fetch(
                    """
                    select
                      j.id::text as id,
                      j.name,
                      j.job_type,
                      j.status::text as status,
                      j.priority::text as priority,
                      j.start_date,
                      j.end_date,
                      s.address
                    from jobs j
                    join sites s on s.id = j.site_id
                    where j.site_id = $1::uuid
                      and j.company_id = $2::uuid
                      and j.deleted_at is null
                    order by j.start_date desc nulls last, j.id
                    """,
                    site_id,
                    company_id,
                )
        return [
            {
                "id": row["id"],
                "job_title": row["name"],
                "job_type": row["job_type"],
                "status": row["status"],
                "priority": row["priority"],
                "start_time": row["start_date"],
                "end_time": row["end_date"],
                "address": row["address"],
            }
            for row in rows
        ]

    async def list_site_workers(self, company_id: str, site_id: str) -> list[dict[str, Any]]:
        with translate_database_errors("site"):
            async with self.database.connection() as conn:
                await self._require_site(conn, company_id, site_id)
                rows = await conn.fetch(
                    """
                    select distinct
                      u.id::text as id,
                      u.first_name,
                      u.last_name,
                      u.role::text as role,
                      u.phone
                    from job_workers jw
                    join jobs j on j.id = jw.job_id
                    join users u on u.id = jw.user_id
                    where j.site_id = $1::uuid
                      and j.company_id = $2::uuid
                      and j.deleted_at is null
                      and u.deleted_at is null
                    order by u.first_name, u.last_name, id
                    """,
                    site_id,
                    company_id,
                )
        return [
            {
                "id": row["id"],
                "name": self._display_name(row["first_name"], row["last_name"]),
                "role": row["role"],
                "phone": row["phone"],
            }
            for row in rows
        ]

    async def _require_site(self, conn: asyncpg.Connection, company_id: str, site_id: str) -> None:
        if not await self._site_in_company(conn, company_id, site_id):
            raise RepositoryNotFoundError("site not found")
