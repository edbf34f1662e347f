from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import asyncpg  # type: ignore[import-untyped]

from fieldops.services.query import PageRequest, ScopedQuery, page_payload
from fieldops.services.repository import PostgresRepository, RepositoryNotFoundError, translate_database_errors

CLOSED_CONTRACT_STATUSES = ("completed", "terminated")

SUBCONTRACTOR_COLUMNS_SQL = """
  s.id::text as id,
  s.name,
  s.business_name,
  s.abn,
  s.email,
  s.phone,
  s.address,
  s.trade,
  s.description,
  s.is_active,
  s.created_at,
  s.updated_at
"""


@dataclass(slots=True)
class SubcontractorFilters:
    search: str | None = None
    trade: str | None = None
    is_active: bool | None = None


class SubcontractorsRepository(PostgresRepository):
    async def list_subcontractors(
        self,
        company_id: str,
        filters: SubcontractorFilters,
        page: PageRequest,
    ) -> dict[str, Any]:
        query = ScopedQuery("s", company_id)
        query.search(["s.name", "s.business_name", "s.email"], filters.search)
        query.search(["s.trade"], filters.trade)
        query.equals("s.is_active", filters.is_active)

        with translate_database_errors("subcontractor"):
            async with self.database.connection() as conn:
                where_sql = query.where_sql
                total = await conn.fetchval(f"select count(*) from subcontractors s where {where_sql}", *query.params)
                page_sql = query.page_sql(page)
                rows = await conn.fetch(
                    f"""
                    select {SUBCONTRACTOR_COLUMNS_SQL}
                    from subcontractors s
                    where {where_sql}
                    order by s.created_at desc, s.id
                    {page_sql}
                    """,
                    *query.params,
                )
        return page_payload([self._subcontractor_row_to_dict(row) for row in rows], page, self._coerce_int(total))

    async def get_subcontractor(self, company_id: str, subcontractor_id: str) -> dict[str, Any]:
        query = ScopedQuery("s", company_id)
        query.equals("s.id", subcontractor_id, "uuid")
        closed_token = query.bind(list(CLOSED_CONTRACT_STATUSES))
        with translate_database_errors("subcontractor"):
            async with self.database.connection() as conn:
                row = await conn.fetchrow(
                    f"""
                    select
                      {SUBCONTRACTOR_COLUMNS_SQL},
                      count(c.id) filter (where c.status::text <> all({closed_token}::text[])) as active_contracts,
                      coalesce(
                        sum(c.contract_value) filter (where c.status::text <> all({closed_token}::text[])),
                        0
                      ) as active_contract_value
                    from subcontractors s
                    left join subcontractor_contracts c
                      on c.subcontractor_id = s.id and c.deleted_at is null
                    where {query.where_sql}
                    group by s.id
                    """,
                    *query.params,
                )
        if not row:
            raise RepositoryNotFoundError("subcontractor not found")
        item = self._subcontractor_row_to_dict(row)
        item["active_contracts"] = self._coerce_int(row["active_contracts"])
        item["active_contract_value"] = self._coerce_float(row["active_contract_value"]) or 0.0
        return item

    async def list_contracts(self, company_id: str, subcontractor_id: str) -> list[dict[str, Any]]:
        with translate_database_errors("contract"):
            async with self.database.connection() as conn:
                await self._require_subcontractor(conn, company_id, subcontractor_id)
                rows = await conn.fetch(
                    """
                    select
                      c.id::text as id,
                      c.subcontractor_id::text as subcontractor_id,
                      c.job_id::text as job_id,
                      j.name as job_name,
                      c.contract_number,
                      c.title,
                      c.description,
                      c.contract_value,
                      c.start_date,
                      c.end_date,
                      c.completion_date,
                      c.status::text as status,
                      c.progress_percentage,
                      c.payment_terms,
                      c.notes,
                      coalesce((select sum(p.amount) from contract_payments p where p.contract_id = c.id), 0) as total_paid,
                      c.created_at,
                      c.updated_at
                    from subcontractor_contracts c
                    left join jobs j on j.id = c.job_id
                    where c.subcontractor_id = $1::uuid
                      and c.company_id = $2::uuid
                      and c.deleted_at is null
                    order by c.created_at desc, c.id
                    """,
                    subcontractor_id,
                    company_id,
                )
        return [
            {
                "id": row["id"],
                "subcontractor_id": row["subcontractor_id"],
                "job_id": row["job_id"],
                "job_name": row["job_name"],
                "contract_number": row["contract_number"],
                "title": row["title"],
                "description": row["description"],
                "contract_value": self._coerce_float(row["contract_value"]),
                "start_date": row["start_date"],
                "end_date": row["end_date"],
                "completion_date": row["completion_date"],
                "status": row["status"],
                "progress_percentage": self._coerce_float(row["progress_percentage"]),
                "payment_terms": row["payment_terms"],
                "notes": row["notes"],
                "total_paid": self._coerce_float(row["total_paid"]) or 0.0,
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
            for row in rows
        ]

    async def _require_subcontractor(self, conn: asyncpg.Connection, company_id: str, subcontractor_id: str) -> None:
        visible = await conn.fetchval(
            """
            select exists (
              select 1 from subcontractors
              where id = $1::uuid and company_id = $2::uuid and deleted_at is null
            )
            """,
            subcontractor_id,
            company_id,
        )
        if not visible:
            raise RepositoryNotFoundError("subcontractor not found")

    @staticmethod
    def _subcontractor_row_to_dict(row: asyncpg.Record) -> dict[str, Any]:
        return {
            "id": row["id"],
            "name": row["name"],
            "business_name": row["business_name"],
            "abn": row["abn"],
            "email": row["email"],
            "phone": row["phone"],
            "address": row["address"],
            "trade": row["trade"],
            "description": row["description"],
            "is_active": True if row["is_active"] is None else row["is_active"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
