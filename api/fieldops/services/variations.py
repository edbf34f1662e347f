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

# A variation belongs to the tenant of its job or of its contract.
READ_TENANT_COLUMNS = ("j.company_id", "sc.company_id")
WRITE_TENANT_COLUMNS = (
    "(select company_id from jobs where id = jv.job_id)",
    "(select company_id from subcontractor_contracts where id = jv.contract_id)",
)

VARIATION_SELECT_SQL = """
select
  jv.id::text as id,
  jv.job_id::text as job_id,
  jv.contract_id::text as contract_id,
  jv.variation_number,
  jv.title,
  jv.description,
  jv.amount,
  jv.status::text as status,
  jv.priority,
  jv.assigned_to::text as assigned_to,
  jv.pricing_model,
  jv.subcontractor_amount,
  jv.labor_cost,
  jv.materials_client_charge,
  jv.materials_actual_cost,
  jv.is_chargeable,
  jv.requires_subcontractor,
  jv.client_approval_required,
  jv.created_by::text as created_by,
  jv.created_at,
  jv.updated_at,
  j.name as job_name,
  s.address as job_address,
  sc.title as contract_title,
  sub.name as subcontractor_name,
  cu.first_name as creator_first_name,
  cu.last_name as creator_last_name,
  au.first_name as assigned_first_name,
  au.last_name as assigned_last_name
from job_variations jv
left join jobs j on j.id = jv.job_id
left join sites s on s.id = j.site_id
left join subcontractor_contracts sc on sc.id = jv.contract_id
left join subcontractors sub on sub.id = sc.subcontractor_id
left join users cu on cu.id = jv.created_by
left join users au on au.id = jv.assigned_to
"""

VARIATION_FROM_SQL = """
from job_variations jv
left join jobs j on j.id = jv.job_id
left join subcontractor_contracts sc on sc.id = jv.contract_id
"""

VARIATION_UPDATE_COLUMNS = {
    "variation_number": "variation_number",
    "title": "title",
    "description": "description",
    "amount": "amount",
    "status": "status::variation_status",
    "priority": "priority",
    "assigned_to": "assigned_to::uuid",
    "pricing_model": "pricing_model",
    "subcontractor_amount": "subcontractor_amount",
    "labor_cost": "labor_cost",
    "materials_client_charge": "materials_client_charge",
    "materials_actual_cost": "materials_actual_cost",
    "is_chargeable": "is_chargeable",
    "requires_subcontractor": "requires_subcontractor",
    "client_approval_required": "client_approval_required",
}

MONEY_FIELDS = (
    "amount",
    "subcontractor_amount",
    "labor_cost",
    "materials_client_charge",
    "materials_actual_cost",
)


@dataclass(slots=True)
class VariationFilters:
    status: str | None = None
    priority: str | None = None
    job_id: str | None = None
    contract_id: str | None = None
    assigned_to: str | None = None
    search: str | None = None


class VariationsRepository(PostgresRepository):
    async def list_variations(
        self,
        company_id: str,
        filters: VariationFilters,
        page: PageRequest,
    ) -> dict[str, Any]:
        query = ScopedQuery("jv", company_id, tenant_columns=READ_TENANT_COLUMNS)
        query.equals("jv.status", filters.status, "variation_status")
        query.equals("jv.priority", filters.priority)
        query.equals("jv.job_id", filters.job_id, "uuid")
        query.equals("jv.contract_id", filters.contract_id, "uuid")
        query.equals("jv.assigned_to", filters.assigned_to, "uuid")
        query.search(["jv.title", "jv.description", "jv.variation_number"], filters.search)

        with translate_database_errors("variation"):
            async with self.database.connection() as conn:
                where_sql = query.where_sql
                total = await conn.fetchval(
                    f"select count(*) {VARIATION_FROM_SQL} where {where_sql}",
                    *query.params,
                )
                page_sql = query.page_sql(page)
                rows = await conn.fetch(
                    f"{VARIATION_SELECT_SQL} where {where_sql} order by jv.created_at desc, jv.id {page_sql}",
                    *query.params,
                )
        return page_payload([self._variation_row_to_dict(row) for row in rows], page, self._coerce_int(total))

    async def get_variation(self, company_id: str, variation_id: str) -> dict[str, Any]:
        with translate_database_errors("variation"):
            async with self.database.connection() as conn:
                row = await self._fetch_variation(conn, company_id, variation_id)
        if not row:
            raise RepositoryNotFoundError("variation not found")
        return self._variation_row_to_dict(row)

    async def create_variation(
        self,
        company_id: str,
        created_by: str,
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        payload = self._db_values(payload)
        job_id = payload.get("job_id")
        contract_id = payload.get("contract_id")
        if job_id is None and contract_id is None:
            raise RepositoryValidationError("either job_id or contract_id is required")

        with translate_database_errors("variation"):
            async with self.database.transaction() as conn:
                if job_id is not None and not await self._job_in_company(conn, company_id, job_id):
                    raise RepositoryValidationError("job not found for this company")
                if contract_id is not None and not await self._contract_in_company(conn, company_id, contract_id):
                    raise RepositoryValidationError("contract not found for this company")
                assigned_to = payload.get("assigned_to")
                if assigned_to is not None and not await self._user_in_company(conn, company_id, assigned_to):
                    raise RepositoryValidationError("assigned user not found for this company")

                variation_id = await conn.fetchval(
                    """
                    insert into job_variations (
                      job_id, contract_id, created_by, assigned_to, variation_number, title, description,
                      amount, status, priority, pricing_model, subcontractor_amount, labor_cost,
                      materials_client_charge, materials_actual_cost, is_chargeable,
                      requires_subcontractor, client_approval_required
                    )
                    values (
                      $1::uuid, $2::uuid, $3::uuid, $4::uuid, $5, $6, $7,
                      $8, $9::variation_status, $10, $11, $12, $13,
                      $14, $15, $16,
                      $17, $18
                    )
                    returning id::text
                    """,
                    job_id,
                    contract_id,
                    created_by,
                    assigned_to,
                    payload.get("variation_number"),
                    payload.get("title"),
                    payload.get("description"),
                    payload.get("amount"),
                    payload.get("status") or "draft",
                    payload.get("priority") or "medium",
                    payload.get("pricing_model"),
                    payload.get("subcontractor_amount"),
                    payload.get("labor_cost"),
                    payload.get("materials_client_charge"),
                    payload.get("materials_actual_cost"),
                    payload.get("is_chargeable", True),
                    payload.get("requires_subcontractor", False),
                    payload.get("client_approval_required", False),
                )
                row = await self._fetch_variation(conn, company_id, variation_id)
        logger.info("variation created variation_id=%s company_id=%s", variation_id, company_id)
        return self._variation_row_to_dict(row)

    async def update_variation(
        self,
        company_id: str,
        variation_id: str,
        changes: Mapping[str, Any],
    ) -> dict[str, Any]:
        query = ScopedQuery("jv", company_id, tenant_columns=WRITE_TENANT_COLUMNS)
        query.equals("jv.id", variation_id, "uuid")
        set_sql = update_assignments(self._db_values(changes), VARIATION_UPDATE_COLUMNS, query.bind)

        with translate_database_errors("variation"):
            async with self.database.transaction() as conn:
                assigned_to = changes.get("assigned_to")
                if assigned_to is not None and not await self._user_in_company(conn, company_id, assigned_to):
                    raise RepositoryValidationError("assigned user not found for this company")
                updated_id = await conn.fetchval(
                    f"update job_variations jv set {set_sql} where {query.where_sql} returning jv.id::text",
                    *query.params,
                )
                if not updated_id:
                    raise RepositoryNotFoundError("variation not found")
                row = await self._fetch_variation(conn, company_id, updated_id)
        logger.info("variation updated variation_id=%s fields=%s", variation_id, ",".join(sorted(changes)))
        return self._variation_row_to_dict(row)

    async def delete_variation(self, company_id: str, variation_id: str) -> None:
        query = ScopedQuery("jv", company_id, tenant_columns=WRITE_TENANT_COLUMNS)
        query.equals("jv.id", variation_id, "uuid")
        with translate_database_errors("variation"):
            async with self.database.connection() as conn:
                deleted_id = await conn.fetchval(
                    f"""
                    update job_variations jv
                    set deleted_at = now(), updated_at = now()
                    where {query.where_sql}
                    returning jv.id::text
                    """,
                    *query.params,
                )
        if not deleted_id:
            raise RepositoryNotFoundError("variation not found")
        logger.info("variation deleted variation_id=%s company_id=%s", variation_id, company_id)

    async def _fetch_variation(
        self,
        conn: asyncpg.Connection,
        company_id: str,
        variation_id: str,
    ) -> asyncpg.Record | None:
        query = ScopedQuery("jv", company_id, tenant_columns=READ_TENANT_COLUMNS)
        query.equals("jv.id", variation_id, "uuid")
        return await conn.fetchrow(f"{VARIATION_SELECT_SQL} where {query.where_sql}", *query.params)

    @classmethod
    def _variation_row_to_dict(cls, row: asyncpg.Record) -> dict[str, Any]:
        item = {
            "id": row["id"],
            "job_id": row["job_id"],
            "contract_id": row["contract_id"],
            "variation_number": row["variation_number"],
            "title": row["title"],
            "description": row["description"],
            "status": row["status"],
            "priority": row["priority"],
            "assigned_to": row["assigned_to"],
            "pricing_model": row["pricing_model"],
            "is_chargeable": row["is_chargeable"],
            "requires_subcontractor": row["requires_subcontractor"],
            "client_approval_required": row["client_approval_required"],
            "job_name": row["job_name"],
            "job_address": row["job_address"],
            "contract_title": row["contract_title"],
            "subcontractor_name": row["subcontractor_name"],
            "created_by": row["created_by"],
            "created_by_name": cls._display_name(row["creator_first_name"], row["creator_last_name"]),
            "assigned_to_name": cls._display_name(row["assigned_first_name"], row["assigned_last_name"]),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
        for field in MONEY_FIELDS:
            item[field] = cls._coerce_float(row[field])
        return item
