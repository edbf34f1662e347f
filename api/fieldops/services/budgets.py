from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from fieldops.services.repository import PostgresRepository, RepositoryNotFoundError, translate_database_errors


def summarize_budget(
    budget: Mapping[str, Any],
    categories: Sequence[Mapping[str, Any]],
    total_expenses: float,
) -> dict[str, Any]:
    """Combine a budget, its categories and its recorded spend into one read model.

    Remaining and utilization are measured against recorded expenses, not the
    denormalized ``spent_budget`` column.
    """
    total_budget = budget["total_budget"]
    utilization = (total_expenses / total_budget * 100) if total_budget > 0 else 0.0
    return {
        "budget": dict(budget),
        "categories": [dict(category) for category in categories],
        "total_expenses": total_expenses,
        "remaining_budget": total_budget - total_expenses,
        "budget_utilization_percentage": round(utilization, 2),
    }


class BudgetsRepository(PostgresRepository):
    async def get_site_budget_summary(self, company_id: str, site_id: str) -> dict[str, Any]:
        with translate_database_errors("budget"):
            async with self.database.connection() as conn:
                if not await self._site_in_company(conn, company_id, site_id):
                    raise RepositoryNotFoundError("site not found")
                budget = await conn.fetchrow(
                    """
                    select
                      b.id::text as id,
                      b.site_id::text as site_id,
                      b.total_budget,
                      b.allocated_budget,
                      b.spent_budget,
                      b.created_at,
                      b.updated_at
                    from site_budgets b
                    where b.site_id = $1::uuid
                      and b.company_id = $2::uuid
                      and b.deleted_at is null
                    """,
                    site_id,
                    company_id,
                )
                if not budget:
                    raise RepositoryNotFoundError("budget not found")
                categories = await conn.fetch(
                    """
                    select
                      c.id::text as id,
                      c.category_name,
                      c.description,
                      c.allocated_amount,
                      c.spent_amount,
                      c.is_custom
                    from site_budget_categories c
                    where c.site_budget_id = $1::uuid and c.deleted_at is null
                    order by c.created_at, c.id
                    """,
                    budget["id"],
                )
                total_expenses = await conn.fetchval(
                    """
                    select coalesce(sum(amount), 0)
                    from site_budget_expenses
                    where site_budget_id = $1::uuid and deleted_at is null
                    """,
                    budget["id"],
                )

        return summarize_budget(
            {
                "id": budget["id"],
                "site_id": budget["site_id"],
                "total_budget": self._coerce_float(budget["total_budget"]) or 0.0,
                "allocated_budget": self._coerce_float(budget["allocated_budget"]) or 0.0,
                "spent_budget": self._coerce_float(budget["spent_budget"]) or 0.0,
                "created_at": budget["created_at"],
                "updated_at": budget["updated_at"],
            },
            [
                {
                    "id": row["id"],
                    "category_name": row["category_name"],
                    "description": row["description"],
                    "allocated_amount": self._coerce_float(row["allocated_amount"]) or 0.0,
                    "spent_amount": self._coerce_float(row["spent_amount"]) or 0.0,
                    "is_custom": bool(row["is_custom"]),
                }
                for row in categories
            ],
            self._coerce_float(total_expenses) or 0.0,
        )
