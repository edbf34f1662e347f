from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from fieldops.services.repository import RepositoryValidationError


def escape_like(term: str) -> str:
    """Make ``%``, ``_`` and ``\\`` match literally inside an ``ilike ... escape '\\'`` pattern."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ScopedQuery:
    """Parameterized WHERE builder that always carries the tenant and soft-delete predicates.

    ``tenant_columns`` lists the columns that may carry the tenant id; more than one
    column is OR-ed together (a variation belongs to a tenant through its job or
    its contract).
    """

    def __init__(
        self,
        alias: str,
        company_id: str,
        *,
        tenant_columns: Sequence[str] | None = None,
        soft_delete: bool = True,
    ) -> None:
        self.alias = alias
        self.params: list[Any] = []
        self.conditions: list[str] = []

        columns = list(tenant_columns) if tenant_columns else [f"{alias}.company_id"]
        tenant_token = self.bind(company_id)
        tenant_sql = " or ".join(f"{column} = {tenant_token}::uuid" for column in columns)
        self.conditions.append(f"({tenant_sql})" if len(columns) > 1 else tenant_sql)
        if soft_delete:
            self.conditions.append(f"{alias}.deleted_at is null")

    def bind(self, value: Any) -> str:
        self.params.append(value)
        return f"${len(self.params)}"

    def where(self, condition: str) -> None:
        self.conditions.append(condition)

    def equals(self, column: str, value: Any, cast: str | None = None) -> None:
        if value is None:
            return
        token = self.bind(value)
        self.conditions.append(f"{column} = {token}::{cast}" if cast else f"{column} = {token}")

    def search(self, columns: Sequence[str], term: str | None) -> None:
        if term is None:
            return
        stripped = term.strip()
        if not stripped:
            return
        token = self.bind(f"%{escape_like(stripped)}%")
        self.conditions.append(
            "(" + " or ".join(f"{column} ilike {token} escape '\\'" for column in columns) + ")"
        )

    @property
    def where_sql(self) -> str:
        return " and ".join(self.conditions)

    def page_sql(self, page: PageRequest) -> str:
        limit_token = self.bind(page.limit)
        offset_token = self.bind(page.offset)
        return f"limit {limit_token} offset {offset_token}"


@dataclass(slots=True, frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise RepositoryValidationError("page must be >= 1")
        if self.limit < 1:
            raise RepositoryValidationError("limit must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_payload(rows: Sequence[Any], request: PageRequest, total: int) -> dict[str, Any]:
    data = list(rows)
    return {
        "data": data,
        "page": request.page,
        "limit": request.limit,
        "total": total,
        "has_more": request.offset + len(data) < total,
    }


def update_assignments(
    changes: Mapping[str, Any],
    columns: Mapping[str, str],
    bind: Callable[[Any], str],
) -> str:
    """Render ``col = $n`` assignments for the supplied fields plus ``updated_at``.

    ``columns`` maps field names to ``column`` or ``column::type``.
    """
    assignments: list[str] = []
    for field, value in changes.items():
        target = columns.get(field)
        if target is None:
            raise RepositoryValidationError(f"field {field!r} cannot be updated")
        column, _, cast = target.partition("::")
        token = bind(value)
        assignments.append(f"{column} = {token}::{cast}" if cast else f"{column} = {token}")

    if not assignments:
        raise RepositoryValidationError("no fields supplied for update")

    assignments.append("updated_at = now()")
    return ", ".join(assignments)
