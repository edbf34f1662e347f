from __future__ import annotations

import pytest

from fieldops.services.query import PageRequest, ScopedQuery, page_payload, update_assignments
from fieldops.services.repository import RepositoryValidationError


def test_scoped_query_always_starts_with_tenant_and_soft_delete() -> None:
    query = ScopedQuery("j", "company-1")
    assert query.where_sql == "j.company_id = $1::uuid and j.deleted_at is null"
    assert query.params == ["company-1"]


def test_scoped_query_ors_multiple_tenant_columns() -> None:
    query = ScopedQuery("jv", "company-1", tenant_columns=["j.company_id", "sc.company_id"])
    assert query.where_sql == "(j.company_id = $1::uuid or sc.company_id = $1::uuid) and jv.deleted_at is null"


def test_scoped_query_can_skip_soft_delete() -> None:
    query = ScopedQuery("p", "company-1", soft_delete=False)
    assert query.where_sql == "p.company_id = $1::uuid"


def test_optional_filters_append_one_predicate_each() -> None:
    query = ScopedQuery("j", "company-1")
    query.equals("j.status", "draft", "job_status")
    query.equals("j.site_id", None, "uuid")
    query.search(["j.name", "j.description"], "  Roof ")
    query.search(["j.job_type"], "   ")

    assert query.where_sql == (
        "j.company_id = $1::uuid and j.deleted_at is null"
        " and j.status = $2::job_status"
        " and (j.name ilike $3 escape '\\' or j.description ilike $3 escape '\\')"
    )
    assert query.params == ["company-1", "draft", "%Roof%"]


@pytest.mark.parametrize(
    ("term", "pattern"),
    [
        ("50%", "%50\\%%"),
        ("job_1", "%job\\_1%"),
        ("C:\\temp", "%C:\\\\temp%"),
    ],
)
def test_search_matches_wildcard_characters_literally(term: str, pattern: str) -> None:
    query = ScopedQuery("j", "company-1")
    query.search(["j.name"], term)
    assert query.params[-1] == pattern
    assert query.conditions[-1] == "(j.name ilike $2 escape '\\')"


def test_page_sql_binds_limit_and_offset_after_filters() -> None:
    query = ScopedQuery("s", "company-1")
    query.equals("s.status", "active")
    assert query.page_sql(PageRequest(page=3, limit=10)) == "limit $3 offset $4"
    assert query.params == ["company-1", "active", 10, 20]


@pytest.mark.parametrize(("page", "limit"), [(0, 20), (1, 0), (-1, -1)])
def test_page_request_rejects_non_positive_values(page: int, limit: int) -> None:
    with pytest.raises(RepositoryValidationError):
        PageRequest(page=page, limit=limit)


def test_page_request_defaults() -> None:
    request = PageRequest()
    assert (request.page, request.limit, request.offset) == (1, 20, 0)


@pytest.mark.parametrize("total", [0, 1, 19, 20, 21, 45, 100])
@pytest.mark.parametrize("limit", [1, 7, 20])
def test_has_more_iff_page_times_limit_below_total(total: int, limit: int) -> None:
    rows = list(range(total))
    for page in range(1, total // limit + 3):
        request = PageRequest(page=page, limit=limit)
        window = rows[request.offset : request.offset + limit]
        payload = page_payload(window, request, total)

        assert len(payload["data"]) <= limit
        assert payload["has_more"] is (page * limit < total)
        assert (payload["page"], payload["limit"], payload["total"]) == (page, limit, total)


def test_empty_page_is_a_normal_payload() -> None:
    payload = page_payload([], PageRequest(page=5, limit=10), 3)
    assert payload == {"data": [], "page": 5, "limit": 10, "total": 3, "has_more": False}


def test_update_assignments_renders_casts_and_updated_at() -> None:
    query = ScopedQuery("j", "company-1")
    sql = update_assignments(
        {"name": "Roof repair", "status": "planned"},
        {"name": "name", "status": "status::job_status"},
        query.bind,
    )
    assert sql == "name = $2, status = $3::job_status, updated_at = now()"
    assert query.params == ["company-1", "Roof repair", "planned"]


def test_update_assignments_rejects_empty_change_set() -> None:
    with pytest.raises(RepositoryValidationError, match="no fields supplied for update"):
        update_assignments({}, {"name": "name"}, ScopedQuery("j", "company-1").bind)


def test_update_assignments_rejects_unknown_field() -> None:
    with pytest.raises(RepositoryValidationError, match="cannot be updated"):
        update_assignments({"company_id": "other"}, {"name": "name"}, ScopedQuery("j", "company-1").bind)
