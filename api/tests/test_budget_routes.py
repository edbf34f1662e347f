from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from fieldops.api.deps import get_budgets_repository
from fieldops.main import app
from fieldops.services.budgets import summarize_budget
from fieldops.services.repository import RepositoryNotFoundError

from conftest import COMPANY_ID, OTHER_COMPANY_ID

SITE_ID = "77777777-7777-7777-7777-777777777777"
UNBUDGETED_SITE_ID = "99999999-9999-9999-9999-999999999999"


class FakeBudgetsRepository:
    async def get_site_budget_summary(self, company_id: str, site_id: str) -> dict[str, Any]:
        if company_id != COMPANY_ID or site_id not in (SITE_ID, UNBUDGETED_SITE_ID):
            raise RepositoryNotFoundError("site not found")
        if site_id == UNBUDGETED_SITE_ID:
            raise RepositoryNotFoundError("budget not found")
        now = datetime.now(timezone.utc)
        return summarize_budget(
            {
                "id": "b-1",
                "site_id": SITE_ID,
                "total_budget": 10000.0,
                "allocated_budget": 8000.0,
                "spent_budget": 0.0,
                "created_at": now,
                "updated_at": now,
            },
            [
                {"id": "c-1", "category_name": "Labour", "allocated_amount": 5000.0, "spent_amount": 2000.0},
                {"id": "c-2", "category_name": "Skips", "allocated_amount": 3000.0, "is_custom": True},
            ],
            2500.0,
        )


@pytest.fixture
def client(jwt_env: None) -> Iterator[TestClient]:
    app.dependency_overrides[get_budgets_repository] = lambda: FakeBudgetsRepository()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_site_budget_summary_is_camel_cased(client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
    response = client.get(f"/sites/{SITE_ID}/budget", headers=auth_headers("project_manager"))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["budget"]["totalBudget"] == 10000.0
    assert data["budget"]["siteId"] == SITE_ID
    assert [category["categoryName"] for category in data["categories"]] == ["Labour", "Skips"]
    assert data["categories"][1]["isCustom"] is True
    assert data["totalExpenses"] == 2500.0
    assert data["remainingBudget"] == 7500.0
    assert data["budgetUtilizationPercentage"] == 25.0


def test_site_without_budget_is_404(client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
    response = client.get(f"/sites/{UNBUDGETED_SITE_ID}/budget", headers=auth_headers("company_admin"))
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "budget not found"}


def test_budget_of_other_tenant_site_is_404(client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
    response = client.get(
        f"/sites/{SITE_ID}/budget",
        headers=auth_headers("company_admin", company_id=OTHER_COMPANY_ID),
    )
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "site not found"}


@pytest.mark.parametrize("role", ["worker", "viewer", "subcontractor"])
def test_budget_is_limited_to_managers(
    client: TestClient,
    auth_headers: Callable[..., dict[str, str]],
    role: str,
) -> None:
    response = client.get(f"/sites/{SITE_ID}/budget", headers=auth_headers(role))
    assert response.status_code == 403


def test_summary_of_zero_budget_reports_zero_utilization() -> None:
    summary = summarize_budget({"id": "b-1", "total_budget": 0.0}, [], 120.0)
    assert summary["budget_utilization_percentage"] == 0.0
    assert summary["remaining_budget"] == -120.0


def test_overspent_budget_reports_utilization_above_100() -> None:
    summary = summarize_budget({"id": "b-1", "total_budget": 3000.0}, [], 4000.0)
    assert summary["budget_utilization_percentage"] == 133.33
    assert summary["remaining_budget"] == -1000.0
