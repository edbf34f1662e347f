from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from fieldops.api.deps import get_workers_repository
from fieldops.main import app
from fieldops.services.repository import RepositoryValidationError

from conftest import COMPANY_ID, USER_ID


class FakeWorkersRepository:
    def __init__(self) -> None:
        self.profile: dict[str, Any] = {
            "id": USER_ID,
            "email": "worker@example.com",
            "first_name": "Sam",
            "last_name": "Worker",
            "role": "worker",
            "phone": None,
            "hourly_rate": 42.5,
            "company_id": COMPANY_ID,
            "company_name": "Acme Builders",
            "is_active": True,
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        self.calls: list[tuple[str, str]] = []

    async def get_profile(self, company_id: str, worker_id: str) -> dict[str, Any]:
        self.calls.append((company_id, worker_id))
        return self.profile

    async def update_profile(self, company_id: str, worker_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        if not changes:
            raise RepositoryValidationError("no fields supplied for update")
        self.calls.append((company_id, worker_id))
        self.profile.update(changes)
        return self.profile

    async def get_statistics(self, company_id: str, worker_id: str) -> dict[str, int]:
        self.calls.append((company_id, worker_id))
        return {
            "total_jobs_assigned": 5,
            "completed_jobs": 3,
            "active_jobs": 1,
            "safety_incidents_reported": 0,
            "tasks_completed": 12,
        }


@pytest.fixture
def fake_repo() -> FakeWorkersRepository:
    return FakeWorkersRepository()


@pytest.fixture
def client(jwt_env: None, fake_repo: FakeWorkersRepository) -> Iterator[TestClient]:
    app.dependency_overrides[get_workers_repository] = lambda: fake_repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_profile_is_read_for_token_subject(
    client: TestClient,
    fake_repo: FakeWorkersRepository,
    auth_headers: Callable[..., dict[str, str]],
) -> None:
    response = client.get("/worker/profile", headers=auth_headers("worker"))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["companyName"] == "Acme Builders"
    assert data["hourlyRate"] == 42.5
    assert fake_repo.calls == [(COMPANY_ID, USER_ID)]


def test_profile_is_worker_only(client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
    for role in ("company_admin", "foreman", "viewer"):
        assert client.get("/worker/profile", headers=auth_headers(role)).status_code == 403, role


def test_profile_update_is_partial(client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
    response = client.patch("/worker/profile", json={"phone": "0400 111 222"}, headers=auth_headers("worker"))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["phone"] == "0400 111 222"
    assert data["firstName"] == "Sam"


def test_profile_update_without_editable_fields_is_400(
    client: TestClient,
    auth_headers: Callable[..., dict[str, str]],
) -> None:
    response = client.patch("/worker/profile", json={"hourlyRate": 99}, headers=auth_headers("worker"))
    assert response.status_code == 400
    assert response.json()["error"] == "no fields supplied for update"


def test_statistics(client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
    response = client.get("/worker/profile/stats", headers=auth_headers("worker"))
    assert response.status_code == 200
    assert response.json()["data"] == {
        "totalJobsAssigned": 5,
        "completedJobs": 3,
        "activeJobs": 1,
        "safetyIncidentsReported": 0,
        "tasksCompleted": 12,
    }
