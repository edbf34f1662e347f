from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest

# Spans stay off in tests; main.py reads settings at import time.
os.environ.setdefault("FIELDOPS_OTEL_ENABLED", "false")

from fieldops.core.config import get_settings  # noqa: E402
from fieldops.core.security import encode_access_token  # noqa: E402

JWT_SECRET = "test-jwt-secret"
COMPANY_ID = "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"
OTHER_COMPANY_ID = "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb"
USER_ID = "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def jwt_env() -> Iterator[None]:
    os.environ["FIELDOPS_JWT_SECRET"] = JWT_SECRET
    get_settings.cache_clear()
    yield
    os.environ.pop("FIELDOPS_JWT_SECRET", None)
    get_settings.cache_clear()


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    def build(role: str, *, user_id: str = USER_ID, company_id: str = COMPANY_ID) -> dict[str, str]:
        token = encode_access_token(
            secret=JWT_SECRET,
            user_id=user_id,
            company_id=company_id,
            role=role,
            email=f"{role}@example.com",
        )
        return {"Authorization": f"Bearer {token}"}

    return build


class FakeTransaction:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn

    async def start(self) -> None:
        self.conn.events.append("begin")

    async def commit(self) -> None:
        self.conn.events.append("commit")

    async def rollback(self) -> None:
        self.conn.events.append("rollback")

    async def __aenter__(self) -> FakeTransaction:
        self.conn.events.append("savepoint")
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        self.conn.events.append("release" if exc_type is None else "rollback to savepoint")
        return False


class FakeConnection:
    """Records SQL and answers from scripted results keyed by statement prefix."""

    def __init__(
        self,
        *,
        execute_results: dict[str, Any] | None = None,
        fetchval_results: list[Any] | None = None,
    ) -> None:
        self.executed: list[str] = []
        self.events: list[str] = []
        self.execute_results = execute_results or {}
        self.fetchval_results = list(fetchval_results or [])

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    async def execute(self, sql: str, *args: Any) -> str:
        statement = " ".join(sql.split())
        self.executed.append(statement)
        for prefix, result in self.execute_results.items():
            if statement.startswith(prefix):
                if isinstance(result, BaseException):
                    raise result
                return result
        return "OK"

    async def fetchval(self, sql: str, *args: Any) -> Any:
        self.executed.append(" ".join(sql.split()))
        if not self.fetchval_results:
            return None
        return self.fetchval_results.pop(0)


class FakeDatabase:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.closed = False

    def connection(self) -> Any:
        conn = self.conn

        class _Acquire:
            async def __aenter__(self) -> FakeConnection:
                return conn

            async def __aexit__(self, *_: Any) -> bool:
                return False

        return _Acquire()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()
