from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

if TYPE_CHECKING:
    from fieldops.services.database import Database


class RepositoryError(Exception):
    """Base repository error."""


class RepositoryUnavailableError(RepositoryError):
    """Raised when the database is unavailable or not configured."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when the requested entity does not exist or is not visible to the tenant."""


class RepositoryConflictError(RepositoryError):
    """Raised when a write collides with a unique constraint."""


class RepositoryForbiddenError(RepositoryError):
    """Raised when an operation is not permitted for the actor."""


class RepositoryValidationError(RepositoryError):
    """Raised when payload validation fails before or during persistence."""


@contextmanager
def translate_database_errors(entity: str) -> Iterator[None]:
    try:
        yield
    except pg_exc.UniqueViolationError as exc:
        raise RepositoryConflictError(f"{entity} already exists") from exc
    except pg_exc.ForeignKeyViolationError as exc:
        raise RepositoryValidationError(f"{entity} references a record that does not exist") from exc
    except (pg_exc.NotNullViolationError, pg_exc.CheckViolationError) as exc:
        raise RepositoryValidationError(f"{entity} is missing required values") from exc
    except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
        raise RepositoryValidationError(f"invalid value for {entity}") from exc


class PostgresRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    @staticmethod
    def _coerce_text(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return str(value)

    @staticmethod
    def _coerce_int(value: Any) -> int:
        if value is None:
            return 0
        return int(value)

    @staticmethod
    def _coerce_float(value: Any) -> float | None:
        if value is None:
            return None
        return float(value)

    @staticmethod
    def _display_name(first_name: Any, last_name: Any) -> str | None:
        parts = [part.strip() for part in (first_name, last_name) if isinstance(part, str) and part.strip()]
        if not parts:
            return None
        return " ".join(parts)

    @staticmethod
    def _db_values(changes: Mapping[str, Any]) -> dict[str, Any]:
        # Timestamp columns are "timestamp without time zone" and hold UTC; money columns are numeric.
        values: dict[str, Any] = {}
        for key, value in changes.items():
            if isinstance(value, datetime) and value.tzinfo is not None:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            elif isinstance(value, float):
                value = Decimal(str(value))
            values[key] = value
        return values

    @staticmethod
    async def _job_in_company(conn: asyncpg.Connection, company_id: str, job_id: Any) -> bool:
        return bool(
            await conn.fetchval(
                """
                select exists (
                  select 1 from jobs
                  where id = $1::uuid and company_id = $2::uuid and deleted_at is null
                )
                """,
                job_id,
                company_id,
            )
        )

    @staticmethod
    async def _site_in_company(conn: asyncpg.Connection, company_id: str, site_id: Any) -> bool:
        return bool(
            await conn.fetchval(
                """
                select exists (
                  select 1 from sites
                  where id = $1::uuid and company_id = $2::uuid and deleted_at is null
                )
                """,
                site_id,
                company_id,
            )
        )

    @staticmethod
    async def _user_in_company(conn: asyncpg.Connection, company_id: str, user_id: Any) -> bool:
        return bool(
            await conn.fetchval(
                """
                select exists (
                  select 1 from users
                  where id = $1::uuid and company_id = $2::uuid and deleted_at is null
                )
                """,
                user_id,
                company_id,
            )
        )

    @staticmethod
    async def _contract_in_company(conn: asyncpg.Connection, company_id: str, contract_id: Any) -> bool:
        return bool(
            await conn.fetchval(
                """
                select exists (
                  select 1 from subcontractor_contracts
                  where id = $1::uuid and company_id = $2::uuid and deleted_at is null
                )
                """,
                contract_id,
                company_id,
            )
        )
