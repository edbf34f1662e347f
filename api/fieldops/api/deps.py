from fastapi import Depends, Query
from starlette.requests import Request

from fieldops.core.config import Settings, get_settings
from fieldops.services.budgets import BudgetsRepository
from fieldops.services.database import Database
from fieldops.services.jobs import JobsRepository
from fieldops.services.query import PageRequest
from fieldops.services.repository import RepositoryUnavailableError
from fieldops.services.sites import SitesRepository
from fieldops.services.subcontractors import SubcontractorsRepository
from fieldops.services.variations import VariationsRepository
from fieldops.services.workers import WorkersRepository


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RepositoryUnavailableError("database is not initialized")
    return database


def get_jobs_repository(database: Database = Depends(get_database)) -> JobsRepository:
    return JobsRepository(database)


def get_sites_repository(database: Database = Depends(get_database)) -> SitesRepository:
    return SitesRepository(database)


def get_budgets_repository(database: Database = Depends(get_database)) -> BudgetsRepository:
    return BudgetsRepository(database)


def get_variations_repository(database: Database = Depends(get_database)) -> VariationsRepository:
    return VariationsRepository(database)


def get_subcontractors_repository(database: Database = Depends(get_database)) -> SubcontractorsRepository:
    return SubcontractorsRepository(database)


def get_workers_repository(database: Database = Depends(get_database)) -> WorkersRepository:
    return WorkersRepository(database)


def get_page_request(
    settings: Settings = Depends(get_settings),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
) -> PageRequest:
    effective_limit = settings.default_page_limit if limit is None else min(limit, settings.max_page_limit)
    return PageRequest(page=page, limit=effective_limit)
