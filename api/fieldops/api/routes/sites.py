from uuid import UUID

from fastapi import APIRouter, Depends, Query

from fieldops.api.deps import get_budgets_repository, get_page_request, get_sites_repository
from fieldops.core.auth import FIELD_ROLES, MANAGER_ROLES, Principal
from fieldops.core.security import require_roles
from fieldops.schemas.budgets import BudgetSummaryOut
from fieldops.schemas.common import Envelope, PageEnvelope
from fieldops.schemas.sites import SiteJobOut, SiteListItemOut, SiteOut, SiteStatus, SiteWorkerOut
from fieldops.services.budgets import BudgetsRepository
from fieldops.services.query import PageRequest
from fieldops.services.sites import SiteFilters, SitesRepository

router = APIRouter()


@router.get("", response_model=PageEnvelope[SiteListItemOut])
async def list_sites(
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: SitesRepository = Depends(get_sites_repository),
    page: PageRequest = Depends(get_page_request),
    status: SiteStatus | None = Query(default=None),
    search: str | None = Query(default=None),
) -> PageEnvelope[SiteListItemOut]:
    result = await repository.list_sites(principal.company_id, SiteFilters(status=status, search=search), page)
    return PageEnvelope[SiteListItemOut](**result)


@router.get("/{site_id}", response_model=Envelope[SiteOut])
async def get_site(
    site_id: UUID,
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: SitesRepository = Depends(get_sites_repository),
) -> Envelope[SiteOut]:
    row = await repository.get_site(principal.company_id, str(site_id))
    return Envelope[SiteOut](data=SiteOut(**row))


@router.get("/{site_id}/jobs", response_model=Envelope[list[SiteJobOut]])
async def list_site_jobs(
    site_id: UUID,
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: SitesRepository = Depends(get_sites_repository),
) -> Envelope[list[SiteJobOut]]:
    rows = await repository.list_site_jobs(principal.company_id, str(site_id))
    return Envelope[list[SiteJobOut]](data=[SiteJobOut(**row) for row in rows])


@router.get("/{site_id}/workers", response_model=Envelope[list[SiteWorkerOut]])
async def list_site_workers(
    site_id: UUID,
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: SitesRepository = Depends(get_sites_repository),
) -> Envelope[list[SiteWorkerOut]]:
    rows = await repository.list_site_workers(principal.company_id, str(site_id))
    return Envelope[list[SiteWorkerOut]](data=[SiteWorkerOut(**row) for row in rows])


@router.get("/{site_id}/budget", response_model=Envelope[BudgetSummaryOut])
async def get_site_budget(
    site_id: UUID,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: BudgetsRepository = Depends(get_budgets_repository),
) -> Envelope[BudgetSummaryOut]:
    summary = await repository.get_site_budget_summary(principal.company_id, str(site_id))
    return Envelope[BudgetSummaryOut](data=BudgetSummaryOut(**summary))
