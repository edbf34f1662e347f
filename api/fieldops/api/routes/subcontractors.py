from uuid import UUID

from fastapi import APIRouter, Depends, Query

from fieldops.api.deps import get_page_request, get_subcontractors_repository
from fieldops.core.auth import MANAGER_ROLES, Principal
from fieldops.core.security import require_roles
from fieldops.schemas.common import Envelope, PageEnvelope
from fieldops.schemas.subcontractors import ContractOut, SubcontractorDetailOut, SubcontractorOut
from fieldops.services.query import PageRequest
from fieldops.services.subcontractors import SubcontractorFilters, SubcontractorsRepository

router = APIRouter()


@router.get("", response_model=PageEnvelope[SubcontractorOut])
async def list_subcontractors(
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: SubcontractorsRepository = Depends(get_subcontractors_repository),
    page: PageRequest = Depends(get_page_request),
    search: str | None = Query(default=None),
    trade: str | None = Query(default=None),
    is_active: bool | None = Query(default=None, alias="isActive"),
) -> PageEnvelope[SubcontractorOut]:
    filters = SubcontractorFilters(search=search, trade=trade, is_active=is_active)
    result = await repository.list_subcontractors(principal.company_id, filters, page)
    return PageEnvelope[SubcontractorOut](**result)


@router.get("/{subcontractor_id}", response_model=Envelope[SubcontractorDetailOut])
async def get_subcontractor(
    subcontractor_id: UUID,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: SubcontractorsRepository = Depends(get_subcontractors_repository),
) -> Envelope[SubcontractorDetailOut]:
    row = await repository.get_subcontractor(principal.company_id, str(subcontractor_id))
    return Envelope[SubcontractorDetailOut](data=SubcontractorDetailOut(**row))


@router.get("/{subcontractor_id}/contracts", response_model=Envelope[list[ContractOut]])
async def list_subcontractor_contracts(
    subcontractor_id: UUID,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: SubcontractorsRepository = Depends(get_subcontractors_repository),
) -> Envelope[list[ContractOut]]:
    rows = await repository.list_contracts(principal.company_id, str(subcontractor_id))
    return Envelope[list[ContractOut]](data=[ContractOut(**row) for row in rows])
